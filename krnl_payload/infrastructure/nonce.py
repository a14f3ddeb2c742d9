"""Nonce sources for the auth tuple."""

from __future__ import annotations

import secrets
import time
from typing import Callable

_ENTROPY_BITS = 64


class TimeEntropyNonceSource:
    """Unix seconds in the high bits, 64 random bits below.

    Unique per call without any shared counter, and still ordered by second.
    """

    def __init__(self, clock: Callable[[], float] = time.time, entropy: Callable[[int], int] = secrets.randbits) -> None:
        self._clock = clock
        self._entropy = entropy

    def next_nonce(self) -> int:
        seconds = int(self._clock())
        return (seconds << _ENTROPY_BITS) | self._entropy(_ENTROPY_BITS)


class UnixSecondsNonceSource:
    """Current Unix time in whole seconds; collides within the same second."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    def next_nonce(self) -> int:
        return int(self._clock())


def nonce_timestamp(nonce: int) -> int:
    """Recover the Unix seconds embedded by TimeEntropyNonceSource."""

    return nonce >> _ENTROPY_BITS
