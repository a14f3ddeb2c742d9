"""Live/fallback state machine for a single payload build.

A build starts in ``live`` only when the live path is enabled; any failure
moves it to ``fallback`` and it never returns to ``live`` within the same call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from krnl_payload.engine.reason_codes import FALLBACK_LIVE_DISABLED, REASON_CODE_NONE, reason_for_step

PayloadMode = Literal["live", "fallback"]


@dataclass(frozen=True)
class PayloadState:
    mode: PayloadMode
    step: str
    reason_code: str


def initial_state(*, live_enabled: bool) -> PayloadState:
    if live_enabled:
        return PayloadState(mode="live", step="register", reason_code=REASON_CODE_NONE)
    return PayloadState(mode="fallback", step="resolve", reason_code=FALLBACK_LIVE_DISABLED)


def advance(current: PayloadState, *, step: str) -> PayloadState:
    """Move a live build on to ``step``; fallback states are returned unchanged."""

    if current.mode != "live":
        return current
    candidate = PayloadState(mode="live", step=step.strip(), reason_code=REASON_CODE_NONE)
    if candidate == current:
        return current
    return candidate


def fall_back(current: PayloadState) -> PayloadState:
    """Leave the live path at the current step.

    Falling back is unconditional and final; calling it on a fallback state
    keeps the original reason.
    """

    if current.mode == "fallback":
        return current
    return PayloadState(mode="fallback", step="resolve", reason_code=reason_for_step(current.step))
