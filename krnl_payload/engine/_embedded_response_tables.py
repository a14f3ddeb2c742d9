"""Embedded simulated kernel outputs, keyed by action then kernel id.

Used by the fallback path when no kernel node is consulted. Every table must
carry a value for every kernel in the kernel catalog.
"""

from __future__ import annotations

from typing import Final

DEFAULT_ACTION: Final[str] = "__default__"

KNOWN_ACTIONS: Final[tuple[str, ...]] = ("createChama", "joinChama", "contribute", "payout")

EMBEDDED_RESPONSE_TABLES: Final[dict[str, dict[int, object]]] = {
    "createChama": {
        90: 75,
        91: True,
        337: False,
        340: True,
        347: "Monday 14:30",
        883: 85,
    },
    "joinChama": {
        90: 65,
        91: True,
        337: False,
        340: True,
        347: "Tuesday 10:15",
        883: 70,
    },
    "contribute": {
        90: 60,
        91: True,
        337: False,
        340: True,
        347: "Wednesday 16:45",
        883: 75,
    },
    "payout": {
        90: 80,
        91: True,
        337: False,
        340: True,
        347: "Thursday 09:30",
        883: 90,
    },
    DEFAULT_ACTION: {
        90: 70,
        91: True,
        337: False,
        340: True,
        347: "Friday 12:00",
        883: 80,
    },
}
