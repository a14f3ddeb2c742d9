"""Reason codes recorded when a payload build leaves the live path.

Values are part of the fallback event record.
"""

from __future__ import annotations

from typing import Final

# Sentinel used when the live path completed.
REASON_CODE_NONE: Final[str] = "none"

FALLBACK_LIVE_DISABLED: Final[str] = "FALLBACK-LIVE-DISABLED"
FALLBACK_REGISTER_FAILED: Final[str] = "FALLBACK-REGISTER-FAILED"
FALLBACK_VALIDATE_FAILED: Final[str] = "FALLBACK-VALIDATE-FAILED"
FALLBACK_SIGN_FAILED: Final[str] = "FALLBACK-SIGN-FAILED"
FALLBACK_LIVE_PAYLOAD_INVALID: Final[str] = "FALLBACK-LIVE-PAYLOAD-INVALID"

STEP_REASON_CODES: Final[dict[str, str]] = {
    "register": FALLBACK_REGISTER_FAILED,
    "validate": FALLBACK_VALIDATE_FAILED,
    "sign": FALLBACK_SIGN_FAILED,
    "assemble": FALLBACK_LIVE_PAYLOAD_INVALID,
}


def reason_for_step(step: str) -> str:
    return STEP_REASON_CODES.get(step, FALLBACK_LIVE_PAYLOAD_INVALID)
