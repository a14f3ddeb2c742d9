"""No-network signer.

Stands in for the token authority until a deployment signs over
``(digest, kernel_responses)`` for real. The placeholder value is the same
for every profile.
"""

from __future__ import annotations

from typing import Final

from krnl_payload.domain.models import SignedOpinion

PLACEHOLDER_SIGNATURE: Final[bytes] = (
    bytes.fromhex("8688e0a3d8b7c3b8845e5f6f77e5e5ca9f564cd1") + bytes(64) + b"\x1c"
)


class PlaceholderSigner:
    """Always approves with the fixed placeholder signature."""

    def sign(self, digest: bytes, kernel_responses: bytes) -> SignedOpinion:
        _ = (digest, kernel_responses)
        return SignedOpinion(
            kernel_response_signature=PLACEHOLDER_SIGNATURE,
            signature_token=PLACEHOLDER_SIGNATURE,
            final_opinion=True,
        )
