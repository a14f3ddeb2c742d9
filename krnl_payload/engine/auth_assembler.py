"""Binding digest and auth tuple assembly."""

from __future__ import annotations

from typing import TYPE_CHECKING

from eth_hash.auto import keccak

from krnl_payload.domain.addresses import normalize_address
from krnl_payload.domain.models import AuthTuple

if TYPE_CHECKING:
    from krnl_payload.application.ports.gateways import NonceSource, Signer


def compute_params_digest(kernel_params: bytes, user_address: str | bytes) -> bytes:
    """keccak256 over the encoded params followed by the 20-byte caller address."""

    return keccak(bytes(kernel_params) + normalize_address(user_address))


def build_auth(
    kernel_params: bytes,
    user_address: str | bytes,
    *,
    kernel_responses: bytes,
    signer: "Signer",
    nonce_source: "NonceSource",
) -> AuthTuple:
    """Assemble the auth tuple for one call.

    The digest is recomputed on every call. A signer may return a negative
    opinion; it is carried through unchanged.
    """

    digest = compute_params_digest(kernel_params, user_address)
    opinion = signer.sign(digest, kernel_responses)
    return AuthTuple(
        kernel_response_signature=opinion.kernel_response_signature,
        kernel_param_object_digest=digest,
        signature_token=opinion.signature_token,
        nonce=nonce_source.next_nonce(),
        final_opinion=bool(opinion.final_opinion),
    )
