"""Contract ABI encoding for the three KrnlPayload fields.

Layouts are fixed by the verifying contract:
- kernel responses: ``(uint256,bytes,string)[]``
- kernel params:    ``bytes`` wrapping canonical JSON text
- auth:             ``(bytes,bytes32,bytes,uint256,bool)`` as top-level arguments
"""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError as AbiEncodingError

from krnl_payload.domain.canonical_json import CanonicalJsonError, canonical_json_bytes
from krnl_payload.domain.models import AuthTuple, KernelResponse, ResponseTable

KERNEL_RESPONSES_SCHEMA: tuple[str, ...] = ("(uint256,bytes,string)[]",)
KERNEL_PARAMS_SCHEMA: tuple[str, ...] = ("bytes",)
AUTH_SCHEMA: tuple[str, ...] = ("bytes", "bytes32", "bytes", "uint256", "bool")


class EncodingError(ValueError):
    """Raised when a payload field cannot be encoded faithfully."""


def encode_value(abi_type: str, value: Any) -> bytes:
    """Encode a single kernel return value with its ABI type."""

    try:
        return encode([abi_type], [value])
    except (AbiEncodingError, TypeError, ValueError) as exc:
        raise EncodingError(f"cannot encode {value!r} as {abi_type}: {exc}") from exc


def encode_kernel_responses(responses: ResponseTable | Sequence[KernelResponse]) -> bytes:
    rows = [(r.kernel_id, r.response_data, r.error_message) for r in responses]
    try:
        return encode(list(KERNEL_RESPONSES_SCHEMA), [rows])
    except (AbiEncodingError, TypeError, ValueError) as exc:
        raise EncodingError(f"cannot encode kernel responses: {exc}") from exc


def encode_params(params: Any) -> bytes:
    """Wrap the canonical JSON text of ``params`` as a single ABI ``bytes`` value.

    An empty structure still yields a non-empty envelope (``{}`` or ``[]``).
    """

    try:
        text = canonical_json_bytes(params)
    except CanonicalJsonError as exc:
        raise EncodingError(str(exc)) from exc
    return encode(list(KERNEL_PARAMS_SCHEMA), [text])


def encode_auth_tuple(auth: AuthTuple) -> bytes:
    values = [
        auth.kernel_response_signature,
        auth.kernel_param_object_digest,
        auth.signature_token,
        auth.nonce,
        bool(auth.final_opinion),
    ]
    try:
        return encode(list(AUTH_SCHEMA), values)
    except (AbiEncodingError, TypeError, ValueError) as exc:
        raise EncodingError(f"cannot encode auth tuple: {exc}") from exc


def decode_kernel_responses(data: bytes) -> ResponseTable:
    try:
        (rows,) = decode(list(KERNEL_RESPONSES_SCHEMA), data)
    except (DecodingError, TypeError, ValueError) as exc:
        raise EncodingError(f"kernel responses are not ABI-decodable: {exc}") from exc
    return tuple(
        KernelResponse(kernel_id=kernel_id, response_data=response_data, error_message=error_message)
        for kernel_id, response_data, error_message in rows
    )


def decode_params(data: bytes) -> bytes:
    """Return the inner canonical JSON bytes of an encoded params envelope."""

    try:
        (inner,) = decode(list(KERNEL_PARAMS_SCHEMA), data)
    except (DecodingError, TypeError, ValueError) as exc:
        raise EncodingError(f"kernel params are not ABI-decodable: {exc}") from exc
    return inner


def decode_auth_tuple(data: bytes) -> AuthTuple:
    try:
        signature, digest, token, nonce, opinion = decode(list(AUTH_SCHEMA), data)
    except (DecodingError, TypeError, ValueError) as exc:
        raise EncodingError(f"auth is not ABI-decodable: {exc}") from exc
    return AuthTuple(
        kernel_response_signature=signature,
        kernel_param_object_digest=digest,
        signature_token=token,
        nonce=nonce,
        final_opinion=opinion,
    )
