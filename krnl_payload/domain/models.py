"""Value types shared by the payload builder layers."""

from __future__ import annotations

from dataclasses import dataclass

from krnl_payload.domain.addresses import ADDRESS_LENGTH, bytes_to_hex
from krnl_payload.domain.kernel_catalog import unknown_kernel_ids

DIGEST_LENGTH = 32


@dataclass(frozen=True)
class RegistrationProfile:
    """Static identity of one deployment.

    A profile is immutable once built; an orchestrator is bound to exactly one
    profile for its whole lifetime.
    """

    name: str
    node_url: str
    authority_address: bytes
    kernel_ids: tuple[int, ...]
    contract_id: int
    dapp_id: int
    entry_id: bytes
    access_token: bytes
    runtime_digest: bytes

    def __post_init__(self) -> None:
        if len(self.authority_address) != ADDRESS_LENGTH:
            raise ValueError("authority_address must be 20 bytes")
        if len(self.entry_id) != DIGEST_LENGTH:
            raise ValueError("entry_id must be 32 bytes")
        if len(self.runtime_digest) != DIGEST_LENGTH:
            raise ValueError("runtime_digest must be 32 bytes")
        if not self.kernel_ids:
            raise ValueError("kernel_ids must not be empty")
        if len(set(self.kernel_ids)) != len(self.kernel_ids):
            raise ValueError("kernel_ids must be unique")
        if any(kid < 0 for kid in self.kernel_ids):
            raise ValueError("kernel_ids must be unsigned")
        unknown = unknown_kernel_ids(self.kernel_ids)
        if unknown:
            raise ValueError(f"kernel_ids not in kernel catalog: {unknown}")


@dataclass(frozen=True)
class KernelResponse:
    kernel_id: int
    response_data: bytes
    error_message: str = ""


ResponseTable = tuple[KernelResponse, ...]


@dataclass(frozen=True)
class AuthTuple:
    kernel_response_signature: bytes
    kernel_param_object_digest: bytes
    signature_token: bytes
    nonce: int
    final_opinion: bool

    def __post_init__(self) -> None:
        if len(self.kernel_param_object_digest) != DIGEST_LENGTH:
            raise ValueError("kernel_param_object_digest must be 32 bytes")
        if self.nonce < 0:
            raise ValueError("nonce must be unsigned")


@dataclass(frozen=True)
class SignedOpinion:
    """Signature material and decision returned by a signer."""

    kernel_response_signature: bytes
    signature_token: bytes
    final_opinion: bool


@dataclass(frozen=True)
class KrnlPayload:
    auth: bytes
    kernel_responses: bytes
    kernel_params: bytes

    def as_hex(self) -> dict[str, str]:
        """Render the payload under the field names the contract call expects."""

        return {
            "auth": bytes_to_hex(self.auth),
            "kernelResponses": bytes_to_hex(self.kernel_responses),
            "kernelParams": bytes_to_hex(self.kernel_params),
        }
