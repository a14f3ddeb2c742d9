"""Application ports for the payload orchestrator.

This module defines pure contracts only. Concrete bindings live in the
infrastructure layer and are passed in by the composition root.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from krnl_payload.domain.models import RegistrationProfile, SignedOpinion


class KernelNodeError(RuntimeError):
    """A kernel-node round trip failed; ``step`` names the failing call."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step}: {message}")
        self.step = step


class Signer(Protocol):
    def sign(self, digest: bytes, kernel_responses: bytes) -> SignedOpinion: ...


class NonceSource(Protocol):
    def next_nonce(self) -> int: ...


@dataclass(frozen=True)
class KernelValidation:
    kernel_responses: bytes
    kernel_params: bytes


class KernelNodeClient(Protocol):
    """Remote kernel node: register, validate, then sign, strictly in that order."""

    def register(self, profile: RegistrationProfile) -> None: ...

    def validate(
        self,
        profile: RegistrationProfile,
        *,
        action: str,
        params: Any,
        user_address: str,
    ) -> KernelValidation: ...

    def sign(
        self,
        profile: RegistrationProfile,
        *,
        user_address: str,
        function_params: str,
        validation: KernelValidation,
    ) -> bytes: ...


class EventSink(Protocol):
    def record(self, event: Mapping[str, Any]) -> None: ...
