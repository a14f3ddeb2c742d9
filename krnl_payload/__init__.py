"""Kernel authorization payload builder for privileged chama contract calls."""

from krnl_payload.application.use_cases.build_payload import PayloadOrchestrator
from krnl_payload.domain.models import AuthTuple, KernelResponse, KrnlPayload, RegistrationProfile
from krnl_payload.engine.abi_codec import EncodingError
from krnl_payload.infrastructure.profile_loader import ProfileError, load_profile, resolve_active_profile
from krnl_payload.infrastructure.wiring import build_payload, build_payload_orchestrator

__all__ = [
    "AuthTuple",
    "EncodingError",
    "KernelResponse",
    "KrnlPayload",
    "PayloadOrchestrator",
    "ProfileError",
    "RegistrationProfile",
    "build_payload",
    "build_payload_orchestrator",
    "load_profile",
    "resolve_active_profile",
]
