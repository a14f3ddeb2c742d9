"""Composition root for the payload orchestrator.

This is the only module that reads the process environment. Each call builds
an independent orchestrator bound to one profile; there is no process-wide
instance.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from krnl_payload.application.ports.gateways import EventSink, KernelNodeClient, NonceSource, Signer
from krnl_payload.application.use_cases.build_payload import PayloadOrchestrator
from krnl_payload.domain.models import KrnlPayload, RegistrationProfile
from krnl_payload.infrastructure.event_log import event_log_from_env
from krnl_payload.infrastructure.kernel_node_client import DEFAULT_TIMEOUT_SECONDS, HttpKernelNodeClient
from krnl_payload.infrastructure.nonce import TimeEntropyNonceSource
from krnl_payload.infrastructure.profile_loader import ProfileError, resolve_active_profile
from krnl_payload.infrastructure.signer import PlaceholderSigner

LIVE_ENABLED_ENV = "KRNL_LIVE_ENABLED"
NODE_TIMEOUT_ENV = "KRNL_NODE_TIMEOUT_SECONDS"


def live_enabled_from_env(env: Mapping[str, str]) -> bool:
    return str(env.get(LIVE_ENABLED_ENV, "0")).strip() == "1"


def node_timeout_from_env(env: Mapping[str, str]) -> float:
    raw = str(env.get(NODE_TIMEOUT_ENV, "")).strip()
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        raise ProfileError(f"{NODE_TIMEOUT_ENV} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ProfileError(f"{NODE_TIMEOUT_ENV} must be positive")
    return value


def build_payload_orchestrator(
    *,
    env: Mapping[str, str] | None = None,
    profile: RegistrationProfile | None = None,
    default_profile: str | None = None,
    live_enabled: bool | None = None,
    signer: Signer | None = None,
    nonce_source: NonceSource | None = None,
    node_client: KernelNodeClient | None = None,
    event_sink: EventSink | None = None,
) -> PayloadOrchestrator:
    """Wire an orchestrator from explicit arguments, falling back to ``env``.

    The profile is resolved once here; swapping profiles means building a new
    orchestrator.
    """

    effective_env = os.environ if env is None else env
    if profile is None:
        profile = resolve_active_profile(effective_env, default=default_profile)
    if live_enabled is None:
        live_enabled = live_enabled_from_env(effective_env)
    if live_enabled and node_client is None:
        node_client = HttpKernelNodeClient(timeout_seconds=node_timeout_from_env(effective_env))

    return PayloadOrchestrator(
        profile,
        signer=signer or PlaceholderSigner(),
        nonce_source=nonce_source or TimeEntropyNonceSource(),
        live_enabled=live_enabled,
        node_client=node_client,
        event_sink=event_sink or event_log_from_env(effective_env),
    )


def build_payload(
    action: str,
    params: Any,
    user_address: str | bytes,
    *,
    env: Mapping[str, str] | None = None,
) -> KrnlPayload:
    """One-shot convenience: wire from the environment and build a payload."""

    return build_payload_orchestrator(env=env).build_payload(action, params, user_address)
