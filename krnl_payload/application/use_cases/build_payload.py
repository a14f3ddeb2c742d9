"""Payload orchestration: live kernel-node path with local fallback."""

from __future__ import annotations

import logging
from typing import Any

from krnl_payload.application.ports.gateways import EventSink, KernelNodeClient, NonceSource, Signer
from krnl_payload.domain.addresses import AddressError, address_hex, normalize_address
from krnl_payload.domain.canonical_json import CanonicalJsonError, canonical_json_text
from krnl_payload.domain.models import KrnlPayload, RegistrationProfile
from krnl_payload.engine.abi_codec import (
    EncodingError,
    decode_auth_tuple,
    decode_kernel_responses,
    decode_params,
    encode_auth_tuple,
    encode_kernel_responses,
    encode_params,
)
from krnl_payload.engine.auth_assembler import build_auth
from krnl_payload.engine.response_resolver import resolve_response_table
from krnl_payload.engine.state_machine import PayloadState, advance, fall_back, initial_state

logger = logging.getLogger(__name__)


class PayloadOrchestrator:
    """Builds a fresh KrnlPayload per privileged call for one registration profile.

    ``build_payload`` only raises ``EncodingError`` (malformed params or user
    address); every live-path failure degrades to the local fallback.
    """

    def __init__(
        self,
        profile: RegistrationProfile,
        *,
        signer: Signer,
        nonce_source: NonceSource,
        live_enabled: bool = False,
        node_client: KernelNodeClient | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        if live_enabled and node_client is None:
            raise ValueError("live_enabled requires a kernel node client")
        self._profile = profile
        self._signer = signer
        self._nonce_source = nonce_source
        self._live_enabled = live_enabled
        self._node_client = node_client
        self._event_sink = event_sink

    @property
    def profile(self) -> RegistrationProfile:
        return self._profile

    @property
    def live_enabled(self) -> bool:
        return self._live_enabled

    def build_payload(self, action: str, params: Any, user_address: str | bytes) -> KrnlPayload:
        try:
            user = normalize_address(user_address)
        except AddressError as exc:
            raise EncodingError(f"invalid user address: {exc}") from exc
        try:
            function_params = canonical_json_text(params)
        except CanonicalJsonError as exc:
            raise EncodingError(str(exc)) from exc

        state = initial_state(live_enabled=self._live_enabled)
        if state.mode == "live":
            payload, state = self._build_live(state, action, params, user, function_params)
            if payload is not None:
                logger.debug("[KRNL] live payload built for %s (profile=%s)", action, self._profile.name)
                return payload
        else:
            logger.debug("[KRNL] %s: using local payload for %s", state.reason_code, action)

        return self._build_fallback(action, params, user)

    def _build_live(
        self,
        state: PayloadState,
        action: str,
        params: Any,
        user: bytes,
        function_params: str,
    ) -> tuple[KrnlPayload | None, PayloadState]:
        client = self._node_client
        if client is None:
            raise RuntimeError("live path requires a kernel node client")
        user_hex = address_hex(user)
        try:
            client.register(self._profile)
            state = advance(state, step="validate")
            validation = client.validate(self._profile, action=action, params=params, user_address=user_hex)
            state = advance(state, step="sign")
            auth = client.sign(
                self._profile,
                user_address=user_hex,
                function_params=function_params,
                validation=validation,
            )
            state = advance(state, step="assemble")
            decode_kernel_responses(validation.kernel_responses)
            decode_params(validation.kernel_params)
            decode_auth_tuple(auth)
        except Exception as exc:
            failed_step = state.step
            state = fall_back(state)
            logger.warning("[KRNL] live %s step failed for %s, falling back: %s", failed_step, action, exc)
            self._record_fallback(state, failed_step=failed_step, action=action, error=exc)
            return None, state

        return (
            KrnlPayload(
                auth=auth,
                kernel_responses=validation.kernel_responses,
                kernel_params=validation.kernel_params,
            ),
            state,
        )

    def _build_fallback(self, action: str, params: Any, user: bytes) -> KrnlPayload:
        table = resolve_response_table(action, self._profile.kernel_ids)
        kernel_responses = encode_kernel_responses(table)
        kernel_params = encode_params(params)
        auth = build_auth(
            kernel_params,
            user,
            kernel_responses=kernel_responses,
            signer=self._signer,
            nonce_source=self._nonce_source,
        )
        return KrnlPayload(
            auth=encode_auth_tuple(auth),
            kernel_responses=kernel_responses,
            kernel_params=kernel_params,
        )

    def _record_fallback(self, state: PayloadState, *, failed_step: str, action: str, error: Exception) -> None:
        if self._event_sink is None:
            return
        event = {
            "reasonKey": state.reason_code,
            "step": failed_step,
            "action": action,
            "profile": self._profile.name,
            "message": str(error),
            "details": {"errorType": type(error).__name__},
        }
        try:
            self._event_sink.record(event)
        except Exception as exc:
            logger.warning("[KRNL] fallback event not recorded: %s", exc)
