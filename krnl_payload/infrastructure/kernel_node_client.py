"""HTTP client for a remote kernel node.

Each round trip is a separate POST with its own timeout. Any transport error,
timeout, non-2xx status or malformed body is raised as ``KernelNodeError``
carrying the step name, so the orchestrator can fall back.
"""

from __future__ import annotations

from typing import Any

import httpx

from krnl_payload.application.ports.gateways import KernelNodeError, KernelValidation
from krnl_payload.domain.addresses import bytes_to_hex, hex_to_bytes
from krnl_payload.domain.models import RegistrationProfile

DEFAULT_TIMEOUT_SECONDS = 10.0

REGISTER_PATH = "/api/register"
VALIDATE_PATH = "/api/validate"
SIGN_PATH = "/api/sign"


class HttpKernelNodeClient:
    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport

    def _post(self, step: str, url: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(url, json=body, headers={"Content-Type": "application/json"})
        except httpx.HTTPError as exc:
            raise KernelNodeError(step, f"request failed: {exc}") from exc
        if not response.is_success:
            raise KernelNodeError(step, f"status {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise KernelNodeError(step, f"response is not JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise KernelNodeError(step, "response root must be a JSON object")
        return data

    @staticmethod
    def _hex_field(step: str, data: dict[str, Any], field: str) -> bytes:
        raw = data.get(field)
        if not isinstance(raw, str) or not raw.strip():
            raise KernelNodeError(step, f"response field {field} missing")
        try:
            return hex_to_bytes(raw, purpose=field)
        except ValueError as exc:
            raise KernelNodeError(step, str(exc)) from exc

    def register(self, profile: RegistrationProfile) -> None:
        self._post(
            "register",
            profile.node_url + REGISTER_PATH,
            {
                "entryId": bytes_to_hex(profile.entry_id),
                "tokenAuthority": bytes_to_hex(profile.authority_address),
                "runtimeDigest": bytes_to_hex(profile.runtime_digest),
            },
        )

    def validate(
        self,
        profile: RegistrationProfile,
        *,
        action: str,
        params: Any,
        user_address: str,
    ) -> KernelValidation:
        data = self._post(
            "validate",
            profile.node_url + VALIDATE_PATH,
            {
                "entryId": bytes_to_hex(profile.entry_id),
                "action": action,
                "params": params,
                "userAddress": user_address,
                "tokenAuthority": bytes_to_hex(profile.authority_address),
                "kernelIds": list(profile.kernel_ids),
            },
        )
        return KernelValidation(
            kernel_responses=self._hex_field("validate", data, "kernelResponses"),
            kernel_params=self._hex_field("validate", data, "kernelParams"),
        )

    def sign(
        self,
        profile: RegistrationProfile,
        *,
        user_address: str,
        function_params: str,
        validation: KernelValidation,
    ) -> bytes:
        data = self._post(
            "sign",
            profile.node_url + SIGN_PATH,
            {
                "entryId": bytes_to_hex(profile.entry_id),
                "tokenAuthority": bytes_to_hex(profile.authority_address),
                "userAddress": user_address,
                "functionParams": function_params,
                "kernelResponses": bytes_to_hex(validation.kernel_responses),
                "kernelParams": bytes_to_hex(validation.kernel_params),
            },
        )
        return self._hex_field("sign", data, "auth")
