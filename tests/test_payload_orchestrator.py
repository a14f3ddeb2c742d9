from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pytest
from eth_abi import decode
from eth_hash.auto import keccak

from krnl_payload.application.ports.gateways import KernelNodeError, KernelValidation
from krnl_payload.application.use_cases.build_payload import PayloadOrchestrator
from krnl_payload.domain.models import AuthTuple, KernelResponse
from krnl_payload.engine.abi_codec import (
    EncodingError,
    decode_auth_tuple,
    decode_kernel_responses,
    decode_params,
    encode_auth_tuple,
    encode_kernel_responses,
    encode_params,
)
from krnl_payload.engine.auth_assembler import compute_params_digest
from krnl_payload.infrastructure.signer import PLACEHOLDER_SIGNATURE, PlaceholderSigner
from tests.util import USER_ADDRESS, FixedNonceSource, RecordingEventSink, RecordingSigner


def _live_validation() -> KernelValidation:
    return KernelValidation(
        kernel_responses=encode_kernel_responses([KernelResponse(kernel_id=90, response_data=b"\x00" * 32)]),
        kernel_params=encode_params({"from": "node"}),
    )


def _live_auth() -> bytes:
    return encode_auth_tuple(
        AuthTuple(
            kernel_response_signature=b"\x22" * 65,
            kernel_param_object_digest=b"\x33" * 32,
            signature_token=b"\x44" * 65,
            nonce=7,
            final_opinion=True,
        )
    )


@dataclass
class StubNodeClient:
    """Kernel node double; ``fail_at`` names the step that raises."""

    fail_at: str | None = None
    validation: KernelValidation = field(default_factory=_live_validation)
    auth: bytes = field(default_factory=_live_auth)
    calls: list[str] = field(default_factory=list)

    def _step(self, step: str) -> None:
        self.calls.append(step)
        if self.fail_at == step:
            raise KernelNodeError(step, "node unavailable")

    def register(self, profile) -> None:
        self._step("register")

    def validate(self, profile, *, action, params, user_address) -> KernelValidation:
        self._step("validate")
        return self.validation

    def sign(self, profile, *, user_address, function_params, validation) -> bytes:
        self._step("sign")
        return self.auth


class BrokenSink:
    def record(self, event) -> None:
        raise OSError("disk full")


def _fallback(profile, **kwargs) -> PayloadOrchestrator:
    kwargs.setdefault("signer", PlaceholderSigner())
    kwargs.setdefault("nonce_source", FixedNonceSource())
    return PayloadOrchestrator(profile, **kwargs)


@pytest.mark.payload
def test_fallback_payload_is_deterministic_apart_from_nonce(profile_a):
    first = _fallback(profile_a, nonce_source=FixedNonceSource(1)).build_payload("contribute", {"amount": 5}, USER_ADDRESS)
    second = _fallback(profile_a, nonce_source=FixedNonceSource(2)).build_payload("contribute", {"amount": 5}, USER_ADDRESS)
    assert first.kernel_responses == second.kernel_responses
    assert first.kernel_params == second.kernel_params
    assert decode_auth_tuple(first.auth).nonce == 1
    assert decode_auth_tuple(second.auth).nonce == 2


@pytest.mark.payload
def test_fallback_digest_binds_params_and_user(profile_a):
    payload = _fallback(profile_a).build_payload("joinChama", {"chamaId": 3}, USER_ADDRESS)
    auth = decode_auth_tuple(payload.auth)
    user = bytes.fromhex(USER_ADDRESS[2:])
    assert auth.kernel_param_object_digest == keccak(payload.kernel_params + user)
    assert auth.kernel_param_object_digest == compute_params_digest(payload.kernel_params, USER_ADDRESS)
    assert auth.kernel_response_signature == PLACEHOLDER_SIGNATURE
    assert auth.signature_token == PLACEHOLDER_SIGNATURE
    assert auth.final_opinion is True


@pytest.mark.payload
def test_fallback_responses_follow_profile_kernel_order(profile_a, profile_b):
    payload_a = _fallback(profile_a).build_payload("payout", {}, USER_ADDRESS)
    payload_b = _fallback(profile_b).build_payload("payout", {}, USER_ADDRESS)
    assert [r.kernel_id for r in decode_kernel_responses(payload_a.kernel_responses)] == [90, 91, 340, 347, 883]
    assert [r.kernel_id for r in decode_kernel_responses(payload_b.kernel_responses)] == [337, 340]
    assert all(r.error_message == "" for r in decode_kernel_responses(payload_b.kernel_responses))


@pytest.mark.payload
def test_contribute_responses_decode_to_simulated_values(profile_a):
    payload = _fallback(profile_a).build_payload("contribute", {"amount": 1}, USER_ADDRESS)
    rows = {r.kernel_id: r.response_data for r in decode_kernel_responses(payload.kernel_responses)}
    assert decode(["uint256"], rows[90]) == (60,)
    assert decode(["bool"], rows[91]) == (True,)
    assert decode(["string"], rows[347]) == ("Wednesday 16:45",)
    assert decode(["uint256"], rows[883]) == (75,)


@pytest.mark.payload
def test_unknown_action_uses_default_table(profile_a):
    unknown = _fallback(profile_a).build_payload("somethingElse", {}, USER_ADDRESS)
    default = _fallback(profile_a).build_payload("__default__", {}, USER_ADDRESS)
    assert unknown.kernel_responses == default.kernel_responses


@pytest.mark.payload
def test_params_are_canonicalized(profile_b):
    orchestrator = _fallback(profile_b)
    one = orchestrator.build_payload("createChama", {"b": 1, "a": [1, 2]}, USER_ADDRESS)
    two = orchestrator.build_payload("createChama", {"a": [1, 2], "b": 1}, USER_ADDRESS)
    assert one.kernel_params == two.kernel_params
    assert decode_params(one.kernel_params) == b'{"a":[1,2],"b":1}'


@pytest.mark.payload
def test_empty_params_still_produce_an_envelope(profile_b):
    payload = _fallback(profile_b).build_payload("payout", {}, USER_ADDRESS)
    assert decode_params(payload.kernel_params) == b"{}"


@pytest.mark.payload
def test_signer_receives_digest_and_encoded_responses(profile_b):
    signer = RecordingSigner(final_opinion=False)
    payload = _fallback(profile_b, signer=signer).build_payload("payout", {}, USER_ADDRESS)
    auth = decode_auth_tuple(payload.auth)
    assert signer.calls == [(auth.kernel_param_object_digest, payload.kernel_responses)]
    assert auth.final_opinion is False
    assert auth.signature_token == signer.signature[::-1]


@pytest.mark.payload
@pytest.mark.parametrize("params", [{"x": float("nan")}, {"x": object()}])
def test_unencodable_params_raise(profile_a, params):
    with pytest.raises(EncodingError):
        _fallback(profile_a).build_payload("contribute", params, USER_ADDRESS)


@pytest.mark.payload
@pytest.mark.parametrize("user", ["", "0xnothex", "0x" + "ab" * 21])
def test_invalid_user_address_raises(profile_a, user):
    with pytest.raises(EncodingError):
        _fallback(profile_a).build_payload("contribute", {}, user)


@pytest.mark.payload
def test_encoding_errors_are_fatal_in_live_mode(profile_a):
    client = StubNodeClient()
    orchestrator = _fallback(profile_a, live_enabled=True, node_client=client)
    with pytest.raises(EncodingError):
        orchestrator.build_payload("contribute", {"x": float("inf")}, USER_ADDRESS)
    assert client.calls == []


@pytest.mark.payload
def test_live_enabled_requires_client(profile_a):
    with pytest.raises(ValueError):
        PayloadOrchestrator(profile_a, signer=PlaceholderSigner(), nonce_source=FixedNonceSource(), live_enabled=True)


@pytest.mark.payload
def test_live_success_returns_node_bytes(profile_a, event_sink: RecordingEventSink):
    client = StubNodeClient()
    orchestrator = _fallback(profile_a, live_enabled=True, node_client=client, event_sink=event_sink)
    payload = orchestrator.build_payload("joinChama", {"chamaId": 1}, USER_ADDRESS)
    assert client.calls == ["register", "validate", "sign"]
    assert payload.kernel_responses == client.validation.kernel_responses
    assert payload.kernel_params == client.validation.kernel_params
    assert payload.auth == client.auth
    assert event_sink.events == []


@pytest.mark.payload
@pytest.mark.parametrize(
    "fail_at,reason",
    [
        ("register", "FALLBACK-REGISTER-FAILED"),
        ("validate", "FALLBACK-VALIDATE-FAILED"),
        ("sign", "FALLBACK-SIGN-FAILED"),
    ],
)
def test_live_step_failure_falls_back(profile_a, event_sink: RecordingEventSink, fail_at, reason):
    client = StubNodeClient(fail_at=fail_at)
    orchestrator = _fallback(profile_a, live_enabled=True, node_client=client, event_sink=event_sink)
    payload = orchestrator.build_payload("contribute", {"amount": 5}, USER_ADDRESS)
    expected = _fallback(profile_a).build_payload("contribute", {"amount": 5}, USER_ADDRESS)
    assert payload == expected
    (event,) = event_sink.events
    assert event["reasonKey"] == reason
    assert event["step"] == fail_at
    assert event["action"] == "contribute"
    assert event["profile"] == "chama_v2"
    assert event["details"] == {"errorType": "KernelNodeError"}


@pytest.mark.payload
@pytest.mark.parametrize(
    "client",
    [
        StubNodeClient(validation=KernelValidation(kernel_responses=b"\x01", kernel_params=encode_params({}))),
        StubNodeClient(auth=b"\x00" * 5),
    ],
)
def test_undecodable_live_bytes_fall_back(profile_b, event_sink: RecordingEventSink, client):
    orchestrator = _fallback(profile_b, live_enabled=True, node_client=client, event_sink=event_sink)
    payload = orchestrator.build_payload("payout", {}, USER_ADDRESS)
    assert [r.kernel_id for r in decode_kernel_responses(payload.kernel_responses)] == [337, 340]
    (event,) = event_sink.events
    assert event["reasonKey"] == "FALLBACK-LIVE-PAYLOAD-INVALID"
    assert event["step"] == "assemble"


@pytest.mark.payload
def test_event_sink_failures_are_logged_not_raised(profile_a, caplog: pytest.LogCaptureFixture):
    client = StubNodeClient(fail_at="register")
    orchestrator = _fallback(profile_a, live_enabled=True, node_client=client, event_sink=BrokenSink())
    with caplog.at_level(logging.WARNING):
        payload = orchestrator.build_payload("payout", {}, USER_ADDRESS)
    assert payload.kernel_responses
    messages = [record.getMessage() for record in caplog.records]
    assert any("falling back" in message for message in messages)
    assert any("disk full" in message for message in messages)


@pytest.mark.payload
def test_payload_hex_view(profile_b):
    view = _fallback(profile_b).build_payload("payout", {}, USER_ADDRESS).as_hex()
    assert set(view) == {"auth", "kernelResponses", "kernelParams"}
    assert all(value.startswith("0x") for value in view.values())


@pytest.mark.payload
def test_lone_surrogate_params_raise_before_live_steps(profile_a):
    client = StubNodeClient()
    orchestrator = _fallback(profile_a, live_enabled=True, node_client=client)
    with pytest.raises(EncodingError):
        orchestrator.build_payload("contribute", {"name": "\ud800"}, USER_ADDRESS)
    assert client.calls == []


@pytest.mark.payload
def test_lone_surrogate_params_raise_in_fallback(profile_b):
    with pytest.raises(EncodingError):
        _fallback(profile_b).build_payload("joinChama", {"member": "\udfff"}, USER_ADDRESS)
