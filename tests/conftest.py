"""Pytest configuration for payload builder tests."""
from __future__ import annotations

import pytest

from krnl_payload.infrastructure.profile_loader import bundled_profiles_root, load_profile
from tests.util import FixedNonceSource, RecordingEventSink


@pytest.fixture(autouse=True)
def _isolated_krnl_env(monkeypatch):
    """Keep host KRNL_* settings out of tests."""
    for key in ("KRNL_PROFILE", "KRNL_LIVE_ENABLED", "KRNL_NODE_TIMEOUT_SECONDS", "KRNL_EVENT_LOG_DIR"):
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def profile_a():
    return load_profile(bundled_profiles_root() / "chama_v2.yaml")


@pytest.fixture
def profile_b():
    return load_profile(bundled_profiles_root() / "chama_trusted_list.yaml")


@pytest.fixture
def fixed_nonce():
    return FixedNonceSource()


@pytest.fixture
def event_sink():
    return RecordingEventSink()
