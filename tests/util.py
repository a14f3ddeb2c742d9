from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

from krnl_payload.domain.models import SignedOpinion

REPO_ROOT = Path(__file__).resolve().parents[1]

USER_ADDRESS = "0xAbC0000000000000000000000000000000000123"


def run(cmd: list[str], *, env: dict[str, str] | None = None, cwd: Path | None = None, stdin: str | None = None) -> subprocess.CompletedProcess:
    e = os.environ.copy()
    if env:
        e.update(env)
    return subprocess.run(
        cmd,
        cwd=str(cwd or REPO_ROOT),
        env=e,
        input=stdin,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=False,
    )


def run_build_payload(args: list[str], *, env: dict[str, str] | None = None, stdin: str | None = None) -> subprocess.CompletedProcess:
    return run([sys.executable, "scripts/build_krnl_payload.py", *args], env=env, stdin=stdin)


@dataclass
class FixedNonceSource:
    value: int = 1_700_000_000

    def next_nonce(self) -> int:
        return self.value


@dataclass
class RecordingSigner:
    """Signer double that records inputs and returns a configurable opinion."""

    final_opinion: bool = True
    signature: bytes = b"\x11" * 65
    calls: list[tuple[bytes, bytes]] = field(default_factory=list)

    def sign(self, digest: bytes, kernel_responses: bytes) -> SignedOpinion:
        self.calls.append((digest, kernel_responses))
        return SignedOpinion(
            kernel_response_signature=self.signature,
            signature_token=self.signature[::-1],
            final_opinion=self.final_opinion,
        )


@dataclass
class RecordingEventSink:
    events: list[dict] = field(default_factory=list)

    def record(self, event) -> None:
        self.events.append(dict(event))
