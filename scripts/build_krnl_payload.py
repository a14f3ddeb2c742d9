#!/usr/bin/env python3

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from krnl_payload.engine.abi_codec import EncodingError
from krnl_payload.infrastructure.profile_loader import ProfileError, bundled_profile_names
from krnl_payload.infrastructure.wiring import build_payload_orchestrator

DEFAULT_PROFILE = "chama_v2"


def _read_params(raw: str) -> Any:
    if raw == "-":
        raw = sys.stdin.read()
    return json.loads(raw)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a kernel authorization payload and print it as hex JSON.")
    parser.add_argument("--action", required=True, help="Privileged action, e.g. createChama, joinChama, contribute, payout.")
    parser.add_argument(
        "--params",
        default="{}",
        help="Action parameters as JSON text, or '-' to read them from stdin (default: {}).",
    )
    parser.add_argument("--user", required=True, help="Caller account address (0x-prefixed hex).")
    parser.add_argument(
        "--profile",
        default=None,
        help=f"Bundled profile name ({', '.join(bundled_profile_names())}) or YAML path. "
        f"Default: $KRNL_PROFILE, then {DEFAULT_PROFILE}.",
    )
    parser.add_argument("--live", action="store_true", help="Try the remote kernel node before the local fallback.")
    parser.add_argument("--verbose", action="store_true", help="Log fallback decisions to stderr.")
    return parser.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        params = _read_params(args.params)
    except json.JSONDecodeError as exc:
        print(f"FAIL: invalid params JSON: {exc}")
        return 1

    env = dict(os.environ)
    if args.profile:
        env["KRNL_PROFILE"] = args.profile

    try:
        orchestrator = build_payload_orchestrator(
            env=env,
            default_profile=DEFAULT_PROFILE,
            live_enabled=True if args.live else None,
        )
    except ProfileError as exc:
        print(f"FAIL: {exc}")
        return 1

    try:
        payload = orchestrator.build_payload(args.action, params, args.user)
    except EncodingError as exc:
        print(f"FAIL: {exc}")
        return 1

    sys.stdout.write(json.dumps(payload.as_hex(), indent=2) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
