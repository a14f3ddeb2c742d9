"""Loader for registration profiles.

Fail-closed: a profile that cannot be read, does not carry the expected schema
tag, or names a kernel unknown to the kernel catalog is rejected before any
payload is built.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from krnl_payload.domain.addresses import ADDRESS_LENGTH, fixed_bytes, hex_to_bytes
from krnl_payload.domain.kernel_catalog import unknown_kernel_ids
from krnl_payload.domain.models import DIGEST_LENGTH, RegistrationProfile

PROFILE_SCHEMA = "krnl.registration-profile.v1"
PROFILE_ENV = "KRNL_PROFILE"

_REQUIRED_FIELDS = (
    "name",
    "node_url",
    "authority_address",
    "kernel_ids",
    "contract_id",
    "dapp_id",
    "entry_id",
    "access_token",
    "runtime_digest",
)


class ProfileError(RuntimeError):
    pass


def bundled_profiles_root() -> Path:
    return Path(__file__).resolve().parent.parent / "profiles"


def bundled_profile_names() -> list[str]:
    return sorted(p.stem for p in bundled_profiles_root().glob("*.yaml"))


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ProfileError(f"profile unreadable ({path}): {exc}") from exc
    if not isinstance(data, dict) or not data:
        raise ProfileError(f"profile empty/invalid: {path}")
    if data.get("schema") != PROFILE_SCHEMA:
        raise ProfileError(f"profile schema must be {PROFILE_SCHEMA}: {path}")
    profile = data.get("profile")
    if not isinstance(profile, dict):
        raise ProfileError(f"profile mapping missing: {path}")
    return profile


def _as_int(raw: Any, *, field: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ProfileError(f"{field} must be an integer")
    return raw


def profile_from_mapping(raw: Mapping[str, Any], *, source: str = "<mapping>") -> RegistrationProfile:
    missing = [field for field in _REQUIRED_FIELDS if field not in raw]
    if missing:
        raise ProfileError(f"profile {source} missing fields: {', '.join(missing)}")

    kernel_ids_raw = raw["kernel_ids"]
    if not isinstance(kernel_ids_raw, list):
        raise ProfileError(f"profile {source}: kernel_ids must be a list")
    kernel_ids = tuple(_as_int(kid, field="kernel_ids[]") for kid in kernel_ids_raw)
    unknown = unknown_kernel_ids(kernel_ids)
    if unknown:
        raise ProfileError(f"profile {source}: kernels not in catalog: {unknown}")

    node_url = str(raw["node_url"] or "").strip()
    if not node_url.startswith(("http://", "https://")):
        raise ProfileError(f"profile {source}: node_url must be an http(s) URL")

    try:
        return RegistrationProfile(
            name=str(raw["name"]).strip(),
            node_url=node_url.rstrip("/"),
            authority_address=fixed_bytes(raw["authority_address"], length=ADDRESS_LENGTH, purpose="authority_address"),
            kernel_ids=kernel_ids,
            contract_id=_as_int(raw["contract_id"], field="contract_id"),
            dapp_id=_as_int(raw["dapp_id"], field="dapp_id"),
            entry_id=fixed_bytes(raw["entry_id"], length=DIGEST_LENGTH, purpose="entry_id"),
            access_token=hex_to_bytes(raw["access_token"], purpose="access_token"),
            runtime_digest=fixed_bytes(raw["runtime_digest"], length=DIGEST_LENGTH, purpose="runtime_digest"),
        )
    except ValueError as exc:
        raise ProfileError(f"profile {source}: {exc}") from exc


def load_profile(path: Path) -> RegistrationProfile:
    return profile_from_mapping(_load_yaml(path), source=str(path))


def resolve_profile_path(selector: str) -> Path:
    """Resolve a bundled profile name or an explicit YAML path."""

    token = str(selector or "").strip()
    if not token:
        raise ProfileError("profile selector is empty")
    candidate = Path(token).expanduser()
    if candidate.suffix in (".yaml", ".yml") or candidate.is_absolute():
        if not candidate.is_file():
            raise ProfileError(f"profile file not found: {candidate}")
        return candidate
    bundled = bundled_profiles_root() / f"{token}.yaml"
    if not bundled.is_file():
        raise ProfileError(f"unknown profile {token!r}; bundled: {', '.join(bundled_profile_names())}")
    return bundled


def resolve_active_profile(env: Mapping[str, str], *, default: str | None = None) -> RegistrationProfile:
    """Load the profile selected by ``KRNL_PROFILE`` (or ``default``)."""

    selector = str(env.get(PROFILE_ENV, "")).strip() or (default or "")
    if not selector:
        raise ProfileError(f"{PROFILE_ENV} is not set and no default profile was given")
    return load_profile(resolve_profile_path(selector))
