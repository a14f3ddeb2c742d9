"""Canonical JSON text for caller-supplied action parameters."""

from __future__ import annotations

import json
from typing import Any


class CanonicalJsonError(ValueError):
    pass


def _normalize_payload(payload: Any) -> Any:
    if isinstance(payload, tuple):
        return [_normalize_payload(item) for item in payload]
    if isinstance(payload, list):
        return [_normalize_payload(item) for item in payload]
    if isinstance(payload, dict):
        return {key: _normalize_payload(value) for key, value in payload.items()}
    return payload


def canonical_json_text(payload: Any) -> str:
    """Return compact JSON text with stable key ordering.

    Raises CanonicalJsonError for values JSON cannot represent (sets, bytes,
    arbitrary objects, NaN/Infinity, circular references, unorderable keys)
    and for text that has no UTF-8 form, such as lone surrogates.
    """

    try:
        normalized = _normalize_payload(payload)
        text = json.dumps(
            normalized,
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise CanonicalJsonError(f"params are not JSON-serializable: {exc}") from exc
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise CanonicalJsonError(f"params are not valid UTF-8 text: {exc}") from exc
    return text


def canonical_json_bytes(payload: Any) -> bytes:
    """Return canonical JSON text as UTF-8 bytes."""

    return canonical_json_text(payload).encode("utf-8")
