"""Structured fallback event records.

Every record is logged as one JSON line. When a log directory is configured
the record is also written to its own file (no appends), named
``fallback-<date>-<eventId>.json``.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping

from krnl_payload.infrastructure.fs_atomic import atomic_write_text

EVENT_SCHEMA = "krnl.fallback-event.v1"
EVENT_LOG_DIR_ENV = "KRNL_EVENT_LOG_DIR"

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(k): _normalize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


def build_event_record(event: Mapping[str, Any], *, now: datetime) -> dict[str, Any]:
    return {
        "schema": EVENT_SCHEMA,
        "eventId": uuid.uuid4().hex,
        "timestamp": now.isoformat(timespec="seconds"),
        "level": "warning",
        "reasonKey": str(event.get("reasonKey", "unknown")),
        "step": str(event.get("step", "unknown")),
        "action": str(event.get("action", "unknown")),
        "profile": str(event.get("profile", "unknown")),
        "message": str(event.get("message", "")),
        "details": _normalize_value(event.get("details")),
    }


class FallbackEventLog:
    """EventSink that logs records and optionally persists one file per event."""

    def __init__(self, log_dir: Path | None = None, *, clock: Callable[[], datetime] = _utc_now) -> None:
        self._log_dir = log_dir
        self._clock = clock

    @property
    def log_dir(self) -> Path | None:
        return self._log_dir

    def record(self, event: Mapping[str, Any]) -> None:
        record = build_event_record(event, now=self._clock())
        line = json.dumps(record, ensure_ascii=True, sort_keys=True)
        logger.warning("%s", line)
        if self._log_dir is None:
            return
        target = self._log_dir / f"fallback-{record['timestamp'][:10]}-{record['eventId']}.json"
        atomic_write_text(target, line + "\n")


def event_log_from_env(env: Mapping[str, str]) -> FallbackEventLog:
    raw = str(env.get(EVENT_LOG_DIR_ENV, "")).strip()
    return FallbackEventLog(Path(raw).expanduser() if raw else None)
