from __future__ import annotations

import errno
import os
from pathlib import Path
import tempfile
import time
from typing import Callable, TypeVar

T = TypeVar("T")


def is_retryable_replace_error(exc: OSError) -> bool:
    return getattr(exc, "errno", None) in {errno.EACCES, errno.EPERM, errno.EBUSY}


def bounded_retry(fn: Callable[[], T], attempts: int = 5, backoff_ms: int = 50) -> T:
    for attempt in range(attempts):
        try:
            return fn()
        except OSError as exc:
            if attempt == attempts - 1 or not is_retryable_replace_error(exc):
                raise
            time.sleep(backoff_ms / 1000.0)
    raise RuntimeError("bounded_retry called with attempts < 1")


def atomic_write_text(path: Path, text: str, *, attempts: int = 5, backoff_ms: int = 50) -> None:
    """Write ``text`` to ``path`` via a same-directory temp file and os.replace."""

    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="\n",
            dir=str(path.parent),
            prefix=path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
            temp_path = Path(tmp.name)
        bounded_retry(lambda: os.replace(str(temp_path), str(path)), attempts=attempts, backoff_ms=backoff_ms)
    finally:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink(missing_ok=True)
