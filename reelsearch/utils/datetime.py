"""Time utilities with timezone-aware defaults."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time with tzinfo."""

    return datetime.now(timezone.utc)


def elapsed_ms(started: float) -> int:
    """Milliseconds since ``started`` (a ``time.perf_counter()`` reading)."""

    return max(0, int((time.perf_counter() - started) * 1000))


__all__ = ["elapsed_ms", "utc_now"]
