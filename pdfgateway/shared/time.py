"""Time helpers."""

import time
from datetime import datetime, timezone

# Captured at import, which happens once per process
PROCESS_STARTED_AT = time.monotonic()


def utcnow_iso() -> str:
    """Current UTC time as ISO 8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def uptime_seconds() -> float:
    return time.monotonic() - PROCESS_STARTED_AT


def now_ms() -> int:
    return int(time.time() * 1000)
