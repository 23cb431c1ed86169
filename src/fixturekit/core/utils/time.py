"""Time helpers."""
from __future__ import annotations

from datetime import datetime, timezone


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with seconds precision."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


__all__ = ["utc_timestamp"]
