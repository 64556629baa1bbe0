"""Time helpers.

Timestamps are stored as naive UTC datetimes.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_utc(moment: datetime) -> str:
    """ISO-8601 rendering of a naive UTC timestamp with a trailing Z."""
    return moment.isoformat(timespec="milliseconds") + "Z"
