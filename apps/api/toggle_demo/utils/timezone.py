"""
Timezone Utilities.

Golden Rules:
1. Internally: Always timezone-aware UTC
2. API: Return ISO 8601 with Z suffix (UTC)
"""

from datetime import datetime, timezone

# UTC constant
UTC = timezone.utc


def utc_now() -> datetime:
    """
    Get current time in UTC (timezone-aware).

    Always use this instead of datetime.utcnow() which returns
    naive datetime.
    """
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC. Naive datetimes are assumed to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso8601(dt: datetime) -> str:
    """
    Format as ISO 8601 with millisecond precision and Z suffix.

    Usage:
        iso = to_iso8601(evaluation.evaluated_at)
        # "2024-01-15T14:30:00.123Z"
    """
    utc_dt = to_utc(dt)
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_dt.microsecond // 1000:03d}Z"
