"""UTC instant helpers shared by models and services."""
from datetime import datetime, timezone
from typing import Optional


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Return ``value`` as an aware UTC datetime.

    Naive datetimes are taken to already be UTC, which is how MongoDB hands
    them back when the client is not tz-aware.

    Examples:
        >>> ensure_utc(datetime(2024, 3, 1, 12, 0)).isoformat()
        '2024-03-01T12:00:00+00:00'
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_utc(value: datetime) -> str:
    """
    Format an instant as a zero-offset ISO string with millisecond field.

    Examples:
        >>> format_utc(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc))
        '2024-03-01T12:00:00.000Z'
    """
    return ensure_utc(value).strftime("%Y-%m-%dT%H:%M:%S.000Z")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
