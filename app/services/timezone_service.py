"""Timezone service - pure wall-time/UTC conversions for time entries."""
import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from app.utils.instants import ensure_utc, format_utc, utc_now


class TimezoneService:
    """
    Deterministic conversions between a user's wall time and UTC instants.

    Nothing here reads the server's timezone: every local conversion is
    anchored to the offset the user supplied.
    """

    @staticmethod
    def local_to_utc(
        date_string: str,
        hours: int,
        minutes: int,
        tz_offset_minutes: Optional[int],
    ) -> datetime:
        """
        Convert a local wall time on a calendar date to a UTC instant.

        Args:
            date_string: Calendar date (YYYY-MM-DD)
            hours: Local hour of day (0-23)
            minutes: Local minute (0-59)
            tz_offset_minutes: User's offset east of UTC (local minus UTC),
                e.g. -300 for UTC-5

        Returns:
            Aware UTC datetime

        Raises:
            ValueError: If the offset is missing

        Example:
            >>> TimezoneService.local_to_utc("2024-03-01", 9, 30, -300)
            datetime.datetime(2024, 3, 1, 14, 30, tzinfo=datetime.timezone.utc)
        """
        if tz_offset_minutes is None:
            raise ValueError("Timezone offset is required to convert local time")

        day = date.fromisoformat(date_string)
        local = datetime(day.year, day.month, day.day, hours, minutes, tzinfo=timezone.utc)
        return local - timedelta(minutes=tz_offset_minutes)

    @staticmethod
    def create_user_date(date_string: str, hours: int = 12, minutes: int = 0) -> datetime:
        """
        Build a UTC instant at a time of day on a calendar date.

        Manual-duration entries are anchored at noon UTC so that the date
        reads the same in any timezone within twelve hours of UTC.
        """
        day = date.fromisoformat(date_string)
        return datetime(day.year, day.month, day.day, hours, minutes, tzinfo=timezone.utc)

    @staticmethod
    def from_user_iso_string(iso_string: str) -> datetime:
        """
        Parse an ISO-8601 string into a UTC instant truncated to seconds.

        A trailing ``Z`` is accepted and naive input is read as UTC.
        Round-trips through ``to_user_iso_string`` unchanged.
        """
        text = iso_string.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = ensure_utc(datetime.fromisoformat(text))
        return parsed.replace(microsecond=0)

    @staticmethod
    def to_user_iso_string(instant: datetime) -> str:
        """Format a UTC instant as ``YYYY-MM-DDTHH:MM:SS.000Z``."""
        return format_utc(instant)

    @staticmethod
    def calculate_duration(start_time: datetime, end_time: datetime) -> int:
        """
        Calculate whole seconds between two instants.

        Raises:
            ValueError: If end_time is not after start_time
        """
        if end_time <= start_time:
            raise ValueError("End time must be after start time")
        return math.floor((end_time - start_time).total_seconds())

    @staticmethod
    def get_today_string() -> str:
        """Today's date as YYYY-MM-DD."""
        return date.today().isoformat()

    @staticmethod
    def get_user_today(tz_offset_minutes: int) -> str:
        """Today's date as YYYY-MM-DD at a user's offset."""
        return (utc_now() + timedelta(minutes=tz_offset_minutes)).date().isoformat()

    @staticmethod
    def get_next_day(date_string: str) -> str:
        """The calendar day after ``date_string`` as YYYY-MM-DD."""
        return (date.fromisoformat(date_string) + timedelta(days=1)).isoformat()
