"""Validation service - parsing and shape checks for time entry requests."""
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from app.models.time_entry import TimeEntryCreate, TimeEntryUpdate
from app.models.time_spec import (
    InstantBound,
    InstantRange,
    LocalBound,
    LocalRange,
    ManualDuration,
    TimeSpec,
)
from app.models.validation import ParsedTime, ValidationResult
from app.services.timezone_service import TimezoneService


# Tried in order; the first pattern that matches decides the result.
_FLEXIBLE_TIME_PATTERNS = [
    re.compile(r"^(\d{1,2}):(\d{2})\s*(am|pm)$"),
    re.compile(r"^(\d{1,2}):(\d{2})\s*(a|p)$"),
    re.compile(r"^(\d{3,4})\s*(am|pm)$"),
    re.compile(r"^(\d{3,4})\s*(a|p)$"),
    re.compile(r"^(\d{1,2}):(\d{2})$"),
]

_HOURS_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*(h|hr|hours?)$")
_MINUTES_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*(m|min|minutes?)$")
_SECONDS_PATTERN = re.compile(r"^(\d+)\s*(s|sec|seconds?)$")
_CLOCK_PATTERN = re.compile(r"^(\d+):(\d{2})$")

# Largest duration accepted for one entry, in seconds
MAX_DURATION_SECONDS = 2**31 - 1

AMBIGUOUS_REQUEST = "Ambiguous request: multiple temporal representations supplied"

Request = Union[TimeEntryCreate, TimeEntryUpdate]


class ValidationService:
    """Turns loosely structured input into validated values or a failure."""

    @staticmethod
    def parse_flexible_time(time_string: Optional[str]) -> Optional[ParsedTime]:
        """
        Parse a human time of day such as "9:30 AM", "5:30p", "930am" or "14:30".

        Args:
            time_string: Raw user input

        Returns:
            ParsedTime, or None when the input cannot be read as a time of day

        Examples:
            >>> ValidationService.parse_flexible_time("2:30pm")
            ParsedTime(hours=14, minutes=30)
            >>> ValidationService.parse_flexible_time("xyz") is None
            True
        """
        if not time_string or not isinstance(time_string, str):
            return None

        clean = time_string.strip().lower()

        for pattern in _FLEXIBLE_TIME_PATTERNS:
            match = pattern.match(clean)
            if not match:
                continue

            if ":" in pattern.pattern:
                hours = int(match.group(1))
                minutes = int(match.group(2))
                period = match.group(3) if pattern.groups == 3 else ""
            else:
                digits = match.group(1)
                hours = int(digits[:-2])
                minutes = int(digits[-2:])
                period = match.group(2)

            if period.startswith("a"):
                if hours == 12:
                    hours = 0
            elif period.startswith("p"):
                if hours != 12:
                    hours += 12

            if 0 <= hours <= 23 and 0 <= minutes <= 59:
                return ParsedTime(hours=hours, minutes=minutes)
            return None

        return None

    @staticmethod
    def parse_duration(duration_string: Optional[str]) -> int:
        """
        Parse a duration string into whole seconds.

        Accepted forms: "2h", "1.5hr", "3 hours", "90m", "2.5min", "5400s",
        and "<minutes>:<seconds>" such as "4:15". Fractions are truncated.

        Raises:
            ValueError: If the string is empty, not a recognized form, or too long
        """
        if not duration_string or not isinstance(duration_string, str):
            raise ValueError("Duration string is required")

        seconds = ValidationService._duration_seconds(duration_string.strip().lower())
        if seconds is None:
            raise ValueError(
                f"Invalid duration format: {duration_string}. "
                'Use formats like "2h", "3.5hr", "4:15", "90m", "5400s"'
            )
        if seconds > MAX_DURATION_SECONDS:
            raise ValueError(f"Duration is too long: {duration_string}")
        return seconds

    @classmethod
    def validate_create_request(cls, request: TimeEntryCreate) -> ValidationResult:
        """
        Validate a create request.

        Requires user and task ids and exactly one complete temporal shape:
        an ISO start/end pair, start and end hour/minute components (with
        task date and timezone offset), or a duration string.
        """
        if not request.user_id or not request.task_id:
            return ValidationResult(is_valid=False, error="User ID and task ID are required")

        error = cls._check_temporal_fields(request)
        if error:
            return ValidationResult(is_valid=False, error=error)

        has_instants = bool(request.start_time and request.end_time)
        has_components = cls._has_start_components(request) and cls._has_end_components(request)
        if not has_instants and not has_components and not request.duration:
            return ValidationResult(
                is_valid=False,
                error="Either start/end times or duration must be provided",
            )

        return ValidationResult(is_valid=True)

    @classmethod
    def validate_update_request(cls, request: TimeEntryUpdate) -> ValidationResult:
        """
        Validate a partial update request.

        Any single mutable field is enough; the temporal fields follow the
        same shape rules as creation, except that start or end may be
        changed on its own.
        """
        error = cls._check_temporal_fields(request)
        if error:
            return ValidationResult(is_valid=False, error=error)

        has_field = any([
            request.start_time,
            request.end_time,
            cls._has_start_components(request),
            cls._has_end_components(request),
            request.duration,
            request.duration_manual is not None,
            request.task_id,
            "notes" in request.model_fields_set,
            request.created_at,
        ])
        if not has_field:
            return ValidationResult(
                is_valid=False,
                error="At least one field must be provided for update",
            )

        return ValidationResult(is_valid=True)

    @staticmethod
    def validate_time_order(start_time: datetime, end_time: datetime) -> ValidationResult:
        """Reject an end that is not strictly after the start."""
        if end_time <= start_time:
            return ValidationResult(is_valid=False, error="End time must be after start time")
        return ValidationResult(is_valid=True)

    @classmethod
    def time_spec_for_create(cls, request: TimeEntryCreate) -> TimeSpec:
        """
        Convert a validated create request into its temporal variant.

        Raises:
            ValueError: If no complete temporal shape is present
        """
        if request.start_time and request.end_time:
            return InstantRange(start=request.start_time, end=request.end_time)
        if cls._has_start_components(request) and cls._has_end_components(request):
            return LocalRange(
                task_date=request.task_date,
                start_hours=request.start_hours,
                start_minutes=request.start_minutes,
                end_hours=request.end_hours,
                end_minutes=request.end_minutes,
                tz_offset_minutes=request.tz_offset_minutes,
            )
        if request.duration:
            return ManualDuration(
                seconds=cls.parse_duration(request.duration),
                task_date=request.task_date,
            )
        raise ValueError("Either start/end times or duration must be provided")

    @classmethod
    def time_spec_for_update(cls, request: TimeEntryUpdate) -> Optional[TimeSpec]:
        """Convert a validated update request into its temporal variant, if any."""
        has_start = cls._has_start_components(request)
        has_end = cls._has_end_components(request)

        if request.start_time and request.end_time:
            return InstantRange(
                start=request.start_time,
                end=request.end_time,
                task_date=request.task_date,
            )
        if has_start and has_end:
            return LocalRange(
                task_date=request.task_date,
                start_hours=request.start_hours,
                start_minutes=request.start_minutes,
                end_hours=request.end_hours,
                end_minutes=request.end_minutes,
                tz_offset_minutes=request.tz_offset_minutes,
            )
        if has_start or has_end:
            bound = "start" if has_start else "end"
            return LocalBound(
                bound=bound,
                task_date=request.task_date,
                hours=request.start_hours if has_start else request.end_hours,
                minutes=request.start_minutes if has_start else request.end_minutes,
                tz_offset_minutes=request.tz_offset_minutes,
            )
        if request.start_time or request.end_time:
            bound = "start" if request.start_time else "end"
            return InstantBound(
                bound=bound,
                at=request.start_time or request.end_time,
                task_date=request.task_date,
            )
        if request.duration:
            return ManualDuration(
                seconds=cls.parse_duration(request.duration),
                task_date=request.task_date,
            )
        if request.duration_manual is not None:
            return ManualDuration(seconds=request.duration_manual, task_date=request.task_date)
        return None

    @staticmethod
    def _duration_seconds(clean: str) -> Optional[int]:
        match = _HOURS_PATTERN.match(clean)
        if match:
            return int(Decimal(match.group(1)) * 3600)

        match = _MINUTES_PATTERN.match(clean)
        if match:
            return int(Decimal(match.group(1)) * 60)

        match = _SECONDS_PATTERN.match(clean)
        if match:
            return int(match.group(1))

        match = _CLOCK_PATTERN.match(clean)
        if match:
            return int(match.group(1)) * 60 + int(match.group(2))

        return None

    @staticmethod
    def _has_start_components(request: Request) -> bool:
        return request.start_hours is not None and request.start_minutes is not None

    @staticmethod
    def _has_end_components(request: Request) -> bool:
        return request.end_hours is not None and request.end_minutes is not None

    @classmethod
    def _check_temporal_fields(cls, request: Request) -> Optional[str]:
        """Shape checks shared by create and update. Returns an error or None."""
        components = [
            request.start_hours,
            request.start_minutes,
            request.end_hours,
            request.end_minutes,
        ]
        uses_components = any(value is not None for value in components)
        duration_manual = getattr(request, "duration_manual", None)

        shapes = [
            bool(request.start_time or request.end_time),
            uses_components,
            bool(request.duration),
            duration_manual is not None,
        ]
        if sum(shapes) > 1:
            return AMBIGUOUS_REQUEST

        if uses_components:
            if (request.start_hours is None) != (request.start_minutes is None):
                return "Start hours and minutes must be provided together"
            if (request.end_hours is None) != (request.end_minutes is None):
                return "End hours and minutes must be provided together"
            if not request.task_date:
                return "Task date is required when using start/end hours"
            if request.tz_offset_minutes is None:
                return "Timezone offset is required when using start/end hours"
            for hours, minutes in (components[:2], components[2:]):
                if hours is None:
                    continue
                if not (0 <= hours <= 23 and 0 <= minutes <= 59):
                    return "Hours must be between 0 and 23 and minutes between 0 and 59"

        if request.task_date:
            try:
                date.fromisoformat(request.task_date)
            except ValueError:
                return f"Invalid task date: {request.task_date}. Use YYYY-MM-DD"

        instants = {}
        for label, value in (("start", request.start_time), ("end", request.end_time)):
            if not value:
                continue
            try:
                instants[label] = TimezoneService.from_user_iso_string(value)
            except ValueError:
                return f"Invalid {label} time: {value}. Use an ISO-8601 datetime"

        if len(instants) == 2:
            order = cls.validate_time_order(instants["start"], instants["end"])
            if not order.is_valid:
                return order.error

        if request.duration:
            try:
                cls.parse_duration(request.duration)
            except ValueError as e:
                return str(e)

        if duration_manual is not None and duration_manual < 0:
            return "Duration must not be negative"
        if duration_manual is not None and duration_manual > MAX_DURATION_SECONDS:
            return f"Duration is too long: {duration_manual}"

        created_at = getattr(request, "created_at", None)
        if created_at:
            try:
                TimezoneService.from_user_iso_string(created_at)
            except ValueError:
                return f"Invalid created at: {created_at}. Use an ISO-8601 datetime"

        return None
