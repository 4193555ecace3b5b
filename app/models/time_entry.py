"""Time entry model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from app.utils.instants import ensure_utc, format_utc


class TimeEntryCreate(BaseModel):
    """
    Time entry creation request.

    Exactly one temporal shape is expected: an ISO ``start_time``/``end_time``
    pair, hour/minute components anchored to ``task_date``, or a ``duration``
    string. Shape checks live in ValidationService so that failures come back
    as readable messages rather than schema errors.
    """

    user_id: Optional[int] = None
    task_id: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    start_hours: Optional[int] = None
    start_minutes: Optional[int] = None
    end_hours: Optional[int] = None
    end_minutes: Optional[int] = None
    task_date: Optional[str] = None  # YYYY-MM-DD
    tz_offset_minutes: Optional[int] = None  # local minus UTC
    duration: Optional[str] = None  # e.g. "2h", "90m", "4:15"
    notes: Optional[str] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class TimeEntryUpdate(BaseModel):
    """Time entry update request - only supplied fields change."""

    task_id: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    start_hours: Optional[int] = None
    start_minutes: Optional[int] = None
    end_hours: Optional[int] = None
    end_minutes: Optional[int] = None
    task_date: Optional[str] = None
    tz_offset_minutes: Optional[int] = None
    duration: Optional[str] = None
    duration_manual: Optional[int] = None  # seconds
    created_at: Optional[str] = None
    notes: Optional[str] = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class TimeEntry(BaseModel):
    """Full time entry model with database fields."""

    id: int = Field(alias="_id", serialization_alias="id")
    user_id: int
    task_id: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_manual: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}

    @field_validator("start_time", "end_time", "created_at", "updated_at")
    @classmethod
    def as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Store reads may come back naive; they are UTC."""
        return ensure_utc(v)

    @field_serializer("start_time", "end_time", "created_at", "updated_at")
    def serialize_instant(self, v: Optional[datetime]) -> Optional[str]:
        return None if v is None else format_utc(v)

    @computed_field
    @property
    def duration(self) -> int:
        """Elapsed seconds: manual duration first, else end minus start."""
        if self.duration_manual is not None:
            return self.duration_manual
        if self.start_time is not None and self.end_time is not None:
            return int((self.end_time - self.start_time).total_seconds())
        return 0

    @property
    def is_running(self) -> bool:
        return (
            self.start_time is not None
            and self.end_time is None
            and self.duration_manual is None
        )


class TimeEntryWithDetails(TimeEntry):
    """Time entry enriched with human-readable names for listings."""

    user_name: str
    task_name: str
    project_name: str
    client_name: str


class RunningTimer(TimeEntryWithDetails):
    """A timer that is still running, with how long it has been going."""

    elapsed_seconds: int
