"""Report model definitions."""
from datetime import datetime

from pydantic import BaseModel, computed_field, field_serializer

from app.utils.instants import format_utc


class DayTotal(BaseModel):
    """Seconds logged on one local calendar day."""

    day_of_week: int  # 0 = Sunday
    date: str  # YYYY-MM-DD in the user's timezone
    total_seconds: int

    @computed_field
    @property
    def hours(self) -> int:
        return self.total_seconds // 3600

    @computed_field
    @property
    def minutes(self) -> int:
        return (self.total_seconds % 3600) // 60

    @computed_field
    @property
    def formatted(self) -> str:
        return f"{self.hours}h {self.minutes}m"


class WeekTotals(BaseModel):
    """A user's completed time for each day of a Sunday-to-Saturday week."""

    user_id: int
    start_date: str
    end_date: str
    days: list[DayTotal]

    @computed_field
    @property
    def total_seconds(self) -> int:
        return sum(day.total_seconds for day in self.days)


class TaskWeek(BaseModel):
    """One task's daily totals within a week."""

    task_id: int
    task_name: str
    project_name: str
    client_name: str
    days: list[DayTotal]

    @computed_field
    @property
    def total_seconds(self) -> int:
        return sum(day.total_seconds for day in self.days)


class TaskWeekTotals(BaseModel):
    """Per-task daily totals for a user's week."""

    user_id: int
    start_date: str
    end_date: str
    tasks: list[TaskWeek]


class PeriodTotal(BaseModel):
    """
    Time logged by a user between two instants.

    Completed entries and the elapsed part of a running timer are reported
    separately; ``total_seconds`` is their sum.
    """

    user_id: int
    period: str  # "today" or "week"
    start_time: datetime
    end_time: datetime
    completed_seconds: int
    running_seconds: int

    @field_serializer("start_time", "end_time")
    def serialize_instant(self, v: datetime) -> str:
        return format_utc(v)

    @computed_field
    @property
    def total_seconds(self) -> int:
        return self.completed_seconds + self.running_seconds
