"""Task model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task workflow states."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskBase(BaseModel):
    """Base task fields."""

    project_id: int
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING


class TaskCreate(TaskBase):
    """Task creation model."""

    pass


class TaskUpdate(BaseModel):
    """Task update model - all fields optional."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    archived: Optional[bool] = None


class TaskStatusUpdate(BaseModel):
    """Status-only change, available to any active user."""

    status: TaskStatus


class TaskAssignment(BaseModel):
    """Assign a user to a task."""

    user_id: int


class Task(TaskBase):
    """Full task model with database fields."""

    id: int = Field(alias="_id", serialization_alias="id")
    archived: bool = False
    assignee_ids: list[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
