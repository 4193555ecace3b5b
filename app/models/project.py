"""Project model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ProjectBase(BaseModel):
    """Base project fields."""

    client_id: int
    name: str = Field(min_length=1, max_length=255)


class ProjectCreate(ProjectBase):
    """Project creation model."""

    pass


class ProjectUpdate(BaseModel):
    """Project update model - all fields optional."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    archived: Optional[bool] = None


class Project(ProjectBase):
    """Full project model with database fields."""

    id: int = Field(alias="_id", serialization_alias="id")
    archived: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
