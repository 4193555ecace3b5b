"""Client model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ClientCreate(BaseModel):
    """Client creation model."""

    name: str = Field(min_length=1, max_length=255)


class ClientUpdate(BaseModel):
    """Client update model - all fields optional."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    archived: Optional[bool] = None


class Client(BaseModel):
    """Full client model with database fields."""

    id: int = Field(alias="_id", serialization_alias="id")
    name: str
    created_by: int
    archived: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}
