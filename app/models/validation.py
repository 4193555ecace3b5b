"""Validation result types."""
from typing import Optional

from pydantic import BaseModel


class ValidationResult(BaseModel):
    """Outcome of a request validation."""

    is_valid: bool
    error: Optional[str] = None


class ParsedTime(BaseModel):
    """Hour and minute of day parsed from a human time string."""

    hours: int
    minutes: int
