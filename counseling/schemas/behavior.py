"""Behavior log schemas."""

from datetime import datetime

from pydantic import Field

from counseling.models.behavior import BehaviorType, Severity
from counseling.schemas.common import BaseSchema


class BehaviorLogCreate(BaseSchema):
    """Schema for recording a behavior against a student.

    ``points`` is a magnitude; its sign comes from ``behavior_type``.
    """

    behavior_type: BehaviorType
    points: int = Field(..., ge=1, le=100)
    description: str = Field(..., min_length=1, max_length=1000)
    severity: Severity | None = None
    logged_at: datetime | None = None


class BehaviorLogResponse(BaseSchema):
    """Behavior log response schema."""

    id: int
    student_id: int
    behavior_type: BehaviorType
    points: int
    balance_after: int
    description: str
    severity: Severity | None
    logged_at: datetime


class BehaviorLogEntry(BaseSchema):
    """Minimal log shape used by period aggregations."""

    student_id: int
    points: int
    logged_at: datetime
