"""Follow-up task schemas."""

from datetime import date

from pydantic import Field

from counseling.models.follow_up import TaskPriority
from counseling.schemas.common import BaseSchema, TimestampSchema


class FollowUpTaskCreate(BaseSchema):
    """Follow-up task creation schema."""

    title: str = Field(..., min_length=1, max_length=255)
    deadline: date = Field(default_factory=date.today)
    priority: TaskPriority = TaskPriority.MEDIUM


class FollowUpTaskResponse(FollowUpTaskCreate, TimestampSchema):
    """Follow-up task response schema."""

    id: int
    student_id: int
    student_name: str = ""
    is_completed: bool = False
