"""Interview schemas."""

from datetime import date

from pydantic import Field

from counseling.models.interview import InterviewType
from counseling.schemas.common import BaseSchema, TimestampSchema


class InterviewBase(BaseSchema):
    """Interview fields shared by create and read models."""

    interview_date: date = Field(default_factory=date.today)
    interview_type: InterviewType = InterviewType.STUDENT
    title: str = Field(..., min_length=1, max_length=255, description="Reason for the interview")
    proceedings: str | None = None
    assessment: str | None = None
    actions: str | None = None
    recommendations: str | None = None
    conclusion: str | None = None
    parent_name: str | None = Field(None, max_length=255)
    admin_role: str | None = Field(None, max_length=255)
    admin_relation: str | None = Field(None, max_length=255)


class InterviewCreate(InterviewBase):
    """Interview creation schema."""

    pass


class InterviewResponse(InterviewBase, TimestampSchema):
    """Interview response schema."""

    id: int
    student_id: int
    student_name: str = ""
    student_grade: str = ""


class InterviewFilter(BaseSchema):
    """Interview filtering options."""

    interview_type: InterviewType | None = None
    search: str | None = None  # Student name or title
