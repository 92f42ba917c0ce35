"""Report list and transcript schemas."""

import enum
from datetime import date

from counseling.models.interview import InterviewType
from counseling.schemas.common import BaseSchema
from counseling.schemas.student import AcademicRecordSchema, SubjectResult


class ReportType(str, enum.Enum):
    """Student lists available from the reports screen."""

    GENERAL = "general"
    CRITICAL = "critical"
    EXITED = "exited"
    HONOR = "honor"
    INTERVIEWS = "interviews"
    COMPREHENSIVE = "comprehensive"


class ReportEntry(BaseSchema):
    """One student line in a report list."""

    rank: int
    id: int | None = None
    name: str
    grade: str
    gender: str | None = None
    date_of_birth: str | None = None
    gpa: float
    points: int
    note: str = "-"
    absences: int = 0
    interview_count: int = 0
    last_interview: date | None = None
    interview_types: list[InterviewType] = []


class ReportResponse(BaseSchema):
    """A report list with its title."""

    report_type: ReportType
    title: str
    total: int
    entries: list[ReportEntry] = []


class HonorEntry(BaseSchema):
    """Student ranked by points earned inside a period."""

    id: int | None = None
    name: str
    grade: str
    period_points: int


class ScoreObservation(BaseSchema):
    """A transcript line."""

    subject: str
    score: float
    observation: str


class Transcript(BaseSchema):
    """Per-student analysis of the latest academic record."""

    student_id: int | None = None
    name: str
    grade: str
    date_of_birth: str | None = None
    record: AcademicRecordSchema
    lines: list[ScoreObservation] = []
    strengths: list[SubjectResult] = []
    weaknesses: list[SubjectResult] = []
    max_subject: SubjectResult | None = None
    min_subject: SubjectResult | None = None
    wide_gap: bool = False  # Best and worst subject more than 8 points apart
    recommendation: str


class StudentInsight(BaseSchema):
    """Combined academic and behavior label."""

    label: str
    tone: str
