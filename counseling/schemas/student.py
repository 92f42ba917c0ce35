"""Student and academic record schemas."""

from datetime import datetime

from pydantic import ConfigDict, Field

from counseling.schemas.attendance import AttendanceBase
from counseling.schemas.common import BaseSchema
from counseling.schemas.interview import InterviewBase


class SubjectResult(BaseSchema):
    """One subject score inside an academic record."""

    # Subject names are keys as typed in the sheet, never normalized
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=False)

    subject: str
    score: float


class AcademicRecordSchema(BaseSchema):
    """One imported year/term of results."""

    year: str
    term: str
    subjects: list[SubjectResult] = []
    average: float = 0

    def score_for(self, subject: str) -> float | None:
        """Score of the first entry named exactly ``subject``."""
        for result in self.subjects:
            if result.subject == subject:
                return result.score
        return None


class StudentRecord(BaseSchema):
    """Full student view consumed by the analysis pipeline."""

    id: int | None = None
    name: str
    grade: str = ""
    gender: str | None = None
    date_of_birth: str | None = None
    is_repeater: bool = False
    total_points: int = 0
    academic_records: list[AcademicRecordSchema] = []
    interviews: list[InterviewBase] = []
    attendance_records: list[AttendanceBase] = []

    @property
    def active_record(self) -> AcademicRecordSchema | None:
        """Most recently imported record."""
        return self.academic_records[0] if self.academic_records else None

    @property
    def gpa(self) -> float:
        """General average of the active record, 0 without one."""
        record = self.active_record
        return record.average if record else 0

    @property
    def has_results(self) -> bool:
        return bool(self.academic_records)


class StudentBrief(BaseSchema):
    """Compact student row for lists and categories."""

    id: int | None = None
    name: str
    grade: str
    gender: str | None = None
    gpa: float
    total_points: int

    @classmethod
    def from_record(cls, student: StudentRecord) -> "StudentBrief":
        return cls(
            id=student.id,
            name=student.name,
            grade=student.grade,
            gender=student.gender,
            gpa=student.gpa,
            total_points=student.total_points,
        )


class StudentBase(BaseSchema):
    """Base student schema."""

    name: str = Field(..., min_length=2, max_length=255)
    grade: str = Field(..., min_length=1, max_length=255)
    gender: str | None = Field(None, max_length=50)
    date_of_birth: str | None = Field(None, max_length=50)
    is_repeater: bool = False
    parent_name: str | None = Field(None, max_length=255)
    parent_phone_no: str | None = Field(None, max_length=50)


class StudentCreate(StudentBase):
    """Student creation schema."""

    pass


class StudentUpdate(BaseSchema):
    """Student update schema."""

    name: str | None = Field(None, min_length=2, max_length=255)
    grade: str | None = Field(None, min_length=1, max_length=255)
    gender: str | None = Field(None, max_length=50)
    date_of_birth: str | None = Field(None, max_length=50)
    is_repeater: bool | None = None
    parent_name: str | None = Field(None, max_length=255)
    parent_phone_no: str | None = Field(None, max_length=50)


class StudentResponse(StudentBase):
    """Student response schema."""

    id: int
    total_points: int
    academic_records: list[AcademicRecordSchema] = []
    created_at: datetime
    updated_at: datetime


class StudentFilter(BaseSchema):
    """Student filter options."""

    grade: str | None = None
    search: str | None = None  # Substring of name or grade


class PaginatedStudentResponse(BaseSchema):
    """Paginated student list."""

    items: list[StudentResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
