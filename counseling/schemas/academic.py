"""Academic results import and listing schemas."""

import enum

from counseling.schemas.common import BaseSchema
from counseling.schemas.student import AcademicRecordSchema, SubjectResult


class ImportMode(str, enum.Enum):
    """Which academic year an imported sheet belongs to."""

    CURRENT = "CURRENT"
    PREVIOUS = "PREVIOUS"


class ParsedStudent(BaseSchema):
    """A student row read from a results sheet, before merging."""

    name: str
    grade: str
    gender: str | None = None
    is_repeater: bool = False
    date_of_birth: str | None = None
    academic_records: list[AcademicRecordSchema]


class ParsedImport(BaseSchema):
    """Everything a results sheet yields."""

    students: list[ParsedStudent]
    institution_name: str
    class_name: str
    subjects: list[str] = []


class ImportResult(BaseSchema):
    """Result of an academic results upload."""

    institution_name: str
    class_name: str
    mode: ImportMode
    total: int
    created: int
    updated: int
    message: str


class ResultRow(BaseSchema):
    """One line of the results list."""

    id: int | None
    name: str
    grade: str
    gender: str | None
    is_repeater: bool
    average: float
    total_points: int
    top_subject: SubjectResult | None = None
    previous_records: int = 0
