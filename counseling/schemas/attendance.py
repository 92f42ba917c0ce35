"""Attendance schemas."""

from datetime import date

from counseling.models.attendance import AttendanceStatus
from counseling.schemas.common import BaseSchema


class AttendanceBase(BaseSchema):
    """Attendance fields shared by create and read models."""

    attendance_date: date
    status: AttendanceStatus
    remarks: str | None = None


class AttendanceCreate(AttendanceBase):
    """Attendance creation schema."""

    pass


class AttendanceResponse(AttendanceBase):
    """Attendance response schema."""

    id: int
    student_id: int


class AttendanceSummary(BaseSchema):
    """Per-status counts for one student."""

    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
