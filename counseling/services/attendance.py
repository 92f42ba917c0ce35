"""Attendance service."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from counseling.core.exceptions import NotFoundError
from counseling.models.attendance import AttendanceRecord, AttendanceStatus
from counseling.models.student import Student
from counseling.schemas.attendance import AttendanceCreate, AttendanceResponse, AttendanceSummary

logger = logging.getLogger(__name__)


class AttendanceService:
    """Attendance records per student."""

    def __init__(self, db: Session):
        self.db = db

    def _get_student(self, student_id: int) -> Student:
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def _get_existing_record(self, student_id: int, attendance_date) -> AttendanceRecord | None:
        result = self.db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.attendance_date == attendance_date,
            )
        )
        return result.scalar_one_or_none()

    def record(self, student_id: int, request: AttendanceCreate) -> AttendanceResponse:
        """Create or update the student's record for that date."""
        student = self._get_student(student_id)

        existing = self._get_existing_record(student.id, request.attendance_date)
        if existing:
            existing.status = request.status
            existing.remarks = request.remarks
            record = existing
        else:
            record = AttendanceRecord(
                student_id=student.id,
                attendance_date=request.attendance_date,
                status=request.status,
                remarks=request.remarks,
            )
            self.db.add(record)

        self.db.flush()
        self.db.refresh(record)
        logger.debug(f"[ATTENDANCE] Student {student.id} {request.attendance_date}: {request.status.value}")
        return AttendanceResponse.model_validate(record)

    def get_summary(self, student_id: int) -> AttendanceSummary:
        """Per-status counts for one student."""
        student = self._get_student(student_id)
        statuses = [r.status for r in student.attendance_records]
        return AttendanceSummary(
            total=len(statuses),
            present=statuses.count(AttendanceStatus.PRESENT),
            absent=statuses.count(AttendanceStatus.ABSENT),
            late=statuses.count(AttendanceStatus.LATE),
            excused=statuses.count(AttendanceStatus.EXCUSED),
        )
