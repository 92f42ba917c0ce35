"""Behavior log service: the student points ledger."""

import logging
from datetime import date, datetime, time

from sqlalchemy import select
from sqlalchemy.orm import Session

from counseling.core.config import settings
from counseling.core.exceptions import NotFoundError
from counseling.models.behavior import BehaviorLog, BehaviorType
from counseling.models.student import Student
from counseling.schemas.behavior import BehaviorLogCreate, BehaviorLogEntry, BehaviorLogResponse

logger = logging.getLogger(__name__)


def school_time(moment: datetime | None = None) -> datetime:
    """Timestamp on the school clock; naive input is taken as school time already."""
    if moment is None:
        return datetime.now(settings.school_timezone)
    if moment.tzinfo:
        return moment.astimezone(settings.school_timezone)
    return moment


class BehaviorService:
    """Records behavior logs and keeps each student's total in step."""

    def __init__(self, db: Session):
        self.db = db

    def get_student(self, student_id: int) -> Student:
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def record(self, student_id: int, request: BehaviorLogCreate) -> BehaviorLogResponse:
        """
        Append a log and move the student's total by its signed points.

        Positive logs add the magnitude, negative logs subtract it. Severity
        is only kept on negative logs. The running total is allowed to go
        below zero.
        """
        student = self.get_student(student_id)

        if request.behavior_type == BehaviorType.POSITIVE:
            delta = abs(request.points)
            severity = None
        else:
            delta = -abs(request.points)
            severity = request.severity

        new_balance = student.total_points + delta
        student.total_points = new_balance

        log = BehaviorLog(
            student_id=student.id,
            behavior_type=request.behavior_type,
            points=delta,
            balance_after=new_balance,
            description=request.description,
            severity=severity,
            logged_at=school_time(request.logged_at),
        )
        self.db.add(log)
        self.db.flush()
        self.db.refresh(log)

        logger.info(
            f"[BEHAVIOR] Student {student.id}: {delta:+d} points "
            f"({request.behavior_type.value}), balance {new_balance}"
        )
        return BehaviorLogResponse.model_validate(log)

    def list_for_student(self, student_id: int, limit: int = 50) -> list[BehaviorLogResponse]:
        """Most recent logs of one student."""
        self.get_student(student_id)
        result = self.db.execute(
            select(BehaviorLog)
            .where(BehaviorLog.student_id == student_id)
            .order_by(BehaviorLog.logged_at.desc())
            .limit(limit)
        )
        return [BehaviorLogResponse.model_validate(log) for log in result.scalars().all()]

    def entries(self, start: date | None = None, end: date | None = None) -> list[BehaviorLogEntry]:
        """Logs reduced to student, points and time, optionally for a date range.

        The range is applied again by the honor board; narrowing it here only
        keeps the query small.
        """
        query = select(BehaviorLog.student_id, BehaviorLog.points, BehaviorLog.logged_at)
        if start:
            query = query.where(BehaviorLog.logged_at >= datetime.combine(start, time.min))
        if end:
            query = query.where(BehaviorLog.logged_at <= datetime.combine(end, time.max))
        result = self.db.execute(query)
        return [
            BehaviorLogEntry(student_id=row.student_id, points=row.points, logged_at=row.logged_at)
            for row in result.all()
        ]
