"""Counseling interview service."""

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from counseling.core.exceptions import NotFoundError
from counseling.models.interview import InterviewRecord, InterviewType
from counseling.models.student import Student
from counseling.schemas.interview import InterviewCreate, InterviewFilter, InterviewResponse

logger = logging.getLogger(__name__)

# Fields only meaningful for one interview type
PARENT_ONLY_FIELDS = ("parent_name",)
ADMIN_ONLY_FIELDS = ("admin_role", "admin_relation")


class InterviewService:
    """Interview records attached to students."""

    def __init__(self, db: Session):
        self.db = db

    def create_interview(self, student_id: int, request: InterviewCreate) -> InterviewResponse:
        """Record an interview; type-specific fields are dropped for other types."""
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))

        data = request.model_dump()
        if request.interview_type != InterviewType.PARENT:
            for field in PARENT_ONLY_FIELDS:
                data[field] = None
        if request.interview_type != InterviewType.ADMIN:
            for field in ADMIN_ONLY_FIELDS:
                data[field] = None

        interview = InterviewRecord(student_id=student.id, **data)
        self.db.add(interview)
        self.db.flush()
        self.db.refresh(interview)

        logger.info(
            f"[INTERVIEWS] {request.interview_type.value} interview recorded for student {student.id}"
        )
        return InterviewResponse.model_validate(interview)

    def list_interviews(self, filters: InterviewFilter | None = None) -> list[InterviewResponse]:
        """All interviews, newest first, filtered by type and by a substring
        of the student name or the title."""
        query = (
            select(InterviewRecord)
            .join(Student, InterviewRecord.student_id == Student.id)
            .options(selectinload(InterviewRecord.student))
        )

        if filters:
            if filters.interview_type:
                query = query.where(InterviewRecord.interview_type == filters.interview_type)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        Student.name.like(search_term),
                        InterviewRecord.title.like(search_term),
                    )
                )

        query = query.order_by(InterviewRecord.interview_date.desc(), InterviewRecord.id.desc())
        result = self.db.execute(query)
        return [InterviewResponse.model_validate(i) for i in result.scalars().all()]
