"""Student management service."""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from counseling.core.exceptions import NotFoundError
from counseling.models.academic import AcademicRecord
from counseling.models.student import Student
from counseling.schemas.academic import ResultRow
from counseling.schemas.student import (
    PaginatedStudentResponse,
    StudentCreate,
    StudentFilter,
    StudentRecord,
    StudentResponse,
    StudentUpdate,
    SubjectResult,
)

logger = logging.getLogger(__name__)


def top_subject(student: StudentRecord) -> SubjectResult | None:
    """Highest score of the active record; the last one wins ties."""
    record = student.active_record
    if not record:
        return None
    best = None
    for result in record.subjects:
        if best is None or result.score >= best.score:
            best = result
    return best


def result_rows(
    students: list[StudentRecord],
    search: str | None = None,
    grade: str | None = None,
) -> list[ResultRow]:
    """Results list: students with results, optionally searched and filtered."""
    rows = []
    for student in students:
        if not student.has_results:
            continue
        if search and search not in student.name and search not in student.grade:
            continue
        if grade and student.grade != grade:
            continue
        rows.append(ResultRow(
            id=student.id,
            name=student.name,
            grade=student.grade,
            gender=student.gender,
            is_repeater=student.is_repeater,
            average=student.gpa,
            total_points=student.total_points,
            top_subject=top_subject(student),
            previous_records=len(student.academic_records) - 1,
        ))
    return rows


class StudentService:
    """Student management service."""

    def __init__(self, db: Session):
        self.db = db

    def create_student(self, request: StudentCreate) -> StudentResponse:
        """Create a new student."""
        student = Student(
            name=request.name,
            grade=request.grade,
            gender=request.gender,
            date_of_birth=request.date_of_birth,
            is_repeater=request.is_repeater,
            parent_name=request.parent_name,
            parent_phone_no=request.parent_phone_no,
            total_points=0,
        )
        self.db.add(student)
        self.db.flush()
        self.db.refresh(student)
        logger.info(f"[STUDENTS] Created student {student.id} ({student.grade})")
        return StudentResponse.model_validate(student)

    def get_student(self, student_id: int) -> Student:
        """Get student by ID."""
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def get_record(self, student_id: int) -> StudentRecord:
        """Full pipeline view of one student."""
        return StudentRecord.model_validate(self.get_student(student_id))

    def update_student(self, student_id: int, request: StudentUpdate) -> StudentResponse:
        """Update a student."""
        student = self.get_student(student_id)
        update_data = request.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(student, field, value)
        self.db.flush()
        self.db.refresh(student)
        return StudentResponse.model_validate(student)

    def delete_student(self, student_id: int) -> None:
        """Delete a student with all of their records."""
        student = self.get_student(student_id)
        self.db.delete(student)
        self.db.flush()
        logger.info(f"[STUDENTS] Deleted student {student_id}")

    def list_students(
        self,
        filters: StudentFilter | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStudentResponse:
        """List students with filtering and pagination."""
        query = select(Student)

        if filters:
            if filters.grade:
                query = query.where(Student.grade == filters.grade)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        Student.name.ilike(search_term),
                        Student.grade.ilike(search_term),
                    )
                )

        # Get total count
        count_query = select(func.count()).select_from(query.subquery())
        total = self.db.execute(count_query).scalar() or 0

        # Apply pagination
        offset = (page - 1) * page_size
        query = query.order_by(Student.grade, Student.name)
        query = query.offset(offset).limit(page_size)

        students = self.db.execute(query).scalars().all()

        return PaginatedStudentResponse(
            items=[StudentResponse.model_validate(s) for s in students],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        )

    def list_results(self, search: str | None = None, grade: str | None = None) -> list[ResultRow]:
        """Students holding imported results."""
        students = self.db.execute(
            select(Student).order_by(Student.grade, Student.name)
        ).scalars().all()
        records = [StudentRecord.model_validate(s) for s in students]
        return result_rows(records, search=search, grade=grade)

    def get_result_grades(self) -> list[str]:
        """Distinct grades of students holding imported results."""
        result = self.db.execute(
            select(Student.grade)
            .join(AcademicRecord, AcademicRecord.student_id == Student.id)
            .distinct()
            .order_by(Student.grade)
        )
        return [row[0] for row in result.all()]
