"""Student management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from counseling.core.database import get_db
from counseling.schemas.attendance import AttendanceCreate, AttendanceResponse, AttendanceSummary
from counseling.schemas.behavior import BehaviorLogCreate, BehaviorLogResponse
from counseling.schemas.common import MessageResponse
from counseling.schemas.follow_up import FollowUpTaskCreate, FollowUpTaskResponse
from counseling.schemas.interview import InterviewCreate, InterviewResponse
from counseling.schemas.report import StudentInsight
from counseling.schemas.scale import ScaleResultCreate, ScaleResultResponse
from counseling.schemas.student import (
    PaginatedStudentResponse,
    StudentCreate,
    StudentFilter,
    StudentResponse,
    StudentUpdate,
)
from counseling.services.attendance import AttendanceService
from counseling.services.behavior import BehaviorService
from counseling.services.follow_up import FollowUpTaskService
from counseling.services.insights import comprehensive_insight
from counseling.services.interview import InterviewService
from counseling.services.scales import ScaleResultService
from counseling.services.student import StudentService

router = APIRouter()


@router.post("", response_model=StudentResponse)
def create_student(
    request: StudentCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Create a new student."""
    service = StudentService(db)
    return service.create_student(request)


@router.get("", response_model=PaginatedStudentResponse)
def list_students(
    db: Annotated[Session, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    grade: str | None = None,
    search: str | None = None,
):
    """List students with filtering and pagination."""
    service = StudentService(db)
    filters = StudentFilter(grade=grade, search=search)
    return service.list_students(filters, page, page_size)


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Get a student by ID."""
    service = StudentService(db)
    student = service.get_student(student_id)
    return StudentResponse.model_validate(student)


@router.get("/{student_id}/insight", response_model=StudentInsight)
def get_student_insight(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Combined academic and behavior label for one student."""
    service = StudentService(db)
    return comprehensive_insight(service.get_record(student_id))


@router.patch("/{student_id}", response_model=StudentResponse)
def update_student(
    student_id: int,
    request: StudentUpdate,
    db: Annotated[Session, Depends(get_db)],
):
    """Update a student."""
    service = StudentService(db)
    return service.update_student(student_id, request)


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a student."""
    service = StudentService(db)
    service.delete_student(student_id)
    return MessageResponse(message="Student deleted successfully")


# ==========================================
# Behavior
# ==========================================

@router.post("/{student_id}/behavior-logs", response_model=BehaviorLogResponse)
def record_behavior(
    student_id: int,
    request: BehaviorLogCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Record a positive or negative behavior and update the student's points."""
    service = BehaviorService(db)
    return service.record(student_id, request)


@router.get("/{student_id}/behavior-logs", response_model=list[BehaviorLogResponse])
def list_behavior_logs(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
    limit: int = Query(50, ge=1, le=500),
):
    """Most recent behavior logs of a student."""
    service = BehaviorService(db)
    return service.list_for_student(student_id, limit)


# ==========================================
# Interviews and attendance
# ==========================================

@router.post("/{student_id}/interviews", response_model=InterviewResponse)
def create_interview(
    student_id: int,
    request: InterviewCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Record a counseling interview."""
    service = InterviewService(db)
    return service.create_interview(student_id, request)


@router.post("/{student_id}/attendance", response_model=AttendanceResponse)
def record_attendance(
    student_id: int,
    request: AttendanceCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Create or update the attendance record for a date."""
    service = AttendanceService(db)
    return service.record(student_id, request)


@router.get("/{student_id}/attendance/summary", response_model=AttendanceSummary)
def get_attendance_summary(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Per-status attendance counts for a student."""
    service = AttendanceService(db)
    return service.get_summary(student_id)


# ==========================================
# Follow-up tasks and scale results
# ==========================================

@router.post("/{student_id}/tasks", response_model=FollowUpTaskResponse)
def create_task(
    student_id: int,
    request: FollowUpTaskCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Plan a follow-up action for a student."""
    service = FollowUpTaskService(db)
    return service.create_task(student_id, request)


@router.get("/{student_id}/tasks", response_model=list[FollowUpTaskResponse])
def list_student_tasks(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    service = FollowUpTaskService(db)
    return service.list_for_student(student_id)


@router.post("/{student_id}/scale-results", response_model=ScaleResultResponse)
def save_scale_result(
    student_id: int,
    request: ScaleResultCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Score a completed questionnaire and keep it on the student's file."""
    service = ScaleResultService(db)
    return service.save_result(student_id, request)


@router.get("/{student_id}/scale-results", response_model=list[ScaleResultResponse])
def list_scale_results(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Saved questionnaire results, newest first."""
    service = ScaleResultService(db)
    return service.list_for_student(student_id)
