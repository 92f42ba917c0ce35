"""Interview listing endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from counseling.core.database import get_db
from counseling.models.interview import InterviewType
from counseling.schemas.interview import InterviewFilter, InterviewResponse
from counseling.services.interview import InterviewService

router = APIRouter()


@router.get("", response_model=list[InterviewResponse])
def list_interviews(
    db: Annotated[Session, Depends(get_db)],
    interview_type: InterviewType | None = Query(None, alias="type"),
    search: str | None = None,
):
    """All interviews, newest first."""
    service = InterviewService(db)
    filters = InterviewFilter(interview_type=interview_type, search=search)
    return service.list_interviews(filters)
