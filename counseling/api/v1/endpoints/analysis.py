"""Results analysis endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from counseling.core.database import get_db
from counseling.schemas.analysis import (
    AnalysisSnapshot,
    CategoriesResponse,
    SubjectDetail,
    WeakSubject,
)
from counseling.schemas.student import StudentBrief
from counseling.services.analysis import WEAK_SUBJECT_LIMIT, AnalysisService
from counseling.services.insights import categorize

router = APIRouter()


@router.get("/snapshot", response_model=AnalysisSnapshot)
def get_snapshot(
    db: Annotated[Session, Depends(get_db)],
    grade: str | None = None,
):
    """Class-wide statistics, recomputed on every call."""
    service = AnalysisService(db)
    return service.get_snapshot(grade)


@router.get("/categories", response_model=CategoriesResponse)
def get_categories(
    db: Annotated[Session, Depends(get_db)],
    grade: str | None = None,
):
    """Intervention categories. A student may appear in several."""
    service = AnalysisService(db)
    categories = categorize(service.load_students(grade))
    return CategoriesResponse(**{
        name: [StudentBrief.from_record(s) for s in getattr(categories, name)]
        for name in CategoriesResponse.model_fields
    })


@router.get("/subjects/{subject}", response_model=SubjectDetail)
def get_subject_detail(
    subject: str,
    db: Annotated[Session, Depends(get_db)],
    grade: str | None = None,
):
    """Scores of every student in one subject, best first."""
    service = AnalysisService(db)
    return service.get_subject_detail(subject, grade)


@router.get("/weakest-subjects", response_model=list[WeakSubject])
def get_weakest_subjects(
    db: Annotated[Session, Depends(get_db)],
    grade: str | None = None,
    limit: int = Query(WEAK_SUBJECT_LIMIT, ge=1, le=20),
):
    """Lowest-average subjects with the students below the pass mark."""
    service = AnalysisService(db)
    return service.get_weakest_subjects(grade, limit)
