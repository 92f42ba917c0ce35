"""Academic results import and listing endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from counseling.core.config import settings
from counseling.core.database import get_db
from counseling.core.exceptions import UploadError
from counseling.schemas.academic import ImportMode, ImportResult, ResultRow
from counseling.services.academic_import import AcademicImportService
from counseling.services.student import StudentService

router = APIRouter()


@router.post("/upload", response_model=ImportResult)
def upload_results(
    db: Annotated[Session, Depends(get_db)],
    mode: ImportMode = Query(ImportMode.CURRENT),
    file: UploadFile = File(...),
):
    """
    Import a class results sheet.

    The whole file is parsed before anything is stored; a malformed sheet
    imports nothing.
    """
    # Validate file
    if not file.filename:
        raise UploadError("No file provided")

    if not any(file.filename.lower().endswith(ext) for ext in settings.ALLOWED_EXTENSIONS):
        raise UploadError(
            f"Only {', '.join(settings.ALLOWED_EXTENSIONS)} files are allowed",
            details={"filename": file.filename},
        )

    content = file.file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise UploadError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")

    service = AcademicImportService(db)
    return service.import_workbook(content, mode)


@router.get("", response_model=list[ResultRow])
def list_results(
    db: Annotated[Session, Depends(get_db)],
    search: str | None = None,
    grade: str | None = None,
):
    """Students holding imported results, with their latest general average."""
    service = StudentService(db)
    return service.list_results(search=search, grade=grade)


@router.get("/grades", response_model=list[str])
def list_result_grades(
    db: Annotated[Session, Depends(get_db)],
):
    """Grades that have imported results."""
    service = StudentService(db)
    return service.get_result_grades()
