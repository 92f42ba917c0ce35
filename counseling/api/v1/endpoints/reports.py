"""Report list, export and print endpoints."""

from datetime import date
from io import BytesIO
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, StreamingResponse
from sqlalchemy.orm import Session

from counseling.core.config import settings
from counseling.core.database import get_db
from counseling.schemas.report import HonorEntry, ReportResponse, ReportType, Transcript
from counseling.services.analysis import AnalysisService
from counseling.services.report_export import (
    analysis_file_name,
    build_analysis_workbook,
    build_report_workbook,
    render_analysis_html,
    render_report_html,
    render_transcript_html,
    report_file_name,
)
from counseling.services.reports import ReportService

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _xlsx_response(content: bytes, filename: str) -> StreamingResponse:
    # Arabic file names need the RFC 5987 form
    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.get("/analysis/export")
def export_analysis(
    db: Annotated[Session, Depends(get_db)],
    grade: str | None = None,
):
    """Download the analysis workbook (summary and per-subject sheets)."""
    snapshot = AnalysisService(db).get_snapshot(grade)
    return _xlsx_response(build_analysis_workbook(snapshot), analysis_file_name())


@router.get("/analysis/print", response_class=HTMLResponse)
def print_analysis(
    db: Annotated[Session, Depends(get_db)],
    grade: str | None = None,
):
    """Printable analysis report."""
    snapshot = AnalysisService(db).get_snapshot(grade)
    return HTMLResponse(render_analysis_html(snapshot, logo_url=settings.INSTITUTION_LOGO_URL))


@router.get("/honor-board", response_model=list[HonorEntry])
def get_honor_board(
    db: Annotated[Session, Depends(get_db)],
    start: date | None = None,
    end: date | None = None,
    limit: int | None = Query(None, ge=1, le=500),
):
    """Students ranked by points earned in the period."""
    service = ReportService(db)
    return service.get_honor_board(start, end, limit or settings.HONOR_BOARD_SIZE)


@router.get("/transcript/{student_id}", response_model=Transcript)
def get_transcript(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Analysis of the student's latest results."""
    return ReportService(db).get_transcript(student_id)


@router.get("/transcript/{student_id}/print", response_class=HTMLResponse)
def print_transcript(
    student_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Printable results card."""
    transcript = ReportService(db).get_transcript(student_id)
    return HTMLResponse(render_transcript_html(transcript, logo_url=settings.INSTITUTION_LOGO_URL))


@router.get("/{report_type}", response_model=ReportResponse)
def get_report(
    report_type: ReportType,
    db: Annotated[Session, Depends(get_db)],
    grade: str | None = None,
    search: str | None = None,
    start: date | None = None,
    end: date | None = None,
):
    """
    Student list for one report type.

    ``start`` and ``end`` bound the honor board period and are ignored by
    the other lists.
    """
    service = ReportService(db)
    return service.get_report(report_type, grade=grade, search=search, start=start, end=end)


@router.get("/{report_type}/export")
def export_report(
    report_type: ReportType,
    db: Annotated[Session, Depends(get_db)],
    grade: str | None = None,
    search: str | None = None,
    start: date | None = None,
    end: date | None = None,
):
    """Download a report list as a workbook."""
    report = ReportService(db).get_report(report_type, grade=grade, search=search, start=start, end=end)
    return _xlsx_response(build_report_workbook(report), report_file_name(report_type))


@router.get("/{report_type}/print", response_class=HTMLResponse)
def print_report(
    report_type: ReportType,
    db: Annotated[Session, Depends(get_db)],
    grade: str | None = None,
    search: str | None = None,
    start: date | None = None,
    end: date | None = None,
):
    """Printable report list."""
    report = ReportService(db).get_report(report_type, grade=grade, search=search, start=start, end=end)
    return HTMLResponse(render_report_html(report, logo_url=settings.INSTITUTION_LOGO_URL))
