"""Report service: student lists, honor board and transcripts."""

import logging
from datetime import date

from sqlalchemy.orm import Session

from counseling.core.exceptions import NotFoundError, ValidationError
from counseling.schemas.report import HonorEntry, ReportResponse, ReportType, Transcript
from counseling.services.analysis import AnalysisService
from counseling.services.behavior import BehaviorService
from counseling.services.insights import build_report, honor_board, transcript
from counseling.services.student import StudentService

logger = logging.getLogger(__name__)


def _check_period(start: date | None, end: date | None) -> None:
    if start and end and start > end:
        raise ValidationError(
            "Period start is after its end",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )


class ReportService:
    """Builds report views from the current store."""

    def __init__(self, db: Session):
        self.db = db
        self.analysis = AnalysisService(db)
        self.behavior = BehaviorService(db)

    def get_report(
        self,
        report_type: ReportType,
        grade: str | None = None,
        search: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> ReportResponse:
        _check_period(start, end)
        students = self.analysis.load_students(grade)
        logs = self.behavior.entries(start, end) if report_type == ReportType.HONOR else None
        report = build_report(report_type, students, logs=logs, start=start, end=end, search=search)
        logger.info(f"[REPORTS] {report_type.value} report: {report.total} students, grade={grade or 'all'}")
        return report

    def get_honor_board(
        self,
        start: date | None = None,
        end: date | None = None,
        limit: int | None = None,
    ) -> list[HonorEntry]:
        _check_period(start, end)
        students = self.analysis.load_students()
        return honor_board(students, self.behavior.entries(start, end), start, end, limit=limit)

    def get_transcript(self, student_id: int) -> Transcript:
        """Transcript of the student's latest record."""
        record = StudentService(self.db).get_record(student_id)
        result = transcript(record)
        if result is None:
            raise NotFoundError("Academic record", str(student_id))
        return result
