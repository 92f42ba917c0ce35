"""Spreadsheet exports and print-ready HTML for analysis and reports."""

import logging
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from counseling.schemas.analysis import AnalysisSnapshot, SubjectAnalysis
from counseling.schemas.report import ReportResponse, ReportType, Transcript

logger = logging.getLogger(__name__)

EXEMPT_LABEL = "معفاة"
NOT_COMPUTED = "-"

ANALYSIS_TITLE = "تقرير تحليل النتائج المدرسية"
SUMMARY_SHEET = "ملخص عام"
SUBJECT_SHEET = "تحليل المواد"
REPORT_SHEET = "التقرير"

SUBJECT_COLUMNS = [
    "المادة",
    "المعدل (المتوسط)",
    "معدل الذكور",
    "معدل الإناث",
    "نسبة النجاح",
    "الانحراف المعياري",
    "معامل التشتت",
    "المقارنة",
    "أكثر من 15",
    "10-15",
    "8-10",
    "أقل من 8",
]

REPORT_FILE_NAMES = {
    ReportType.GENERAL: "القائمة_العامة",
    ReportType.CRITICAL: "الحالات_الحرجة",
    ReportType.EXITED: "المتخرجون_من_النظام",
    ReportType.HONOR: "لوحة_الشرف",
    ReportType.INTERVIEWS: "سجل_المقابلات",
    ReportType.COMPREHENSIVE: "تقرير_الاداء_والسلوك",
}

INTERVIEW_TYPE_LABELS = {
    "PARENT": "ولي",
    "ADMIN": "إدارة",
    "STUDENT": "تلميذ",
    "OTHER": "تلميذ",
}

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)

# Styles
TITLE_FONT = Font(bold=True, size=14)
HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="1E293B", end_color="1E293B", fill_type="solid")
SECTION_FILL = PatternFill(start_color="B4C6E7", end_color="B4C6E7", fill_type="solid")
EXEMPT_FILL = PatternFill(start_color="F3F4F6", end_color="F3F4F6", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)
CENTER_ALIGN = Alignment(horizontal='center', vertical='center')


def _fixed(value: float, digits: int = 2) -> str:
    return f"{value:.{digits}f}"


def _percent(value: float, digits: int = 2) -> str:
    return f"{value:.{digits}f}%"


# ==========================================
# Analysis rows
# ==========================================

def subject_export_row(analysis: SubjectAnalysis) -> list[Any]:
    """Export cells for one subject, in ``SUBJECT_COLUMNS`` order.

    Exempt subjects carry placeholder text in every statistic column.
    """
    if analysis.is_exempt:
        return [
            analysis.subject,
            EXEMPT_LABEL,
            NOT_COMPUTED,
            NOT_COMPUTED,
            NOT_COMPUTED,
            NOT_COMPUTED,
            NOT_COMPUTED,
            EXEMPT_LABEL,
            NOT_COMPUTED,
            NOT_COMPUTED,
            NOT_COMPUTED,
            NOT_COMPUTED,
        ]
    return [
        analysis.subject,
        _fixed(analysis.average),
        _fixed(analysis.male_average),
        _fixed(analysis.female_average),
        _percent(analysis.pass_rate, 1),
        _fixed(analysis.std_dev),
        _percent(analysis.coefficient_of_variation),
        analysis.comparison.value,
        analysis.above15,
        analysis.between10and15,
        analysis.between8and10,
        analysis.below8,
    ]


def subject_export_rows(snapshot: AnalysisSnapshot) -> list[list[Any]]:
    return [subject_export_row(analysis) for analysis in snapshot.subjects]


def summary_export_rows(snapshot: AnalysisSnapshot, generated_on: date | None = None) -> list[list[Any]]:
    """Key/value rows of the summary sheet."""
    generated_on = generated_on or date.today()
    females = snapshot.females
    males = snapshot.males
    return [
        [ANALYSIS_TITLE],
        ["تاريخ الاستخراج", generated_on.isoformat()],
        [],
        ["الإحصائيات العامة"],
        ["عدد التلاميذ", snapshot.total_students],
        ["نسبة النجاح العامة", _percent(snapshot.overall_pass_rate)],
        ["معدل القسم العام", _fixed(snapshot.average_gpa)],
        [],
        ["تحليل حسب الجنس", "العدد", "المعدل", "نسبة النجاح"],
        ["إناث", females.total, _fixed(females.avg_gpa), _percent(females.rate)],
        ["ذكور", males.total, _fixed(males.avg_gpa), _percent(males.rate)],
    ]


def subject_print_cells(analysis: SubjectAnalysis) -> list[str]:
    """Print table cells: subject, average, male, female, comparison,
    deviation, dispersion, the four bands, pass rate."""
    if analysis.is_exempt:
        return [analysis.subject, EXEMPT_LABEL, NOT_COMPUTED, NOT_COMPUTED, EXEMPT_LABEL] + [NOT_COMPUTED] * 7
    return [
        analysis.subject,
        _fixed(analysis.average),
        _fixed(analysis.male_average),
        _fixed(analysis.female_average),
        analysis.comparison.value,
        _fixed(analysis.std_dev),
        _percent(analysis.coefficient_of_variation, 1),
        str(analysis.above15),
        str(analysis.between10and15),
        str(analysis.between8and10),
        str(analysis.below8),
        _percent(analysis.pass_rate, 1),
    ]


# ==========================================
# Workbooks
# ==========================================

def _write_header(ws, row: int, headers: list[str]) -> None:
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=row, column=col_idx, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = THIN_BORDER
        cell.alignment = CENTER_ALIGN


def _save(wb: Workbook) -> bytes:
    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def build_analysis_workbook(snapshot: AnalysisSnapshot, generated_on: date | None = None) -> bytes:
    """Two-sheet workbook: general summary and per-subject statistics."""
    wb = Workbook()

    summary_ws = wb.active
    summary_ws.title = SUMMARY_SHEET
    summary_ws.sheet_view.rightToLeft = True
    for row_idx, row in enumerate(summary_export_rows(snapshot, generated_on), start=1):
        for col_idx, value in enumerate(row, start=1):
            summary_ws.cell(row=row_idx, column=col_idx, value=value)
    summary_ws.cell(row=1, column=1).font = TITLE_FONT
    for row_idx in (4, 9):
        for col_idx in range(1, 5):
            cell = summary_ws.cell(row=row_idx, column=col_idx)
            cell.font = Font(bold=True)
            if cell.value is not None:
                cell.fill = SECTION_FILL
    summary_ws.column_dimensions['A'].width = 25
    for col in ('B', 'C', 'D'):
        summary_ws.column_dimensions[col].width = 15

    subject_ws = wb.create_sheet(SUBJECT_SHEET)
    subject_ws.sheet_view.rightToLeft = True
    _write_header(subject_ws, 1, SUBJECT_COLUMNS)
    for row_idx, analysis in enumerate(snapshot.subjects, start=2):
        for col_idx, value in enumerate(subject_export_row(analysis), start=1):
            cell = subject_ws.cell(row=row_idx, column=col_idx, value=value)
            cell.border = THIN_BORDER
            if col_idx > 1:
                cell.alignment = CENTER_ALIGN
            if analysis.is_exempt:
                cell.fill = EXEMPT_FILL

    column_widths = [20, 10, 10, 10, 10, 15, 15, 20, 10, 10, 10, 10]
    for col_idx, width in enumerate(column_widths, start=1):
        subject_ws.column_dimensions[get_column_letter(col_idx)].width = width

    logger.info(f"[REPORTS] Analysis workbook built: {len(snapshot.subjects)} subjects")
    return _save(wb)


def report_columns(report_type: ReportType) -> list[str]:
    base = ["رقم التسلسل", "الاسم واللقب", "القسم", "الجنس", "المعدل العام"]
    if report_type == ReportType.INTERVIEWS:
        return base + ["عدد المقابلات", "آخر مقابلة", "نوع المقابلات"]
    if report_type == ReportType.COMPREHENSIVE:
        return base + ["نقاط السلوك", "عدد الغيابات", "التصنيف/الحالة"]
    return base + ["تاريخ الميلاد", "نقاط السلوك", "الملاحظة"]


def report_rows(report: ReportResponse) -> list[list[Any]]:
    """Export cells for a report list, matching ``report_columns``."""
    rows = []
    for entry in report.entries:
        row = [entry.rank, entry.name, entry.grade, entry.gender or "-", entry.gpa]
        if report.report_type == ReportType.INTERVIEWS:
            types = "، ".join(INTERVIEW_TYPE_LABELS[t.value] for t in entry.interview_types)
            row += [
                entry.interview_count,
                entry.last_interview.isoformat() if entry.last_interview else "-",
                types or "-",
            ]
        elif report.report_type == ReportType.COMPREHENSIVE:
            row += [entry.points, entry.absences, entry.note]
        else:
            row += [entry.date_of_birth or "-", entry.points, entry.note]
        rows.append(row)
    return rows


def build_report_workbook(report: ReportResponse) -> bytes:
    """Single-sheet workbook for a report list."""
    wb = Workbook()
    ws = wb.active
    ws.title = REPORT_SHEET
    ws.sheet_view.rightToLeft = True

    headers = report_columns(report.report_type)
    last_col = get_column_letter(len(headers))
    ws.merge_cells(f'A1:{last_col}1')
    title_cell = ws.cell(row=1, column=1, value=report.title)
    title_cell.font = TITLE_FONT
    title_cell.alignment = CENTER_ALIGN
    title_cell.fill = SECTION_FILL

    _write_header(ws, 2, headers)
    for row_idx, row in enumerate(report_rows(report), start=3):
        for col_idx, value in enumerate(row, start=1):
            ws.cell(row=row_idx, column=col_idx, value=value).border = THIN_BORDER

    column_widths = [10, 30, 15, 10, 12, 15, 15, 20]
    for col_idx, width in enumerate(column_widths, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    logger.info(f"[REPORTS] {report.report_type.value} workbook built: {report.total} rows")
    return _save(wb)


def analysis_file_name(today: date | None = None) -> str:
    return f"تحليل_النتائج_{(today or date.today()).isoformat()}.xlsx"


def report_file_name(report_type: ReportType, today: date | None = None) -> str:
    return f"{REPORT_FILE_NAMES[report_type]}_{(today or date.today()).isoformat()}.xlsx"


# ==========================================
# Print HTML
# ==========================================

def render_analysis_html(
    snapshot: AnalysisSnapshot,
    logo_url: str | None = None,
    generated_on: date | None = None,
) -> str:
    """Self-contained right-to-left analysis report that prints itself on load."""
    template = _env.get_template("analysis_report.html")
    return template.render(
        title=ANALYSIS_TITLE,
        generated_on=(generated_on or date.today()).isoformat(),
        logo_url=logo_url,
        total_students=snapshot.total_students,
        overall_pass_rate=_percent(snapshot.overall_pass_rate),
        average_gpa=_fixed(snapshot.average_gpa),
        females={"avg_gpa": _fixed(snapshot.females.avg_gpa), "rate": _percent(snapshot.females.rate, 1)},
        males={"avg_gpa": _fixed(snapshot.males.avg_gpa), "rate": _percent(snapshot.males.rate, 1)},
        rows=[
            {"exempt": analysis.is_exempt, "cells": subject_print_cells(analysis)}
            for analysis in snapshot.subjects
        ],
    )


def render_transcript_html(transcript: Transcript, logo_url: str | None = None) -> str:
    """Printable results card for one student."""
    template = _env.get_template("transcript.html")
    return template.render(
        transcript=transcript,
        date_of_birth=transcript.date_of_birth or "-",
        logo_url=logo_url,
        strengths=transcript.strengths[:3],
        weaknesses=transcript.weaknesses[:3],
    )


def render_report_html(report: ReportResponse, logo_url: str | None = None, generated_on: date | None = None) -> str:
    """Printable version of a report list."""
    template = _env.get_template("report_list.html")
    return template.render(
        report=report,
        columns=report_columns(report.report_type),
        rows=report_rows(report),
        logo_url=logo_url,
        generated_on=(generated_on or date.today()).isoformat(),
    )
