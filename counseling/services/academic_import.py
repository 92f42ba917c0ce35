"""Academic results import: results-sheet parsing and merge into the store."""

import logging
import math
import re
from datetime import date, datetime
from io import BytesIO
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.datetime import from_excel
from sqlalchemy import select
from sqlalchemy.orm import Session

from counseling.core.exceptions import MalformedInputError
from counseling.models.academic import AcademicRecord
from counseling.models.student import Student
from counseling.schemas.academic import ImportMode, ImportResult, ParsedImport, ParsedStudent
from counseling.schemas.student import AcademicRecordSchema, SubjectResult

logger = logging.getLogger(__name__)

# ==========================================
# Sheet layout
# ==========================================

MIN_ROWS = 8
INSTITUTION_ROW = 3
CLASS_ROW = 4
SUBJECT_HEADER_ROW = 5
FIRST_STUDENT_ROW = 6
FIRST_SUBJECT_COL = 5

NAME_COL = 1
DOB_COL = 2
GENDER_COL = 3
REPEATER_COL = 4

# Leading words of the class line ("القسم: السنة ... ") before the actual class name
CLASS_PREFIX_WORDS = 5

DEFAULT_INSTITUTION = "مؤسسة غير محددة"
DEFAULT_CLASS = "قسم غير محدد"
REPEATER_MARKERS = ("نعم", "معيد")

CURRENT_TERM_LABEL = "الفصل الحالي"
PREVIOUS_TERM_LABEL = "المعدل السنوي"

_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_LEADING_FLOAT_RE = re.compile(r"^\s*([+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?)")


# ==========================================
# Cell helpers
# ==========================================

def _cell(row: list[Any] | None, index: int) -> Any:
    if not row or index < 0 or index >= len(row):
        return None
    return row[index]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_score(value: Any) -> float | None:
    """Numeric value of a score cell, or None when absent or unparseable."""
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        return float(value)
    if _is_number(value):
        return float(value) if math.isfinite(value) else None
    text = str(value).strip()
    if not _NUMBER_RE.match(text):
        return None
    return float(text)


def parse_average(value: Any) -> float:
    """General average cell; leading-float parse, 0 when nothing is readable."""
    if _is_number(value):
        number = float(value)
    else:
        match = _LEADING_FLOAT_RE.match(str(value)) if value is not None else None
        if not match:
            return 0.0
        number = float(match.group(1))
    if not math.isfinite(number):
        return 0.0
    # Two decimals of the binary value, so 9.995 stays 9.99
    return float(f"{number:.2f}")


def format_birth_date(value: Any) -> str | None:
    """Date of birth as ``YYYY-MM-DD`` for date cells and spreadsheet serials."""
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    if _is_number(value):
        try:
            moment = from_excel(value)
        except (ValueError, OverflowError):
            return str(value)
        return f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
    return str(value)


def extract_institution_name(row: list[Any] | None) -> str:
    if not row:
        return DEFAULT_INSTITUTION
    for cell in row:
        if not _is_blank(cell) and len(str(cell)) > 3:
            return str(cell).strip()
    first = _cell(row, 0)
    if _is_blank(first):
        return DEFAULT_INSTITUTION
    return str(first).strip()


def extract_class_name(row: list[Any] | None) -> str:
    if not row:
        return DEFAULT_CLASS
    raw = " ".join(str(cell).strip() for cell in row if not _is_blank(cell)).strip()
    words = raw.split()
    if len(words) > CLASS_PREFIX_WORDS:
        return " ".join(words[CLASS_PREFIX_WORDS:])
    return raw or DEFAULT_CLASS


def extract_subjects(row: list[Any] | None) -> list[str]:
    """Subject headers from column 5 up to, not including, the last column."""
    if not row:
        return []
    last_col = len(row) - 1
    return [
        str(row[col]).strip()
        for col in range(FIRST_SUBJECT_COL, last_col)
        if not _is_blank(row[col])
    ]


def record_labels(mode: ImportMode, today: date | None = None) -> tuple[str, str]:
    """Year and term stamped on imported records."""
    year = (today or date.today()).year
    if mode == ImportMode.CURRENT:
        return str(year), CURRENT_TERM_LABEL
    return str(year - 1), PREVIOUS_TERM_LABEL


# ==========================================
# Parsing
# ==========================================

def parse_academic_grid(
    rows: list[list[Any]],
    mode: ImportMode = ImportMode.CURRENT,
    today: date | None = None,
) -> ParsedImport:
    """Turn a results-sheet grid into partial students.

    Rows 0-2 are ignored, row 3 holds the institution, row 4 the class,
    row 5 the subject headers and rows 6 to the penultimate row one student
    each. The last row is a footer and is never read.
    """
    if rows is None or len(rows) < MIN_ROWS:
        raise MalformedInputError(
            "Results sheet does not contain enough rows",
            details={"rows": len(rows or []), "minimum": MIN_ROWS},
        )

    institution_name = extract_institution_name(rows[INSTITUTION_ROW])
    class_name = extract_class_name(rows[CLASS_ROW])
    subjects = extract_subjects(rows[SUBJECT_HEADER_ROW])
    year, term = record_labels(mode, today)
    logger.debug(f"[ACADEMIC IMPORT] Header: institution={institution_name!r}, class={class_name!r}, subjects={subjects}")

    students: list[ParsedStudent] = []
    skipped = 0
    for row_num in range(FIRST_STUDENT_ROW, len(rows) - 1):
        row = rows[row_num]
        name_cell = _cell(row, NAME_COL)
        if _is_blank(name_cell):
            skipped += 1
            continue

        gender_cell = _cell(row, GENDER_COL)
        repeater_text = "" if _is_blank(_cell(row, REPEATER_COL)) else str(row[REPEATER_COL]).strip()

        results: list[SubjectResult] = []
        for idx, subject in enumerate(subjects):
            score = parse_score(_cell(row, FIRST_SUBJECT_COL + idx))
            if score is not None:
                results.append(SubjectResult(subject=subject, score=score))

        students.append(ParsedStudent(
            name=str(name_cell).strip(),
            grade=class_name,
            gender=None if _is_blank(gender_cell) else str(gender_cell).strip(),
            is_repeater=any(marker in repeater_text for marker in REPEATER_MARKERS),
            date_of_birth=format_birth_date(_cell(row, DOB_COL)),
            academic_records=[AcademicRecordSchema(
                year=year,
                term=term,
                subjects=results,
                average=parse_average(_cell(row, len(row) - 1)),
            )],
        ))

    logger.info(f"[ACADEMIC IMPORT] Parsed {len(students)} students, {skipped} rows without a name skipped")
    return ParsedImport(
        students=students,
        institution_name=institution_name,
        class_name=class_name,
        subjects=subjects,
    )


def read_workbook_grid(file_content: bytes) -> list[list[Any]]:
    """Read the first sheet of an xlsx file as rows of cached cell values.

    Trailing empty cells are dropped from each row and blank rows are kept
    as empty lists, so "last column" means the last filled cell of a row.
    """
    try:
        workbook = load_workbook(filename=BytesIO(file_content), read_only=True, data_only=True)
    except Exception as e:
        logger.error(f"[ACADEMIC IMPORT] Failed to load workbook: {str(e)}")
        raise MalformedInputError(f"Invalid Excel file: {str(e)}")

    try:
        if not workbook.worksheets:
            raise MalformedInputError("Excel file has no sheets")
        sheet = workbook.worksheets[0]
        grid = []
        for values in sheet.iter_rows(values_only=True):
            row = list(values)
            while row and _is_blank(row[-1]):
                row.pop()
            grid.append(row)
    finally:
        workbook.close()

    logger.debug(f"[ACADEMIC IMPORT] Read {len(grid)} raw rows from sheet")
    return grid


# ==========================================
# Store merge
# ==========================================

class AcademicImportService:
    """Imports results sheets into the student store."""

    def __init__(self, db: Session):
        self.db = db

    def import_workbook(
        self,
        file_content: bytes,
        mode: ImportMode = ImportMode.CURRENT,
        today: date | None = None,
    ) -> ImportResult:
        """Parse an uploaded workbook and merge it.

        Parsing completes before anything is written, so a malformed file
        leaves the store untouched.
        """
        logger.info(f"[ACADEMIC IMPORT] Starting - mode={mode.value}, file_size={len(file_content)} bytes")
        grid = read_workbook_grid(file_content)
        parsed = parse_academic_grid(grid, mode, today)
        return self.merge(parsed, mode)

    def merge(self, parsed: ParsedImport, mode: ImportMode) -> ImportResult:
        """Prepend each parsed record to its student, creating unknown students.

        A student is matched on exact name and grade against the students that
        existed before this import.
        """
        existing: dict[tuple[str, str], Student] = {}
        for student in self.db.execute(select(Student)).scalars().all():
            existing.setdefault((student.name, student.grade), student)

        created = 0
        updated = 0
        for entry in parsed.students:
            student = existing.get((entry.name, entry.grade))
            if student is None:
                student = Student(
                    name=entry.name,
                    grade=entry.grade,
                    gender=entry.gender,
                    date_of_birth=entry.date_of_birth,
                    is_repeater=entry.is_repeater,
                    total_points=0,
                )
                self.db.add(student)
                created += 1
            else:
                if mode == ImportMode.CURRENT:
                    student.is_repeater = entry.is_repeater
                if entry.gender:
                    student.gender = entry.gender
                if entry.date_of_birth:
                    student.date_of_birth = entry.date_of_birth
                updated += 1

            for record in entry.academic_records:
                student.academic_records.insert(0, AcademicRecord(
                    year=record.year,
                    term=record.term,
                    subjects=[result.model_dump() for result in record.subjects],
                    average=record.average,
                ))

        self.db.flush()

        total = len(parsed.students)
        logger.info(f"[ACADEMIC IMPORT] Completed: {total} students ({created} new, {updated} updated)")

        return ImportResult(
            institution_name=parsed.institution_name,
            class_name=parsed.class_name,
            mode=mode,
            total=total,
            created=created,
            updated=updated,
            message=f"Imported {total} students from {parsed.class_name}.",
        )
