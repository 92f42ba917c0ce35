"""Shared fixtures: in-memory store, API client and results-sheet builders."""

from __future__ import annotations

import os

# Keep the application engine off the disk during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

from collections.abc import Callable
from io import BytesIO
from typing import Any

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import counseling.models  # noqa: F401
from counseling.core.database import Base, get_db
from counseling.main import app
from counseling.schemas.interview import InterviewBase
from counseling.schemas.student import AcademicRecordSchema, StudentRecord, SubjectResult


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Student records
# ---------------------------------------------------------------------------

@pytest.fixture
def make_student() -> Callable[..., StudentRecord]:
    """Build a pipeline record with one active academic record."""
    counter = iter(range(1, 10_000))

    def _make(
        name: str,
        subjects: dict[str, float] | None = None,
        average: float | None = 10.0,
        gender: str | None = None,
        total_points: int = 0,
        interview_titles: list[str] | tuple[str, ...] = (),
        grade: str = "4 متوسط 1",
    ) -> StudentRecord:
        records = []
        if average is not None:
            records.append(AcademicRecordSchema(
                year="2026",
                term="الفصل الحالي",
                subjects=[SubjectResult(subject=k, score=v) for k, v in (subjects or {}).items()],
                average=average,
            ))
        return StudentRecord(
            id=next(counter),
            name=name,
            grade=grade,
            gender=gender,
            total_points=total_points,
            academic_records=records,
            interviews=[InterviewBase(title=t) for t in interview_titles],
        )

    return _make


# ---------------------------------------------------------------------------
# Results sheets
# ---------------------------------------------------------------------------

INSTITUTION = "متوسطة الشهيد أحمد بوقرة"
CLASS_LINE = "المستوى : السنة الرابعة متوسط 4 متوسط 1"
CLASS_NAME = "4 متوسط 1"
SUBJECTS = ["الرياضيات", "اللغة العربية", "الفيزياء"]


def results_grid(
    students: list[list[Any]],
    subjects: list[str] | None = None,
) -> list[list[Any]]:
    """A results-sheet grid around the given student rows.

    Each student row is ``[name, dob, gender, repeater, *scores, average]``;
    column 0 receives the row number.
    """
    subjects = SUBJECTS if subjects is None else subjects
    grid: list[list[Any]] = [
        ["الجمهورية الجزائرية الديمقراطية الشعبية"],
        ["وزارة التربية الوطنية"],
        ["كشف النقاط"],
        ["", "م", INSTITUTION],
        [CLASS_LINE],
        ["الرقم", "الاسم واللقب", "تاريخ الميلاد", "الجنس", "الإعادة", *subjects, "المعدل"],
    ]
    for number, row in enumerate(students, start=1):
        grid.append([number, *row])
    grid.append(["توقيع المدير"])
    return grid


def workbook_bytes(grid: list[list[Any]]) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in grid:
        ws.append(row)
    output = BytesIO()
    wb.save(output)
    return output.getvalue()


@pytest.fixture
def sample_grid() -> list[list[Any]]:
    return results_grid([
        ["بن علي محمد", 36526, "ذكر", "لا", 12, 8, 10, 10.0],
        ["", None, None, None, None, None, None, None],
        ["سعدي مريم", 36561, "أنثى", "نعم", 16, 18, 17, 17.0],
    ])


@pytest.fixture
def sample_workbook(sample_grid) -> bytes:
    return workbook_bytes(sample_grid)
