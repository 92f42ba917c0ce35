"""Tests for categories, critical views, honor board, transcripts and report lists."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from counseling.models.attendance import AttendanceStatus
from counseling.models.interview import InterviewType
from counseling.schemas.attendance import AttendanceBase
from counseling.schemas.behavior import BehaviorLogEntry
from counseling.schemas.interview import InterviewBase
from counseling.schemas.report import ReportType
from counseling.services.insights import (
    NOTE_BEHAVIOR,
    NOTE_HIGH_AVERAGE,
    NOTE_HONOR,
    NOTE_LOW_ACHIEVEMENT,
    RECOMMENDATION_FAIL,
    REPORT_TITLES,
    build_report,
    categorize,
    comprehensive_insight,
    contains_any_keyword,
    critical_note,
    critical_students,
    exited_students,
    honor_board,
    observation_for,
    period_points,
    recommendation_for,
    school_day,
    transcript,
)
from counseling.services.student import top_subject


def log(student_id: int, points: int, day: date) -> BehaviorLogEntry:
    return BehaviorLogEntry(
        student_id=student_id,
        points=points,
        logged_at=datetime.combine(day, datetime.min.time()).replace(hour=10),
    )


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

class TestCategorize:
    def test_two_student_scenario(self, make_student):
        a = make_student("A", {"Math": 12, "Arabic": 8}, average=10.0)
        b = make_student("B", {"Math": 16, "Arabic": 18}, average=17.0, gender="أنثى")
        categories = categorize([a, b])
        assert [s.name for s in categories.top_performers] == ["B"]
        assert categories.struggling == []
        assert categories.learning_difficulties == []

    def test_gpa_bands(self, make_student):
        students = [
            make_student("top", average=15),
            make_student("struggling", average=8),
            make_student("edge", average=9.99),
            make_student("difficulty", average=7.99),
        ]
        categories = categorize(students)
        assert [s.name for s in categories.top_performers] == ["top"]
        assert [s.name for s in categories.struggling] == ["struggling", "edge"]
        assert [s.name for s in categories.learning_difficulties] == ["difficulty"]

    def test_behavior_threshold_inclusive(self, make_student):
        students = [make_student("x", total_points=-5), make_student("y", total_points=-4)]
        assert [s.name for s in categorize(students).behavioral_disorders] == ["x"]

    def test_keyword_categories_overlap(self, make_student):
        student = make_student("x", interview_titles=["حالة قلق وخوف", "متابعة طيف التوحد"])
        categories = categorize([student])
        assert categories.psychological == [student]
        assert categories.special_cases == [student]

    def test_students_without_results_skipped(self, make_student):
        student = make_student("x", average=None, total_points=-20, interview_titles=["قلق"])
        categories = categorize([student])
        assert categories.behavioral_disorders == []
        assert categories.psychological == []
        assert categories.learning_difficulties == []


class TestContainsAnyKeyword:
    def test_substring(self):
        assert contains_any_keyword("مشكل نفسية عائلية", ["نفسي"]) is True

    def test_no_match(self):
        assert contains_any_keyword("تأخر متكرر", ["قلق", "خوف"]) is False

    def test_empty_text(self):
        assert contains_any_keyword(None, ["قلق"]) is False
        assert contains_any_keyword("", ["قلق"]) is False

    def test_case_sensitive(self):
        assert contains_any_keyword("Health check", ["health"]) is False


# ---------------------------------------------------------------------------
# Critical and exited
# ---------------------------------------------------------------------------

class TestCriticalStudents:
    def test_distinguished_never_critical(self, make_student):
        student = make_student("x", average=12, total_points=-50)
        assert critical_students([student]) == []
        assert exited_students([student]) == [student]

    def test_low_average(self, make_student):
        student = make_student("x", average=9.5)
        assert critical_students([student]) == [student]
        assert critical_note(student) == NOTE_LOW_ACHIEVEMENT

    def test_low_points(self, make_student):
        student = make_student("x", average=11, total_points=-6)
        assert critical_students([student]) == [student]
        assert critical_note(student) == NOTE_BEHAVIOR

    def test_points_threshold_exclusive(self, make_student):
        assert critical_students([make_student("x", average=11, total_points=-5)]) == []

    def test_without_results(self, make_student):
        calm = make_student("calm", average=None)
        unruly = make_student("unruly", average=None, total_points=-6)
        assert critical_students([calm, unruly]) == [unruly]
        assert exited_students([calm, unruly]) == []


class TestComprehensiveInsight:
    @pytest.mark.parametrize(
        ("average", "points", "tone"),
        [
            (15, 10, "emerald"),
            (12, -6, "purple"),
            (8.5, 5, "orange"),
            (9, -6, "red"),
            (9.5, 0, "yellow"),
            (11, -6, "pink"),
            (11, 0, "gray"),
            (16, -6, "purple"),
        ],
    )
    def test_rules_in_order(self, make_student, average, points, tone):
        student = make_student("x", average=average, total_points=points)
        assert comprehensive_insight(student).tone == tone

    def test_label(self, make_student):
        assert comprehensive_insight(make_student("x", average=11)).label == "وضع مستقر"


# ---------------------------------------------------------------------------
# Honor board
# ---------------------------------------------------------------------------

class TestHonorBoard:
    @pytest.fixture
    def logs(self):
        return [
            log(1, 5, date(2026, 10, 1)),
            log(1, 3, date(2026, 10, 15)),
            log(2, 10, date(2026, 9, 30)),
            log(2, 2, date(2026, 10, 10)),
            log(3, -4, date(2026, 10, 5)),
            log(3, 1, date(2026, 10, 6)),
        ]

    def test_bounds_inclusive(self, logs):
        totals = period_points(logs, date(2026, 10, 1), date(2026, 10, 15))
        assert totals == {1: 8, 2: 2, 3: -3}

    def test_ranked_positive_only(self, make_student, logs):
        students = [make_student(n) for n in ("first", "second", "third")]
        board = honor_board(students, logs, date(2026, 10, 1), date(2026, 10, 31))
        assert [(e.name, e.period_points) for e in board] == [("first", 8), ("second", 2)]

    def test_open_start(self, make_student, logs):
        students = [make_student(n) for n in ("first", "second", "third")]
        board = honor_board(students, logs, end=date(2026, 10, 31))
        assert [(e.name, e.period_points) for e in board] == [("second", 12), ("first", 8)]

    def test_limit(self, make_student, logs):
        students = [make_student(n) for n in ("first", "second", "third")]
        board = honor_board(students, logs, end=date(2026, 10, 31), limit=1)
        assert [e.name for e in board] == ["second"]

    def test_aware_timestamps_use_school_day(self):
        just_after_midnight = BehaviorLogEntry(
            student_id=1, points=5, logged_at=datetime(2026, 9, 30, 23, 30, tzinfo=timezone.utc),
        )
        late_evening = BehaviorLogEntry(
            student_id=2, points=3, logged_at=datetime(2026, 10, 15, 23, 30, tzinfo=timezone.utc),
        )
        totals = period_points([just_after_midnight, late_evening], date(2026, 10, 1), date(2026, 10, 15))
        assert totals == {1: 5}


class TestSchoolDay:
    def test_naive_is_already_school_time(self):
        assert school_day(datetime(2026, 10, 1, 0, 30)) == date(2026, 10, 1)

    def test_aware_is_converted(self):
        assert school_day(datetime(2026, 9, 30, 23, 30, tzinfo=timezone.utc)) == date(2026, 10, 1)
        plus_two = timezone(timedelta(hours=2))
        assert school_day(datetime(2026, 10, 1, 0, 30, tzinfo=plus_two)) == date(2026, 9, 30)


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------

class TestTranscript:
    def test_without_record(self, make_student):
        assert transcript(make_student("x", average=None)) is None

    def test_ties_keep_last_subject(self, make_student):
        student = make_student("x", {"Math": 15, "Arabic": 15, "Art": 9, "Music": 9}, average=12)
        result = transcript(student)
        assert result.max_subject.subject == "Arabic"
        assert result.min_subject.subject == "Music"
        assert result.wide_gap is False

    def test_tie_on_top_subject(self, make_student):
        student = make_student("x", {"Math": 15, "Arabic": 15, "Art": 9}, average=12)
        assert top_subject(student).subject == "Arabic"
        assert top_subject(make_student("y", average=None)) is None

    def test_strengths_and_weaknesses(self, make_student):
        student = make_student("x", {"A": 13, "B": 18, "C": 9.5, "D": 4, "E": 11}, average=11)
        result = transcript(student)
        assert [r.subject for r in result.strengths] == ["B", "A"]
        assert [r.subject for r in result.weaknesses] == ["D", "C"]
        assert result.wide_gap is True

    def test_observations(self, make_student):
        result = transcript(make_student("x", {"A": 18, "B": 14, "C": 9.99}, average=14))
        assert [line.observation for line in result.lines] == ["ممتاز", "جيد", "ضعيف"]

    def test_empty_subjects(self, make_student):
        result = transcript(make_student("x", {}, average=9))
        assert result.max_subject is None
        assert result.lines == []
        assert result.recommendation == RECOMMENDATION_FAIL

    @pytest.mark.parametrize(
        ("score", "label"),
        [(18, "ممتاز"), (16, "جيد جداً"), (14, "جيد"), (12, "قريب من الجيد"), (10, "متوسط"), (9.99, "ضعيف")],
    )
    def test_observation_bands(self, score, label):
        assert observation_for(score) == label

    def test_recommendation_bands(self):
        assert recommendation_for(16).startswith("نتائج ممتازة")
        assert recommendation_for(15.99).startswith("نتائج جيدة جداً")
        assert recommendation_for(12).startswith("مستوى جيد")
        assert recommendation_for(10).startswith("مستوى متوسط")
        assert recommendation_for(0) == RECOMMENDATION_FAIL


# ---------------------------------------------------------------------------
# Report lists
# ---------------------------------------------------------------------------

class TestBuildReport:
    @pytest.fixture
    def students(self, make_student):
        good = make_student("good", average=14, total_points=3)
        weak = make_student("weak", average=8, total_points=0, grade="3 متوسط 2")
        seen = make_student("seen", average=11, total_points=-7).model_copy(update={
            "interviews": [
                InterviewBase(title="متابعة", interview_date=date(2026, 10, 12), interview_type=InterviewType.PARENT),
                InterviewBase(title="قلق", interview_date=date(2026, 9, 1)),
                InterviewBase(title="سلوك", interview_date=date(2026, 8, 1), interview_type=InterviewType.PARENT),
            ],
            "attendance_records": [
                AttendanceBase(attendance_date=date(2026, 10, 1), status=AttendanceStatus.ABSENT),
                AttendanceBase(attendance_date=date(2026, 10, 2), status=AttendanceStatus.LATE),
                AttendanceBase(attendance_date=date(2026, 10, 3), status=AttendanceStatus.ABSENT),
            ],
        })
        return [good, weak, seen]

    def test_general(self, students):
        report = build_report(ReportType.GENERAL, students)
        assert report.title == REPORT_TITLES[ReportType.GENERAL]
        assert report.total == 3
        assert [e.rank for e in report.entries] == [1, 2, 3]
        assert {e.note for e in report.entries} == {"-"}

    def test_critical(self, students):
        report = build_report(ReportType.CRITICAL, students)
        assert [(e.name, e.note) for e in report.entries] == [
            ("weak", NOTE_LOW_ACHIEVEMENT),
            ("seen", NOTE_BEHAVIOR),
        ]

    def test_exited(self, students):
        report = build_report(ReportType.EXITED, students)
        assert [(e.name, e.note) for e in report.entries] == [("good", NOTE_HIGH_AVERAGE)]

    def test_interviews(self, students):
        entry = build_report(ReportType.INTERVIEWS, students).entries[0]
        assert entry.name == "seen"
        assert entry.note == "عدد المقابلات: 3"
        assert entry.interview_count == 3
        assert entry.last_interview == date(2026, 10, 12)
        assert entry.interview_types == [InterviewType.PARENT, InterviewType.STUDENT]
        assert entry.absences == 2

    def test_comprehensive(self, students):
        report = build_report(ReportType.COMPREHENSIVE, students)
        assert [e.note for e in report.entries] == ["وضع مستقر", "يحتاج دعم دراسي", "يحتاج تقويم سلوكي"]

    def test_honor_uses_period_points(self, students):
        logs = [log(students[0].id, 4, date(2026, 10, 2)), log(students[2].id, 6, date(2026, 9, 1))]
        report = build_report(
            ReportType.HONOR, students, logs=logs, start=date(2026, 10, 1), end=date(2026, 10, 31),
        )
        assert [(e.name, e.points, e.note) for e in report.entries] == [("good", 4, NOTE_HONOR)]

    def test_search_renumbers(self, students):
        report = build_report(ReportType.GENERAL, students, search="3 متوسط")
        assert [(e.rank, e.name) for e in report.entries] == [(1, "weak")]
