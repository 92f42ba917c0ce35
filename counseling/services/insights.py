"""Intervention categories, critical views and per-student insights.

Every threshold below is its own business rule. Top performers start at 15,
"distinguished" students at 12, and the two are never merged into one
constant.
"""

import logging
from datetime import date, datetime

from counseling.core.config import settings
from counseling.models.attendance import AttendanceStatus
from counseling.schemas.analysis import StudentCategories
from counseling.schemas.behavior import BehaviorLogEntry
from counseling.schemas.report import (
    HonorEntry,
    ReportEntry,
    ReportResponse,
    ReportType,
    ScoreObservation,
    StudentInsight,
    Transcript,
)
from counseling.schemas.student import StudentRecord, SubjectResult

logger = logging.getLogger(__name__)

# ==========================================
# Thresholds
# ==========================================

# Categories
TOP_PERFORMER_GPA = 15
STRUGGLING_MIN_GPA = 8
PASS_GPA = 10
BEHAVIOR_DISORDER_POINTS = -5

# Critical / exited partition
DISTINGUISHED_GPA = 12
CRITICAL_POINTS = -5
CRITICAL_GPA = 10

# Transcript
STRENGTH_SCORE = 13
WEAKNESS_SCORE = 10
SCORE_GAP_WARNING = 8

PSYCHOLOGICAL_KEYWORDS = ("قلق", "خوف", "انطواء", "نفسي")
SPECIAL_CASE_KEYWORDS = ("صحة", "إعاقة", "طيف", "توحد", "حركة")

REPORT_TITLES = {
    ReportType.GENERAL: "القائمة العامة للتلاميذ",
    ReportType.CRITICAL: "قائمة الحالات الحرجة (المتابعة الخاصة)",
    ReportType.EXITED: "قائمة المتخرجون من النظام (خارج المتابعة)",
    ReportType.HONOR: "لوحة الشرف والتميز السلوكي",
    ReportType.INTERVIEWS: "قائمة التلاميذ الخاضعين للمقابلات الإرشادية",
    ReportType.COMPREHENSIVE: "تقرير الأداء الشامل (دراسي وسلوكي)",
}

NOTE_LOW_ACHIEVEMENT = "تدني التحصيل"
NOTE_BEHAVIOR = "سلوك"
NOTE_HIGH_AVERAGE = "معدل مرتفع"
NOTE_HONOR = "تميّز سلوكي"

# (min score, label), checked top down
OBSERVATION_BANDS = (
    (18, "ممتاز"),
    (16, "جيد جداً"),
    (14, "جيد"),
    (12, "قريب من الجيد"),
    (10, "متوسط"),
)
OBSERVATION_FAIL = "ضعيف"

RECOMMENDATIONS = (
    (16, "نتائج ممتازة. ينصح بالحفاظ على وتيرة العمل وتشجيع التلميذ على المشاركة في المسابقات العلمية."),
    (14, "نتائج جيدة جداً. التلميذ يملك قدرات عالية، يحتاج فقط لتعزيز الثقة في المواد التي تقل علامته فيها عن 14."),
    (12, "مستوى جيد. يجب التركيز على نقاط الضعف المحددة أدناه لرفع المعدل العام."),
    (10, "مستوى متوسط. التلميذ يحتاج إلى مراجعة مكثفة وتنظيم وقت الدراسة لتجنب التراجع."),
)
RECOMMENDATION_FAIL = (
    "مستوى ضعيف (إنذار أكاديمي). يتطلب تدخلاً عاجلاً ودروس دعم في المواد الأساسية وتواصل فوري مع الولي."
)


# ==========================================
# Categories
# ==========================================

def contains_any_keyword(text: str | None, keywords: tuple[str, ...] | list[str]) -> bool:
    """Plain case-sensitive substring match, no normalization."""
    if not text:
        return False
    return any(keyword in text for keyword in keywords)


def _has_interview_matching(student: StudentRecord, keywords: tuple[str, ...]) -> bool:
    return any(contains_any_keyword(i.title, keywords) for i in student.interviews)


def categorize(students: list[StudentRecord]) -> StudentCategories:
    """Split students with results into intervention categories.

    A student can land in several categories. Records are not modified.
    """
    eligible = [s for s in students if s.has_results]
    return StudentCategories(
        top_performers=[s for s in eligible if s.gpa >= TOP_PERFORMER_GPA],
        struggling=[s for s in eligible if STRUGGLING_MIN_GPA <= s.gpa < PASS_GPA],
        learning_difficulties=[s for s in eligible if s.gpa < STRUGGLING_MIN_GPA],
        behavioral_disorders=[s for s in eligible if s.total_points <= BEHAVIOR_DISORDER_POINTS],
        psychological=[s for s in eligible if _has_interview_matching(s, PSYCHOLOGICAL_KEYWORDS)],
        special_cases=[s for s in eligible if _has_interview_matching(s, SPECIAL_CASE_KEYWORDS)],
    )


def is_distinguished(student: StudentRecord) -> bool:
    return student.gpa >= DISTINGUISHED_GPA


def needs_intervention(student: StudentRecord) -> bool:
    """Critical when behavior or results are low, unless distinguished.

    Students without results have a GPA of 0 and are critical on points only.
    """
    if is_distinguished(student):
        return False
    gpa = student.gpa
    return student.total_points < CRITICAL_POINTS or 0 < gpa < CRITICAL_GPA


def critical_students(students: list[StudentRecord]) -> list[StudentRecord]:
    return [s for s in students if needs_intervention(s)]


def exited_students(students: list[StudentRecord]) -> list[StudentRecord]:
    """Students out of follow-up thanks to a high general average."""
    return [s for s in students if is_distinguished(s)]


def critical_note(student: StudentRecord) -> str:
    return NOTE_LOW_ACHIEVEMENT if student.gpa < CRITICAL_GPA else NOTE_BEHAVIOR


def comprehensive_insight(student: StudentRecord) -> StudentInsight:
    """Combined academic and behavior label; the first matching rule wins."""
    gpa = student.gpa
    points = student.total_points

    if gpa >= 15 and points >= 10:
        return StudentInsight(label="نموذج مثالي", tone="emerald")
    if gpa >= 12 and points < -5:
        return StudentInsight(label="مشاكل سلوكية رغم التفوق", tone="purple")
    if gpa < 9 and points >= 5:
        return StudentInsight(label="تعثر دراسي رغم الانضباط", tone="orange")
    if gpa < 10 and points < -5:
        return StudentInsight(label="خطر مزدوج (دراسي وسلوكي)", tone="red")
    if gpa < 10:
        return StudentInsight(label="يحتاج دعم دراسي", tone="yellow")
    if points < -5:
        return StudentInsight(label="يحتاج تقويم سلوكي", tone="pink")
    return StudentInsight(label="وضع مستقر", tone="gray")


# ==========================================
# Honor board
# ==========================================

def school_day(moment: datetime) -> date:
    """Calendar day of a log on the school clock; naive values are school time."""
    if moment.tzinfo:
        return moment.astimezone(settings.school_timezone).date()
    return moment.date()


def school_today() -> date:
    return datetime.now(settings.school_timezone).date()


def period_points(
    logs: list[BehaviorLogEntry],
    start: date | None = None,
    end: date | None = None,
) -> dict[int, int]:
    """Sum of log points per student inside [start, end], both days included."""
    totals: dict[int, int] = {}
    for log in logs:
        day = school_day(log.logged_at)
        if start and day < start:
            continue
        if end and day > end:
            continue
        totals[log.student_id] = totals.get(log.student_id, 0) + log.points
    return totals


def honor_board(
    students: list[StudentRecord],
    logs: list[BehaviorLogEntry],
    start: date | None = None,
    end: date | None = None,
    limit: int | None = None,
) -> list[HonorEntry]:
    """Students with a positive point balance over the period, best first."""
    totals = period_points(logs, start, end or school_today())
    entries = [
        HonorEntry(id=s.id, name=s.name, grade=s.grade, period_points=totals.get(s.id, 0))
        for s in students
    ]
    entries = [e for e in entries if e.period_points > 0]
    entries.sort(key=lambda e: e.period_points, reverse=True)
    return entries[:limit] if limit else entries


# ==========================================
# Transcript
# ==========================================

def observation_for(score: float) -> str:
    for minimum, label in OBSERVATION_BANDS:
        if score >= minimum:
            return label
    return OBSERVATION_FAIL


def recommendation_for(gpa: float) -> str:
    for minimum, text in RECOMMENDATIONS:
        if gpa >= minimum:
            return text
    return RECOMMENDATION_FAIL


def transcript(student: StudentRecord) -> Transcript | None:
    """Strengths, weaknesses and advice from the latest record; None without one."""
    record = student.active_record
    if record is None:
        return None

    subjects = record.subjects
    max_subject: SubjectResult | None = None
    min_subject: SubjectResult | None = None
    for result in subjects:
        # Non-strict comparisons let the last subject win ties
        if max_subject is None or result.score >= max_subject.score:
            max_subject = result
        if min_subject is None or result.score <= min_subject.score:
            min_subject = result

    return Transcript(
        student_id=student.id,
        name=student.name,
        grade=student.grade,
        date_of_birth=student.date_of_birth,
        record=record,
        lines=[
            ScoreObservation(subject=r.subject, score=r.score, observation=observation_for(r.score))
            for r in subjects
        ],
        strengths=sorted(
            [r for r in subjects if r.score >= STRENGTH_SCORE],
            key=lambda r: r.score,
            reverse=True,
        ),
        weaknesses=sorted(
            [r for r in subjects if r.score < WEAKNESS_SCORE],
            key=lambda r: r.score,
        ),
        max_subject=max_subject,
        min_subject=min_subject,
        wide_gap=bool(max_subject and min_subject and max_subject.score - min_subject.score > SCORE_GAP_WARNING),
        recommendation=recommendation_for(record.average),
    )


# ==========================================
# Report lists
# ==========================================

def matches_search(student: StudentRecord, search: str | None) -> bool:
    """Substring search over name or grade."""
    if not search:
        return True
    return search in student.name or search in student.grade


def _entry(rank: int, student: StudentRecord, points: int, note: str) -> ReportEntry:
    interview_types: list = []
    for interview in student.interviews:
        if interview.interview_type not in interview_types:
            interview_types.append(interview.interview_type)
    return ReportEntry(
        rank=rank,
        id=student.id,
        name=student.name,
        grade=student.grade,
        gender=student.gender,
        date_of_birth=student.date_of_birth,
        gpa=student.gpa,
        points=points,
        note=note,
        absences=len([a for a in student.attendance_records if a.status == AttendanceStatus.ABSENT]),
        interview_count=len(student.interviews),
        last_interview=student.interviews[0].interview_date if student.interviews else None,
        interview_types=interview_types,
    )


def build_report(
    report_type: ReportType,
    students: list[StudentRecord],
    logs: list[BehaviorLogEntry] | None = None,
    start: date | None = None,
    end: date | None = None,
    search: str | None = None,
) -> ReportResponse:
    """Numbered student list for one report type.

    ``students`` is expected newest interview first. Honor rows carry the
    points earned inside the period instead of the running total.
    """
    rows: list[tuple[StudentRecord, int, str]] = []

    if report_type == ReportType.CRITICAL:
        rows = [(s, s.total_points, critical_note(s)) for s in critical_students(students)]
    elif report_type == ReportType.EXITED:
        rows = [(s, s.total_points, NOTE_HIGH_AVERAGE) for s in exited_students(students)]
    elif report_type == ReportType.HONOR:
        by_id = {s.id: s for s in students}
        rows = [
            (by_id[e.id], e.period_points, NOTE_HONOR)
            for e in honor_board(students, logs or [], start, end)
        ]
    elif report_type == ReportType.INTERVIEWS:
        rows = [
            (s, s.total_points, f"عدد المقابلات: {len(s.interviews)}")
            for s in students
            if s.interviews
        ]
    elif report_type == ReportType.COMPREHENSIVE:
        rows = [(s, s.total_points, comprehensive_insight(s).label) for s in students]
    else:
        rows = [(s, s.total_points, "-") for s in students]

    rows = [row for row in rows if matches_search(row[0], search)]
    entries = [
        _entry(rank, student, points, note)
        for rank, (student, points, note) in enumerate(rows, start=1)
    ]
    logger.debug(f"[REPORTS] {report_type.value}: {len(entries)} rows")

    return ReportResponse(
        report_type=report_type,
        title=REPORT_TITLES[report_type],
        total=len(entries),
        entries=entries,
    )
