"""Class results analysis: descriptive statistics over academic records."""

import logging
import math

from sqlalchemy import select
from sqlalchemy.orm import Session

from counseling.models.student import Student
from counseling.schemas.analysis import (
    AnalysisSnapshot,
    Comparison,
    GenderStats,
    GradeDistribution,
    SubjectAnalysis,
    SubjectDetail,
    SubjectScoreEntry,
    WeakSubject,
)
from counseling.schemas.student import StudentRecord

logger = logging.getLogger(__name__)

PASS_MARK = 10
FEMALE_MARKERS = ("أنثى", "F")

# Subject score bands
BAND_HIGH = 15
BAND_LOW = 8

# General-average bands for the gender breakdown
DIST_EXCELLENT = 18
DIST_VERY_GOOD = 16
DIST_GOOD = 14
DIST_CLOSE_TO_GOOD = 12

# Subject drill-down
EXCELLING_SCORE = 15
WEAK_SUBJECT_LIMIT = 3


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0


def _rate(part: int, total: int) -> float:
    return part / total * 100 if total else 0


def is_female(student: StudentRecord) -> bool:
    """Female bucket membership; everyone else, unknown included, is male."""
    return student.gender in FEMALE_MARKERS


def eligible_students(students: list[StudentRecord]) -> list[StudentRecord]:
    """Students with at least one imported academic record."""
    return [s for s in students if s.has_results]


def subject_universe(students: list[StudentRecord]) -> list[str]:
    """Every subject named in an active record, first-seen order, once each."""
    names: dict[str, None] = {}
    for student in students:
        record = student.active_record
        if record:
            for result in record.subjects:
                names.setdefault(result.subject, None)
    return list(names)


def _scores(students: list[StudentRecord], subject: str) -> list[float]:
    scores = []
    for student in students:
        score = student.active_record.score_for(subject)
        if score is not None:
            scores.append(score)
    return scores


def _compare(average: float, average_gpa: float) -> Comparison:
    if average > average_gpa:
        return Comparison.ABOVE
    if average < average_gpa:
        return Comparison.BELOW
    return Comparison.EQUAL


def analyze_subject(
    subject: str,
    students: list[StudentRecord],
    average_gpa: float,
) -> SubjectAnalysis | None:
    """Statistics for one subject over the students holding a score in it."""
    scores = _scores(students, subject)
    if not scores:
        return None

    female_scores = _scores([s for s in students if is_female(s)], subject)
    male_scores = _scores([s for s in students if not is_female(s)], subject)

    count = len(scores)
    average = sum(scores) / count
    passed = len([s for s in scores if s >= PASS_MARK])
    # Population standard deviation
    std_dev = math.sqrt(sum((s - average) ** 2 for s in scores) / count)
    max_score = max(scores)

    return SubjectAnalysis(
        subject=subject,
        average=average,
        male_average=_mean(male_scores),
        female_average=_mean(female_scores),
        pass_rate=_rate(passed, count),
        std_dev=std_dev,
        coefficient_of_variation=std_dev / average * 100 if average > 0 else 0,
        comparison=_compare(average, average_gpa),
        above15=len([s for s in scores if s >= BAND_HIGH]),
        between10and15=len([s for s in scores if PASS_MARK <= s < BAND_HIGH]),
        between8and10=len([s for s in scores if BAND_LOW <= s < PASS_MARK]),
        below8=len([s for s in scores if s < BAND_LOW]),
        passed_count=passed,
        count=count,
        max_score=max_score,
        min_score=min(scores),
        is_exempt=max_score == 0,
    )


def gender_stats(group: list[StudentRecord]) -> GenderStats:
    """Pass rate, mean general average and bands for one bucket."""
    averages = [s.gpa for s in group]
    total = len(averages)
    passed = len([a for a in averages if a >= PASS_MARK])
    return GenderStats(
        total=total,
        passed=passed,
        rate=_rate(passed, total),
        avg_gpa=_mean(averages),
        dist=GradeDistribution(
            excellent=len([a for a in averages if a >= DIST_EXCELLENT]),
            very_good=len([a for a in averages if DIST_VERY_GOOD <= a < DIST_EXCELLENT]),
            good=len([a for a in averages if DIST_GOOD <= a < DIST_VERY_GOOD]),
            close_to_good=len([a for a in averages if DIST_CLOSE_TO_GOOD <= a < DIST_GOOD]),
            acceptable=len([a for a in averages if PASS_MARK <= a < DIST_CLOSE_TO_GOOD]),
            fail=len([a for a in averages if a < PASS_MARK]),
        ),
    )


def compute_snapshot(students: list[StudentRecord]) -> AnalysisSnapshot:
    """Class-wide statistics for the students holding imported results.

    Pure: the same list always yields an equal snapshot. Empty cohorts give
    zero rates and averages rather than NaN.
    """
    eligible = eligible_students(students)
    total = len(eligible)
    passed = len([s for s in eligible if s.gpa >= PASS_MARK])
    average_gpa = _mean([s.gpa for s in eligible])

    subjects = []
    for subject in subject_universe(eligible):
        analysis = analyze_subject(subject, eligible, average_gpa)
        if analysis is not None:
            subjects.append(analysis)

    return AnalysisSnapshot(
        total_students=total,
        passed_students=passed,
        overall_pass_rate=_rate(passed, total),
        average_gpa=average_gpa,
        subjects=subjects,
        females=gender_stats([s for s in eligible if is_female(s)]),
        males=gender_stats([s for s in eligible if not is_female(s)]),
    )


def subject_detail(
    students: list[StudentRecord],
    subject: str,
    snapshot: AnalysisSnapshot | None = None,
) -> SubjectDetail:
    """Students holding a score in ``subject``, best first."""
    snapshot = snapshot or compute_snapshot(students)
    entries = []
    for student in eligible_students(students):
        score = student.active_record.score_for(subject)
        if score is not None:
            entries.append(SubjectScoreEntry(
                id=student.id,
                name=student.name,
                grade=student.grade,
                score=score,
            ))
    entries.sort(key=lambda e: e.score, reverse=True)

    return SubjectDetail(
        subject=subject,
        stats=snapshot.subject(subject),
        students=entries,
        failing=[e for e in entries if e.score < PASS_MARK],
        excelling=[e for e in entries if e.score >= EXCELLING_SCORE],
    )


def weakest_subjects(
    students: list[StudentRecord],
    snapshot: AnalysisSnapshot | None = None,
    limit: int = WEAK_SUBJECT_LIMIT,
) -> list[WeakSubject]:
    """Lowest-average taught subjects and who is below the pass mark in each.

    A student without a score in the subject counts as 0 here.
    """
    snapshot = snapshot or compute_snapshot(students)
    eligible = eligible_students(students)
    active = [s for s in snapshot.subjects if s.max_score > 0]
    lowest = sorted(active, key=lambda s: s.average)[:limit]

    weak = []
    for analysis in lowest:
        struggling = []
        for student in eligible:
            score = student.active_record.score_for(analysis.subject) or 0
            if score < PASS_MARK:
                struggling.append(SubjectScoreEntry(
                    id=student.id,
                    name=student.name,
                    grade=student.grade,
                    score=score,
                ))
        struggling.sort(key=lambda e: e.score)
        weak.append(WeakSubject(
            subject=analysis.subject,
            average=analysis.average,
            struggling_students=struggling,
        ))
    return weak


class AnalysisService:
    """Loads the student list and runs the analysis over it."""

    def __init__(self, db: Session):
        self.db = db

    def load_students(self, grade: str | None = None) -> list[StudentRecord]:
        """Current student list as pipeline records, optionally one class only."""
        query = select(Student).order_by(Student.grade, Student.name)
        if grade:
            query = query.where(Student.grade == grade)
        result = self.db.execute(query)
        return [StudentRecord.model_validate(s) for s in result.scalars().all()]

    def get_snapshot(self, grade: str | None = None) -> AnalysisSnapshot:
        students = self.load_students(grade)
        snapshot = compute_snapshot(students)
        logger.info(
            f"[ANALYSIS] Snapshot: {snapshot.total_students} students, "
            f"{len(snapshot.subjects)} subjects, grade={grade or 'all'}"
        )
        return snapshot

    def get_subject_detail(self, subject: str, grade: str | None = None) -> SubjectDetail:
        students = self.load_students(grade)
        return subject_detail(students, subject)

    def get_weakest_subjects(self, grade: str | None = None, limit: int = WEAK_SUBJECT_LIMIT) -> list[WeakSubject]:
        students = self.load_students(grade)
        return weakest_subjects(students, limit=limit)
