"""Analysis snapshot and insight schemas."""

import enum

from pydantic import ConfigDict

from counseling.schemas.common import BaseSchema
from counseling.schemas.student import StudentBrief, StudentRecord


class Comparison(str, enum.Enum):
    """Subject average relative to the class general average."""

    ABOVE = "أعلى من المعدل العام"
    BELOW = "أقل من المعدل العام"
    EQUAL = "مساوي للمعدل العام"


class SubjectKeyedSchema(BaseSchema):
    """Schema carrying a subject name exactly as typed in the sheet."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, str_strip_whitespace=False)


class SubjectAnalysis(SubjectKeyedSchema):
    """Descriptive statistics for one subject."""

    subject: str
    average: float
    male_average: float
    female_average: float
    pass_rate: float
    std_dev: float
    coefficient_of_variation: float
    comparison: Comparison
    above15: int
    between10and15: int
    between8and10: int
    below8: int
    passed_count: int
    count: int
    max_score: float
    min_score: float
    is_exempt: bool


class GradeDistribution(BaseSchema):
    """General-average bands."""

    excellent: int = 0  # >= 18
    very_good: int = 0  # [16, 18)
    good: int = 0  # [14, 16)
    close_to_good: int = 0  # [12, 14)
    acceptable: int = 0  # [10, 12)
    fail: int = 0  # < 10


class GenderStats(BaseSchema):
    """Pass rate, mean and bands for one gender bucket."""

    total: int = 0
    passed: int = 0
    rate: float = 0
    avg_gpa: float = 0
    dist: GradeDistribution = GradeDistribution()


class AnalysisSnapshot(BaseSchema):
    """Class-wide statistics derived from the current student list."""

    total_students: int = 0
    passed_students: int = 0
    overall_pass_rate: float = 0
    average_gpa: float = 0
    subjects: list[SubjectAnalysis] = []
    females: GenderStats = GenderStats()
    males: GenderStats = GenderStats()

    def subject(self, name: str) -> SubjectAnalysis | None:
        for analysis in self.subjects:
            if analysis.subject == name:
                return analysis
        return None


class SubjectScoreEntry(SubjectKeyedSchema):
    """A student's score in one subject."""

    id: int | None = None
    name: str
    grade: str = ""
    score: float


class SubjectDetail(SubjectKeyedSchema):
    """Drill-down into one subject."""

    subject: str
    stats: SubjectAnalysis | None = None
    students: list[SubjectScoreEntry] = []
    failing: list[SubjectScoreEntry] = []
    excelling: list[SubjectScoreEntry] = []


class WeakSubject(SubjectKeyedSchema):
    """Low-average subject with the students to support in it."""

    subject: str
    average: float
    struggling_students: list[SubjectScoreEntry] = []


class StudentCategories(BaseSchema):
    """Intervention categories over full student records; overlap allowed."""

    top_performers: list[StudentRecord] = []
    struggling: list[StudentRecord] = []
    learning_difficulties: list[StudentRecord] = []
    behavioral_disorders: list[StudentRecord] = []
    psychological: list[StudentRecord] = []
    special_cases: list[StudentRecord] = []


class CategoriesResponse(BaseSchema):
    """Intervention categories as returned by the API."""

    top_performers: list[StudentBrief] = []
    struggling: list[StudentBrief] = []
    learning_difficulties: list[StudentBrief] = []
    behavioral_disorders: list[StudentBrief] = []
    psychological: list[StudentBrief] = []
    special_cases: list[StudentBrief] = []
