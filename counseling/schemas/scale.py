"""Psychometric scale schemas."""

import enum
from datetime import date

from pydantic import Field, computed_field

from counseling.schemas.common import BaseSchema, TimestampSchema


class EducationStage(str, enum.Enum):
    """School stage a questionnaire is written for."""

    ELEMENTARY = "ELEMENTARY"
    MIDDLE = "MIDDLE"
    HIGH = "HIGH"


class ScaleOption(BaseSchema):
    """One answer choice and the points it is worth."""

    value: int
    label: str


class ScaleQuestion(BaseSchema):
    id: int
    text: str


class ScaleDefinition(BaseSchema):
    """A fixed questionnaire."""

    id: str
    title: str
    description: str
    target_stages: list[EducationStage]
    options: list[ScaleOption]
    questions: list[ScaleQuestion]

    @computed_field
    @property
    def max_score(self) -> int:
        return len(self.questions) * max(option.value for option in self.options)


class ScaleInterpretation(BaseSchema):
    """Level reached, with its display tone and the advice for the counselor."""

    level: str
    tone: str
    advice: str


class ScaleScore(BaseSchema):
    """Scored answers, before or after saving."""

    scale_id: str
    scale_title: str
    score: int
    max_score: int
    interpretation: ScaleInterpretation


class ScaleAnswers(BaseSchema):
    """Answers keyed by question id."""

    answers: dict[int, int] = Field(default_factory=dict)


class ScaleResultCreate(ScaleAnswers):
    """Scale result creation schema."""

    scale_id: str = Field(..., min_length=1, max_length=100)
    assessed_on: date | None = None


class ScaleResultResponse(TimestampSchema):
    """Scale result response schema."""

    id: int
    student_id: int
    scale_id: str
    scale_title: str
    assessed_on: date
    score: int
    max_score: int
    level: str
    advice: str
    answers: dict[int, int] = {}
