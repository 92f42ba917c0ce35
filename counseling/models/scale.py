"""Psychometric scale result model."""

from datetime import date

from sqlalchemy import JSON, BigInteger, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from counseling.core.database import Base
from counseling.models.base import IDMixin, TimestampMixin


class ScaleResult(Base, IDMixin, TimestampMixin):
    """One completed questionnaire for a student, scored and interpreted."""

    __tablename__ = "scale_results"

    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    scale_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    # Title at the time of scoring, kept with the result
    scale_title: Mapped[str] = mapped_column(String(255), nullable=False)
    assessed_on: Mapped[date] = mapped_column(Date, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    max_score: Mapped[int] = mapped_column(Integer, nullable=False)
    level: Mapped[str] = mapped_column(String(255), nullable=False)
    advice: Mapped[str] = mapped_column(Text, nullable=False)
    # {"question id": option value}
    answers: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    # Relationships
    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="scale_results",
    )

    def __repr__(self) -> str:
        return f"<ScaleResult(student_id={self.student_id}, scale={self.scale_id}, score={self.score})>"
