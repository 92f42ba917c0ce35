"""Interview record model."""

import enum
from datetime import date

from sqlalchemy import BigInteger, Date, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from counseling.core.database import Base
from counseling.models.base import IDMixin, TimestampMixin


class InterviewType(str, enum.Enum):
    """Who the counselor met with."""

    STUDENT = "STUDENT"
    PARENT = "PARENT"
    ADMIN = "ADMIN"
    OTHER = "OTHER"


class InterviewRecord(Base, IDMixin, TimestampMixin):
    """Counseling interview with structured notes."""

    __tablename__ = "interviews"

    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    interview_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    interview_type: Mapped[InterviewType] = mapped_column(
        Enum(InterviewType),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    proceedings: Mapped[str | None] = mapped_column(Text, nullable=True)
    assessment: Mapped[str | None] = mapped_column(Text, nullable=True)
    actions: Mapped[str | None] = mapped_column(Text, nullable=True)
    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)
    conclusion: Mapped[str | None] = mapped_column(Text, nullable=True)

    # PARENT interviews
    parent_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # ADMIN interviews
    admin_role: Mapped[str | None] = mapped_column(String(255), nullable=True)
    admin_relation: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Relationships
    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="interviews",
    )

    @property
    def student_name(self) -> str:
        """Get student name from relationship."""
        return self.student.name if self.student else ""

    @property
    def student_grade(self) -> str:
        """Get student grade from relationship."""
        return self.student.grade if self.student else ""

    def __repr__(self) -> str:
        return f"<InterviewRecord(student_id={self.student_id}, date={self.interview_date}, type={self.interview_type})>"
