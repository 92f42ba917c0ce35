"""Follow-up task model (the counselor's action plan per student)."""

import enum
from datetime import date

from sqlalchemy import BigInteger, Boolean, Date, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from counseling.core.database import Base
from counseling.models.base import IDMixin, TimestampMixin


class TaskPriority(str, enum.Enum):
    """Task priority enumeration."""

    HIGH = "HIGH"  # عاجل
    MEDIUM = "MEDIUM"  # متوسط
    LOW = "LOW"  # عادي


class FollowUpTask(Base, IDMixin, TimestampMixin):
    """A follow-up action planned for one student."""

    __tablename__ = "follow_up_tasks"

    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    deadline: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    priority: Mapped[TaskPriority] = mapped_column(
        Enum(TaskPriority),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="follow_up_tasks",
    )

    @property
    def student_name(self) -> str:
        return self.student.name if self.student else ""

    def __repr__(self) -> str:
        return f"<FollowUpTask(id={self.id}, student_id={self.student_id}, done={self.is_completed})>"
