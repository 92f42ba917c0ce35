"""Behavior log model (append-only points ledger)."""

import enum
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from counseling.core.config import settings
from counseling.core.database import Base
from counseling.models.base import IDMixin, TimestampMixin


class BehaviorType(str, enum.Enum):
    """Direction of a behavior log."""

    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"


class Severity(str, enum.Enum):
    """Severity of a negative behavior."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class BehaviorLog(Base, IDMixin, TimestampMixin):
    """A signed point delta recorded against a student."""

    __tablename__ = "behavior_logs"

    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    behavior_type: Mapped[BehaviorType] = mapped_column(
        Enum(BehaviorType),
        nullable=False,
        index=True,
    )
    points: Mapped[int] = mapped_column(Integer, nullable=False)  # Negative for NEGATIVE logs
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)  # Running total snapshot
    description: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[Severity | None] = mapped_column(Enum(Severity), nullable=True)
    logged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(settings.school_timezone),
        index=True,
    )

    # Relationships
    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="behavior_logs",
    )

    def __repr__(self) -> str:
        return f"<BehaviorLog(id={self.id}, student_id={self.student_id}, points={self.points})>"
