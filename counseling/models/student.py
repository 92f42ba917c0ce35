"""Student model."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from counseling.core.database import Base
from counseling.models.base import IDMixin, TimestampMixin


class Student(Base, IDMixin, TimestampMixin):
    """Student followed by the counseling office."""

    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    grade: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    gender: Mapped[str | None] = mapped_column(String(50), nullable=True)
    date_of_birth: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_repeater: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Running sum of behavior log deltas
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    parent_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    parent_phone_no: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Relationships
    # Newest import first: academic_records[0] is the active record
    academic_records: Mapped[list["AcademicRecord"]] = relationship(
        "AcademicRecord",
        back_populates="student",
        order_by="AcademicRecord.id.desc()",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    behavior_logs: Mapped[list["BehaviorLog"]] = relationship(
        "BehaviorLog",
        back_populates="student",
        order_by="BehaviorLog.logged_at.desc()",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    interviews: Mapped[list["InterviewRecord"]] = relationship(
        "InterviewRecord",
        back_populates="student",
        order_by="InterviewRecord.interview_date.desc()",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    attendance_records: Mapped[list["AttendanceRecord"]] = relationship(
        "AttendanceRecord",
        back_populates="student",
        order_by="AttendanceRecord.attendance_date.desc()",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    follow_up_tasks: Mapped[list["FollowUpTask"]] = relationship(
        "FollowUpTask",
        back_populates="student",
        cascade="all, delete-orphan",
    )
    scale_results: Mapped[list["ScaleResult"]] = relationship(
        "ScaleResult",
        back_populates="student",
        order_by="ScaleResult.assessed_on.desc()",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.name}, grade={self.grade})>"
