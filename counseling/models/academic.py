"""Academic record model."""

from sqlalchemy import JSON, BigInteger, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from counseling.core.database import Base
from counseling.models.base import IDMixin, TimestampMixin


class AcademicRecord(Base, IDMixin, TimestampMixin):
    """One imported year/term of results for a student."""

    __tablename__ = "academic_records"

    student_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    year: Mapped[str] = mapped_column(String(20), nullable=False)
    term: Mapped[str] = mapped_column(String(100), nullable=False)
    # [{"subject": str, "score": float}, ...] in sheet order
    subjects: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    # Rounded to 2 decimals at import time
    average: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    # Relationships
    student: Mapped["Student"] = relationship(
        "Student",
        back_populates="academic_records",
    )

    def __repr__(self) -> str:
        return f"<AcademicRecord(student_id={self.student_id}, year={self.year}, term={self.term})>"
