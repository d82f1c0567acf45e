from sqlalchemy import CheckConstraint, Column, Enum, Float, ForeignKey, Integer, String

from scolarix.core.enums import Decision
from scolarix.db.entity import entity
from scolarix.db.session import Base


@entity()
class Result(Base):
    """Annual outcome for a student: decision, rank and annual general average."""

    __tablename__ = "results"
    __table_args__ = (
        CheckConstraint("rank >= 1", name="ck_result_rank_positive"),
        CheckConstraint("annual_average >= 0 AND annual_average <= 10", name="ck_result_average_range"),
    )

    student_id = Column(
        String(20), ForeignKey("students.registration_number", ondelete="CASCADE"), primary_key=True
    )
    school_year_code = Column(
        String(9), ForeignKey("school_years.code", ondelete="RESTRICT"), primary_key=True
    )
    decision = Column(
        Enum(Decision, name="decision", values_callable=lambda e: [m.value for m in e], validate_strings=True),
        nullable=False,
    )
    rank = Column(Integer, nullable=False)
    annual_average = Column(Float, nullable=False)
