from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, String

from scolarix.db.entity import entity
from scolarix.db.session import Base


@entity()
class Average(Base):
    """Weighted average of a student's notes for one composition. Written by the aggregation service."""

    __tablename__ = "averages"
    __table_args__ = (CheckConstraint("value >= 0 AND value <= 10", name="ck_average_value_range"),)

    student_id = Column(
        String(20), ForeignKey("students.registration_number", ondelete="CASCADE"), primary_key=True
    )
    composition_code = Column(
        String(10), ForeignKey("compositions.code", ondelete="RESTRICT"), primary_key=True
    )
    value = Column(Float, nullable=False)
