from sqlalchemy import CheckConstraint, Column, Float, String

from scolarix.db.entity import entity
from scolarix.db.session import Base


@entity()
class EvaluationType(Base):
    """Kind of assessment (homework, oral, exam...) and its weight in averages."""

    __tablename__ = "evaluation_types"
    __table_args__ = (CheckConstraint("coefficient > 0", name="ck_evaluation_type_coefficient_positive"),)

    code = Column(String(10), primary_key=True)
    name = Column(String(50), nullable=False, unique=True)
    coefficient = Column(Float, nullable=False)
