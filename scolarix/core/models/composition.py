from sqlalchemy import Column, Date, Enum, ForeignKey, String, UniqueConstraint

from scolarix.core.enums import CompositionType
from scolarix.db.entity import entity
from scolarix.db.session import Base


@entity()
class Composition(Base):
    """Grading period / exam instance within a school year."""

    __tablename__ = "compositions"
    __table_args__ = (
        UniqueConstraint("label", "type", "school_year_code", name="uq_composition_label_type_year"),
    )

    code = Column(String(10), primary_key=True)
    label = Column(String(50), nullable=False)
    composition_date = Column(Date, nullable=False)
    type = Column(
        Enum(
            CompositionType,
            name="composition_type",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
    )
    school_year_code = Column(
        String(9), ForeignKey("school_years.code", ondelete="RESTRICT"), nullable=False, index=True
    )
