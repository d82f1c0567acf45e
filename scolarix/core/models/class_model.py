"""Classes (e.g. CM2 A). Model named SchoolClass to avoid Python 'class' keyword."""
from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from scolarix.db.entity import entity
from scolarix.db.session import Base


@entity()
class SchoolClass(Base):
    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("label", "school_year_code", "school_id", name="uq_class_label_year_school"),
    )

    class_id = Column(String(10), primary_key=True)
    label = Column(String(50), nullable=False, unique=True)
    level = Column(String(20), nullable=False)
    school_year_code = Column(
        String(9), ForeignKey("school_years.code", ondelete="RESTRICT"), nullable=False, index=True
    )
    school_id = Column(String(10), ForeignKey("schools.school_id", ondelete="RESTRICT"), nullable=False, index=True)
