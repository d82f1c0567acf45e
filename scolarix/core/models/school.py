from sqlalchemy import CheckConstraint, Column, String

from scolarix.db.entity import digits_at, entity
from scolarix.db.session import Base


@entity()
class School(Base):
    """A school. Users, classes and students hang off it; deletion is restricted while they exist."""

    __tablename__ = "schools"
    __table_args__ = (
        CheckConstraint(
            f"length(school_id) = 5 AND substr(school_id, 1, 2) = 'EC' AND {digits_at('school_id', (3, 4, 5))}",
            name="ck_school_id_format",
        ),
    )

    school_id = Column(String(10), primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    inspection_district = Column(String(200), nullable=True)
    city = Column(String(50), nullable=True)
