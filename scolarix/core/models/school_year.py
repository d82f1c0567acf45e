from sqlalchemy import CheckConstraint, Column, String

from scolarix.db.entity import digits_at, entity
from scolarix.db.session import Base


@entity()
class SchoolYear(Base):
    """School year keyed by its span, e.g. "2024-2025"."""

    __tablename__ = "school_years"
    __table_args__ = (
        CheckConstraint(
            f"length(code) = 9 AND substr(code, 5, 1) = '-' AND {digits_at('code', (1, 2, 3, 4, 6, 7, 8, 9))}",
            name="ck_school_year_code_format",
        ),
    )

    code = Column(String(9), primary_key=True)
    label = Column(String(10), nullable=False, unique=True)
