from sqlalchemy import Column, Enum, ForeignKey, String

from scolarix.core.enums import Gender
from scolarix.db.entity import entity
from scolarix.db.session import Base


@entity()
class Student(Base):
    """
    Enrolled student, keyed by registration number.
    Notes, averages and results are removed with the student (ON DELETE CASCADE on their side).
    """

    __tablename__ = "students"

    registration_number = Column(String(20), primary_key=True)
    last_name = Column(String(50), nullable=False)
    first_name = Column(String(100), nullable=False)
    gender = Column(
        Enum(Gender, name="gender", values_callable=lambda e: [m.value for m in e], validate_strings=True),
        nullable=False,
    )
    class_id = Column(String(10), ForeignKey("classes.class_id", ondelete="RESTRICT"), nullable=False, index=True)
    school_id = Column(String(10), ForeignKey("schools.school_id", ondelete="RESTRICT"), nullable=False, index=True)
