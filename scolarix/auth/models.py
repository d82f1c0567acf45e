from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, Text

from scolarix.core.enums import UserRole
from scolarix.db.entity import EntityMeta, entity
from scolarix.db.session import Base


@entity(EntityMeta(soft_delete=True))
class User(Base):
    """Administrator or teacher account, attached to one school. Deleting a user only stamps deleted_at."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("length(username) >= 3", name="ck_user_username_length"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e], validate_strings=True),
        nullable=False,
        default=UserRole.TEACHER,
    )
    school_id = Column(String(10), ForeignKey("schools.school_id", ondelete="RESTRICT"), nullable=False, index=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
