from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from scolarix.core.enums import UserRole
from scolarix.core.schemas import SCHOOL_ID_PATTERN, PartialUpdate

USERNAME_PATTERN = r"^[A-Za-z0-9_-]+$"
# bcrypt only hashes the first 72 bytes and rejects longer input.
PASSWORD_MAX_BYTES = 72


def _check_password_bytes(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=6, max_length=PASSWORD_MAX_BYTES)
    role: UserRole = UserRole.TEACHER
    school_id: str = Field(..., pattern=SCHOOL_ID_PATTERN)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class UserUpdate(PartialUpdate):
    """Partial update. role and school_id may only be changed by an Administrator."""

    username: Optional[str] = Field(None, min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    password: Optional[str] = Field(None, min_length=6, max_length=PASSWORD_MAX_BYTES)
    role: Optional[UserRole] = None
    school_id: Optional[str] = Field(None, pattern=SCHOOL_ID_PATTERN)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value)


class UserResponse(BaseModel):
    id: int
    username: str
    role: UserRole
    school_id: str
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True
