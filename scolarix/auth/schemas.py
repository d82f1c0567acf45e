from typing import Optional

from pydantic import BaseModel, Field

from scolarix.core.enums import UserRole


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    success: bool = True
    token: str


class AuthIdentity(BaseModel):
    """Authenticated caller attached to the request for authorization checks."""

    id: int
    username: str
    role: UserRole
    school_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMINISTRATOR
