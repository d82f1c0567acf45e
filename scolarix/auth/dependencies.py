from typing import Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.models import User
from scolarix.auth.schemas import AuthIdentity
from scolarix.auth.security import decode_token
from scolarix.core.exceptions import ServiceError
from scolarix.core.logging import get_logger
from scolarix.db.session import get_db

logger = get_logger("auth")

# auto_error=False: a missing header is reported as AUTH_REQUIRED by us, not as FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthIdentity:
    """Resolve the authenticated user from the bearer token and attach it to request.state."""
    if credentials is None or not credentials.credentials:
        raise ServiceError(
            "Authentication required. Please provide a bearer token.",
            "AUTH_REQUIRED",
            status.HTTP_401_UNAUTHORIZED,
        )

    payload = decode_token(credentials.credentials)
    user_id = payload.get("userId")
    if not isinstance(user_id, int):
        raise ServiceError(
            "Authentication token is malformed or invalid.",
            "TOKEN_MALFORMED",
            status.HTTP_401_UNAUTHORIZED,
        )

    # Load user (soft-deleted accounts are filtered out by the session listener)
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or user.deleted_at is not None:
        logger.warning("token for unknown or deleted user id=%s rejected", user_id)
        raise ServiceError(
            "The user associated with this token no longer exists.",
            "USER_NOT_FOUND",
            status.HTTP_401_UNAUTHORIZED,
        )

    identity = AuthIdentity(
        id=user.id,
        username=user.username,
        role=user.role,
        school_id=user.school_id,
    )
    request.state.identity = identity
    return identity
