from datetime import datetime, timezone

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from scolarix.auth.models import User
from scolarix.auth.schemas import AuthIdentity, LoginRequest, LoginResponse
from scolarix.auth.security import issue_token, verify_password
from scolarix.core.exceptions import ServiceError
from scolarix.core.logging import get_logger

logger = get_logger("auth")


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    invalid = ServiceError(
        "Invalid username or password",
        "INVALID_CREDENTIALS",
        status.HTTP_401_UNAUTHORIZED,
    )

    result = await db.execute(select(User).where(User.username == payload.username.strip()))
    user = result.scalar_one_or_none()
    if user is None or user.deleted_at is not None:
        logger.info("login failed for unknown username %r", payload.username)
        raise invalid

    # bcrypt is CPU bound; keep it off the event loop
    if not await run_in_threadpool(verify_password, payload.password, user.password_hash):
        logger.info("login failed for user %s: bad password", user.id)
        raise invalid

    token = issue_token(
        AuthIdentity(id=user.id, username=user.username, role=user.role, school_id=user.school_id)
    )
    user.last_login = datetime.now(timezone.utc)
    await db.commit()

    logger.info("user %s logged in", user.id)
    return LoginResponse(token=token)
