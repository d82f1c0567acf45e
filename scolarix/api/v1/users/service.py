from typing import Any, Dict, Mapping

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from scolarix.auth.models import User
from scolarix.auth.schemas import AuthIdentity
from scolarix.auth.security import hash_password
from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.exceptions import ServiceError, not_found
from scolarix.core.models import School
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, get_or_404
from scolarix.db.entity import soft_delete

from .schemas import UserCreate, UserResponse, UserUpdate


async def _username_taken(db: AsyncSession, username: str) -> bool:
    # Soft-deleted accounts still hold their username.
    result = await db.execute(
        select(User.id).where(User.username == username).execution_options(include_deleted=True)
    )
    return result.first() is not None


async def _load_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or user.deleted_at is not None:
        raise not_found("User")
    return user


async def create_user(db: AsyncSession, payload: UserCreate) -> UserResponse:
    await get_or_404(db, School, payload.school_id, "School")
    if await _username_taken(db, payload.username):
        raise ServiceError(
            f"Username '{payload.username}' is already in use",
            "UNIQUE_CONSTRAINT",
            status.HTTP_409_CONFLICT,
        )
    user = User(
        username=payload.username,
        password_hash=await run_in_threadpool(hash_password, payload.password),
        role=payload.role,
        school_id=payload.school_id,
    )
    db.add(user)
    await commit_or_raise(db, user)
    return UserResponse.model_validate(user)


async def list_users(db: AsyncSession, params: Mapping[str, str]) -> Dict[str, Any]:
    builder = (
        QueryBuilder(User, params, collections.USERS)
        .search()
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
    )
    return await run_listing(db, builder, "users", settings.res_per_page)


async def get_user(db: AsyncSession, user_id: int) -> UserResponse:
    return UserResponse.model_validate(await _load_user(db, user_id))


async def update_user(
    db: AsyncSession,
    identity: AuthIdentity,
    user_id: int,
    payload: UserUpdate,
) -> UserResponse:
    user = await _load_user(db, user_id)
    changes = payload.model_fields_set

    if not identity.is_admin and changes & {"role", "school_id"}:
        raise ServiceError(
            "Only an Administrator can change a user's role or school",
            "FORBIDDEN",
            status.HTTP_403_FORBIDDEN,
        )
    if "school_id" in changes and payload.school_id is not None:
        await get_or_404(db, School, payload.school_id, "School")
    if "username" in changes and payload.username and payload.username != user.username:
        if await _username_taken(db, payload.username):
            raise ServiceError(
                f"Username '{payload.username}' is already in use",
                "UNIQUE_CONSTRAINT",
                status.HTTP_409_CONFLICT,
            )
    if "password" in changes and payload.password:
        user.password_hash = await run_in_threadpool(hash_password, payload.password)

    apply_changes(user, payload, exclude={"password"})
    await commit_or_raise(db, user)
    return UserResponse.model_validate(user)


async def delete_user(db: AsyncSession, user_id: int) -> None:
    """Soft delete: the row stays, stamped with deleted_at, and disappears from reads."""
    user = await _load_user(db, user_id)
    await soft_delete(db, user)
