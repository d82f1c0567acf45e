from typing import Any, Optional

from fastapi import status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.core.exceptions import ServiceError, from_integrity_error, not_found
from scolarix.db.entity import is_soft_deleted


async def get_or_404(db: AsyncSession, model, key: Any, label: str):
    """Load a row by primary key or raise NOT_FOUND."""
    obj = await db.get(model, key) if key is not None else None
    if obj is None or is_soft_deleted(obj):
        raise not_found(label)
    return obj


async def ensure_absent(db: AsyncSession, model, key: Any, label: str) -> None:
    if await db.get(model, key) is not None:
        raise ServiceError(
            f"{label} already exists",
            "UNIQUE_CONSTRAINT",
            status.HTTP_409_CONFLICT,
        )


def apply_changes(obj, payload: BaseModel, exclude: Optional[set] = None) -> None:
    """Copy the fields actually sent in an update payload onto the row."""
    for field, value in payload.model_dump(exclude_unset=True, exclude=exclude).items():
        setattr(obj, field, value)


async def commit_or_raise(db: AsyncSession, obj=None) -> None:
    """Commit the unit of work; constraint violations roll back and surface as ServiceError."""
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise from_integrity_error(exc)
    if obj is not None:
        await db.refresh(obj)


async def delete_or_raise(db: AsyncSession, obj) -> None:
    await db.delete(obj)
    await commit_or_raise(db)
