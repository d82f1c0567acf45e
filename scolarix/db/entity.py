"""
Entity metadata shared by every table.

Models opt in with the ``@entity(...)`` decorator instead of extending a common
base: the decorator records an ``EntityMeta`` on the class and adds the
timestamp / soft-delete columns it asks for. The listeners below read that
metadata to trim strings and hide soft-deleted rows.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Type

from sqlalchemy import Column, DateTime, String, event
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from scolarix.db.session import Base


@dataclass(frozen=True)
class EntityMeta:
    timestamps: bool = True
    soft_delete: bool = False
    trim_strings: bool = True


DEFAULT_META = EntityMeta()

_soft_delete_entities: List[Type] = []


def entity(meta: Optional[EntityMeta] = None) -> Callable[[Type], Type]:
    meta = meta or DEFAULT_META

    def decorate(cls: Type) -> Type:
        cls.__entity_meta__ = meta
        if meta.timestamps:
            cls.created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
            cls.updated_at = Column(
                DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
            )
        if meta.soft_delete:
            cls.deleted_at = Column(DateTime(timezone=True), nullable=True)
            _soft_delete_entities.append(cls)
        return cls

    return decorate


def entity_meta(cls: Type) -> EntityMeta:
    return getattr(cls, "__entity_meta__", DEFAULT_META)


def is_soft_deleted(obj) -> bool:
    return entity_meta(type(obj)).soft_delete and obj.deleted_at is not None


async def soft_delete(db: AsyncSession, obj) -> None:
    obj.deleted_at = datetime.utcnow()
    await db.commit()


def _trim_strings(mapper, connection, target) -> None:
    if not entity_meta(type(target)).trim_strings:
        return
    state = sa_inspect(target)
    for attr in state.mapper.column_attrs:
        column = attr.columns[0]
        if not isinstance(column.type, String):
            continue
        value = getattr(target, attr.key, None)
        if isinstance(value, str):
            stripped = value.strip()
            if stripped != value:
                setattr(target, attr.key, stripped)


event.listen(Base, "before_insert", _trim_strings, propagate=True)
event.listen(Base, "before_update", _trim_strings, propagate=True)


@event.listens_for(Session, "do_orm_execute")
def _hide_soft_deleted(execute_state: ORMExecuteState) -> None:
    if (
        not execute_state.is_select
        or execute_state.is_column_load
        or execute_state.is_relationship_load
        or execute_state.execution_options.get("include_deleted", False)
    ):
        return
    for cls in _soft_delete_entities:
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(cls, lambda c: c.deleted_at.is_(None), include_aliases=True)
        )


def digits_at(column: str, positions) -> str:
    """CHECK fragment requiring a decimal digit at each 1-based position; valid on SQLite and Postgres."""
    return " AND ".join(f"substr({column}, {p}, 1) BETWEEN '0' AND '9'" for p in positions)
