from typing import Any, Dict, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ensure_same_school, school_scope
from scolarix.auth.schemas import AuthIdentity
from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.models import School, SchoolClass, SchoolYear
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, delete_or_raise, ensure_absent, get_or_404

from .schemas import ClassCreate, ClassResponse, ClassUpdate


async def create_class(db: AsyncSession, identity: AuthIdentity, payload: ClassCreate) -> ClassResponse:
    ensure_same_school(identity, payload.school_id)
    await get_or_404(db, School, payload.school_id, "School")
    await get_or_404(db, SchoolYear, payload.school_year_code, "School year")
    await ensure_absent(db, SchoolClass, payload.class_id, f"Class {payload.class_id}")

    school_class = SchoolClass(**payload.model_dump())
    db.add(school_class)
    await commit_or_raise(db, school_class)
    return ClassResponse.model_validate(school_class)


async def list_classes(db: AsyncSession, identity: AuthIdentity, params: Mapping[str, str]) -> Dict[str, Any]:
    """Teachers only see the classes of their own school."""
    builder = (
        QueryBuilder(SchoolClass, params, collections.CLASSES)
        .search()
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
        .where(school_scope(identity, SchoolClass.school_id))
    )
    return await run_listing(db, builder, "classes", settings.res_per_page)


async def get_class(db: AsyncSession, class_id: str) -> ClassResponse:
    return ClassResponse.model_validate(await get_or_404(db, SchoolClass, class_id, "Class"))


async def update_class(
    db: AsyncSession,
    identity: AuthIdentity,
    class_id: str,
    payload: ClassUpdate,
) -> ClassResponse:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    if payload.school_id is not None:
        ensure_same_school(identity, payload.school_id)
        await get_or_404(db, School, payload.school_id, "School")
    if payload.school_year_code is not None:
        await get_or_404(db, SchoolYear, payload.school_year_code, "School year")

    apply_changes(school_class, payload)
    await commit_or_raise(db, school_class)
    return ClassResponse.model_validate(school_class)


async def delete_class(db: AsyncSession, class_id: str) -> None:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    await delete_or_raise(db, school_class)
