from typing import Any, Dict, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.models import School
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, delete_or_raise, ensure_absent, get_or_404

from .schemas import SchoolCreate, SchoolResponse, SchoolUpdate


async def create_school(db: AsyncSession, payload: SchoolCreate) -> SchoolResponse:
    await ensure_absent(db, School, payload.school_id, f"School {payload.school_id}")
    school = School(**payload.model_dump())
    db.add(school)
    await commit_or_raise(db, school)
    return SchoolResponse.model_validate(school)


async def list_schools(db: AsyncSession, params: Mapping[str, str]) -> Dict[str, Any]:
    builder = (
        QueryBuilder(School, params, collections.SCHOOLS)
        .search()
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
    )
    return await run_listing(db, builder, "schools", settings.res_per_page)


async def get_school(db: AsyncSession, school_id: str) -> SchoolResponse:
    return SchoolResponse.model_validate(await get_or_404(db, School, school_id, "School"))


async def update_school(db: AsyncSession, school_id: str, payload: SchoolUpdate) -> SchoolResponse:
    school = await get_or_404(db, School, school_id, "School")
    apply_changes(school, payload)
    await commit_or_raise(db, school)
    return SchoolResponse.model_validate(school)


async def delete_school(db: AsyncSession, school_id: str) -> None:
    """Fails with FOREIGN_KEY_CONSTRAINT while users, classes or students still reference the school."""
    school = await get_or_404(db, School, school_id, "School")
    await delete_or_raise(db, school)
