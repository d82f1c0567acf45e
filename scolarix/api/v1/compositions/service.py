from typing import Any, Dict, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.models import Composition, SchoolYear
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, delete_or_raise, ensure_absent, get_or_404

from .schemas import CompositionCreate, CompositionResponse, CompositionUpdate


async def create_composition(db: AsyncSession, payload: CompositionCreate) -> CompositionResponse:
    await get_or_404(db, SchoolYear, payload.school_year_code, "School year")
    await ensure_absent(db, Composition, payload.code, f"Composition {payload.code}")
    composition = Composition(**payload.model_dump())
    db.add(composition)
    await commit_or_raise(db, composition)
    return CompositionResponse.model_validate(composition)


async def list_compositions(db: AsyncSession, params: Mapping[str, str]) -> Dict[str, Any]:
    builder = (
        QueryBuilder(Composition, params, collections.COMPOSITIONS)
        .search()
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
    )
    return await run_listing(db, builder, "compositions", settings.res_per_page)


async def get_composition(db: AsyncSession, code: str) -> CompositionResponse:
    return CompositionResponse.model_validate(await get_or_404(db, Composition, code, "Composition"))


async def update_composition(db: AsyncSession, code: str, payload: CompositionUpdate) -> CompositionResponse:
    composition = await get_or_404(db, Composition, code, "Composition")
    if payload.school_year_code is not None:
        await get_or_404(db, SchoolYear, payload.school_year_code, "School year")
    apply_changes(composition, payload)
    await commit_or_raise(db, composition)
    return CompositionResponse.model_validate(composition)


async def delete_composition(db: AsyncSession, code: str) -> None:
    composition = await get_or_404(db, Composition, code, "Composition")
    await delete_or_raise(db, composition)
