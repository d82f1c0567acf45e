from typing import Any, Dict, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.models import SchoolYear
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, delete_or_raise, ensure_absent, get_or_404

from .schemas import SchoolYearCreate, SchoolYearResponse, SchoolYearUpdate


async def create_school_year(db: AsyncSession, payload: SchoolYearCreate) -> SchoolYearResponse:
    await ensure_absent(db, SchoolYear, payload.code, f"School year {payload.code}")
    year = SchoolYear(code=payload.code, label=payload.label)
    db.add(year)
    await commit_or_raise(db, year)
    return SchoolYearResponse.model_validate(year)


async def list_school_years(db: AsyncSession, params: Mapping[str, str]) -> Dict[str, Any]:
    builder = (
        QueryBuilder(SchoolYear, params, collections.SCHOOL_YEARS)
        .search()
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
    )
    return await run_listing(db, builder, "schoolYears", settings.res_per_page)


async def get_school_year(db: AsyncSession, code: str) -> SchoolYearResponse:
    return SchoolYearResponse.model_validate(await get_or_404(db, SchoolYear, code, "School year"))


async def update_school_year(db: AsyncSession, code: str, payload: SchoolYearUpdate) -> SchoolYearResponse:
    year = await get_or_404(db, SchoolYear, code, "School year")
    apply_changes(year, payload)
    await commit_or_raise(db, year)
    return SchoolYearResponse.model_validate(year)


async def delete_school_year(db: AsyncSession, code: str) -> None:
    year = await get_or_404(db, SchoolYear, code, "School year")
    await delete_or_raise(db, year)
