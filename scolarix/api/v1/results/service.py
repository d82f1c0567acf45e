from typing import Any, Dict, Mapping, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import student_school_scope
from scolarix.auth.schemas import AuthIdentity
from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.logging import get_logger
from scolarix.core.models import Result, SchoolYear, Student
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, delete_or_raise, get_or_404

from .schemas import ResultResponse, ResultUpdate, ResultUpsert

logger = get_logger("results")


async def upsert_result(db: AsyncSession, payload: ResultUpsert) -> Tuple[Result, bool]:
    """Create the result for (student, school year) or overwrite it. Returns (row, created)."""
    await get_or_404(db, Student, payload.student_id, "Student")
    await get_or_404(db, SchoolYear, payload.school_year_code, "School year")
    key = (payload.student_id, payload.school_year_code)
    values = payload.model_dump(exclude={"student_id", "school_year_code"})

    result = await db.get(Result, key)
    if result is not None:
        for field, value in values.items():
            setattr(result, field, value)
        await commit_or_raise(db, result)
        return result, False

    result = Result(student_id=payload.student_id, school_year_code=payload.school_year_code, **values)
    db.add(result)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("result %s/%s inserted concurrently, retrying as update", *key)
        result = await db.get(Result, key, populate_existing=True)
        if result is None:
            raise
        for field, value in values.items():
            setattr(result, field, value)
        await commit_or_raise(db, result)
        return result, False

    await db.refresh(result)
    return result, True


async def save_result(db: AsyncSession, payload: ResultUpsert) -> Tuple[ResultResponse, bool]:
    result, created = await upsert_result(db, payload)
    return ResultResponse.model_validate(result), created


async def list_results(
    db: AsyncSession,
    identity: AuthIdentity,
    params: Mapping[str, str],
    *conditions,
) -> Dict[str, Any]:
    builder = (
        QueryBuilder(Result, params, collections.RESULTS)
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
        .where(student_school_scope(identity, Result.student_id), *conditions)
    )
    return await run_listing(db, builder, "results", settings.res_per_page)


async def list_student_results(
    db: AsyncSession,
    identity: AuthIdentity,
    student_id: str,
    params: Mapping[str, str],
) -> Dict[str, Any]:
    await get_or_404(db, Student, student_id, "Student")
    return await list_results(db, identity, params, Result.student_id == student_id)


async def list_year_results(
    db: AsyncSession,
    identity: AuthIdentity,
    school_year_code: str,
    params: Mapping[str, str],
) -> Dict[str, Any]:
    await get_or_404(db, SchoolYear, school_year_code, "School year")
    return await list_results(db, identity, params, Result.school_year_code == school_year_code)


async def update_result(
    db: AsyncSession,
    student_id: str,
    school_year_code: str,
    payload: ResultUpdate,
) -> ResultResponse:
    result = await get_or_404(db, Result, (student_id, school_year_code), "Result")
    apply_changes(result, payload)
    await commit_or_raise(db, result)
    return ResultResponse.model_validate(result)


async def delete_result(db: AsyncSession, student_id: str, school_year_code: str) -> None:
    result = await get_or_404(db, Result, (student_id, school_year_code), "Result")
    await delete_or_raise(db, result)
