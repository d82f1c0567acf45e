from typing import Any, Dict, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.models import EvaluationType
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, delete_or_raise, ensure_absent, get_or_404

from .schemas import EvaluationTypeCreate, EvaluationTypeResponse, EvaluationTypeUpdate


async def create_evaluation_type(db: AsyncSession, payload: EvaluationTypeCreate) -> EvaluationTypeResponse:
    await ensure_absent(db, EvaluationType, payload.code, f"Evaluation type {payload.code}")
    evaluation = EvaluationType(**payload.model_dump())
    db.add(evaluation)
    await commit_or_raise(db, evaluation)
    return EvaluationTypeResponse.model_validate(evaluation)


async def list_evaluation_types(db: AsyncSession, params: Mapping[str, str]) -> Dict[str, Any]:
    builder = (
        QueryBuilder(EvaluationType, params, collections.EVALUATION_TYPES)
        .search()
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
    )
    return await run_listing(db, builder, "evaluationTypes", settings.res_per_page)


async def get_evaluation_type(db: AsyncSession, code: str) -> EvaluationTypeResponse:
    return EvaluationTypeResponse.model_validate(await get_or_404(db, EvaluationType, code, "Evaluation type"))


async def update_evaluation_type(
    db: AsyncSession, code: str, payload: EvaluationTypeUpdate
) -> EvaluationTypeResponse:
    # Existing averages are not recomputed when a coefficient changes.
    evaluation = await get_or_404(db, EvaluationType, code, "Evaluation type")
    apply_changes(evaluation, payload)
    await commit_or_raise(db, evaluation)
    return EvaluationTypeResponse.model_validate(evaluation)


async def delete_evaluation_type(db: AsyncSession, code: str) -> None:
    evaluation = await get_or_404(db, EvaluationType, code, "Evaluation type")
    await delete_or_raise(db, evaluation)
