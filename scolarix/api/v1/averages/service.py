"""
Averages: derived from notes, one row per (student, composition).

The value is the coefficient-weighted mean of the student's notes for the
composition. Computing it again overwrites the stored row.
"""
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ensure_same_school, student_school_scope
from scolarix.auth.schemas import AuthIdentity
from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.exceptions import ServiceError
from scolarix.core.logging import get_logger
from scolarix.core.models import Average, Composition, EvaluationType, Note, Student
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, delete_or_raise, get_or_404

from .schemas import AverageCompute, AverageResponse, AverageUpdate


def weighted_average(pairs: Iterable[Tuple[float, float]]) -> float:
    """sum(value * coefficient) / sum(coefficient) over (value, coefficient) pairs; 0 when the weights sum to 0."""
    total = 0.0
    total_weight = 0.0
    for value, coefficient in pairs:
        total += value * coefficient
        total_weight += coefficient
    if total_weight == 0:
        return 0.0
    return total / total_weight


async def _graded_pairs(db: AsyncSession, student_id: str, composition_code: str):
    result = await db.execute(
        select(Note.value, EvaluationType.coefficient)
        .join(EvaluationType, EvaluationType.code == Note.evaluation_code)
        .where(Note.student_id == student_id, Note.composition_code == composition_code)
    )
    return [(value, coefficient) for value, coefficient in result.all()]


async def compute_average(
    db: AsyncSession,
    student_id: str,
    composition_code: str,
    logger: Optional[logging.Logger] = None,
) -> Tuple[Average, bool]:
    """
    Recompute and store the average of a student for a composition.

    Returns the stored row and whether it was newly created.
    Raises NO_GRADES when the student has no note for the composition.
    """
    log = logger or get_logger("averages")
    await get_or_404(db, Student, student_id, "Student")
    await get_or_404(db, Composition, composition_code, "Composition")

    pairs = await _graded_pairs(db, student_id, composition_code)
    if not pairs:
        raise ServiceError(
            "No notes found to compute the average",
            "NO_GRADES",
            status.HTTP_404_NOT_FOUND,
        )
    value = weighted_average(pairs)
    key = (student_id, composition_code)

    average = await db.get(Average, key)
    if average is not None:
        average.value = value
        await commit_or_raise(db, average)
        log.info("average %s/%s updated to %.4f from %d note(s)", student_id, composition_code, value, len(pairs))
        return average, False

    average = Average(student_id=student_id, composition_code=composition_code, value=value)
    db.add(average)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request inserted the same key first: overwrite its value instead.
        await db.rollback()
        log.info("average %s/%s inserted concurrently, retrying as update", student_id, composition_code)
        average = await db.get(Average, key, populate_existing=True)
        if average is None:
            raise
        average.value = value
        await commit_or_raise(db, average)
        return average, False

    await db.refresh(average)
    log.info("average %s/%s created at %.4f from %d note(s)", student_id, composition_code, value, len(pairs))
    return average, True


async def calculate_average(
    db: AsyncSession,
    identity: AuthIdentity,
    payload: AverageCompute,
) -> Tuple[AverageResponse, bool]:
    student = await get_or_404(db, Student, payload.student_id, "Student")
    ensure_same_school(identity, student.school_id)
    average, created = await compute_average(db, payload.student_id, payload.composition_code)
    return AverageResponse.model_validate(average), created


async def list_averages(
    db: AsyncSession,
    identity: AuthIdentity,
    params: Mapping[str, str],
    *conditions,
) -> Dict[str, Any]:
    builder = (
        QueryBuilder(Average, params, collections.AVERAGES)
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
        .where(student_school_scope(identity, Average.student_id), *conditions)
    )
    return await run_listing(db, builder, "averages", settings.res_per_page)


async def list_student_averages(
    db: AsyncSession,
    identity: AuthIdentity,
    student_id: str,
    params: Mapping[str, str],
) -> Dict[str, Any]:
    await get_or_404(db, Student, student_id, "Student")
    return await list_averages(db, identity, params, Average.student_id == student_id)


async def list_composition_averages(
    db: AsyncSession,
    identity: AuthIdentity,
    composition_code: str,
    params: Mapping[str, str],
) -> Dict[str, Any]:
    await get_or_404(db, Composition, composition_code, "Composition")
    return await list_averages(db, identity, params, Average.composition_code == composition_code)


async def update_average(
    db: AsyncSession,
    student_id: str,
    composition_code: str,
    payload: AverageUpdate,
) -> AverageResponse:
    """Manual override of a stored average; the next computation replaces it."""
    average = await get_or_404(db, Average, (student_id, composition_code), "Average")
    apply_changes(average, payload)
    await commit_or_raise(db, average)
    return AverageResponse.model_validate(average)


async def delete_average(db: AsyncSession, student_id: str, composition_code: str) -> None:
    average = await get_or_404(db, Average, (student_id, composition_code), "Average")
    await delete_or_raise(db, average)
