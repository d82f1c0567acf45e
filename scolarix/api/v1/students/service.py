from typing import Any, Dict, Mapping

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ensure_same_school, school_scope
from scolarix.auth.schemas import AuthIdentity
from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.exceptions import ServiceError
from scolarix.core.models import School, SchoolClass, Student
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, delete_or_raise, ensure_absent, get_or_404

from .schemas import StudentCreate, StudentResponse, StudentUpdate


async def _check_placement(db: AsyncSession, class_id: str, school_id: str) -> None:
    """The class must exist and belong to the student's school."""
    await get_or_404(db, School, school_id, "School")
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    if school_class.school_id != school_id:
        raise ServiceError(
            f"Class {class_id} does not belong to school {school_id}",
            "VALIDATION_ERROR",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )


async def create_student(db: AsyncSession, identity: AuthIdentity, payload: StudentCreate) -> StudentResponse:
    ensure_same_school(identity, payload.school_id)
    await _check_placement(db, payload.class_id, payload.school_id)
    await ensure_absent(db, Student, payload.registration_number, f"Student {payload.registration_number}")

    student = Student(**payload.model_dump())
    db.add(student)
    await commit_or_raise(db, student)
    return StudentResponse.model_validate(student)


async def list_students(db: AsyncSession, identity: AuthIdentity, params: Mapping[str, str]) -> Dict[str, Any]:
    """Teachers only see the students of their own school."""
    builder = (
        QueryBuilder(Student, params, collections.STUDENTS)
        .search()
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
        .where(school_scope(identity, Student.school_id))
    )
    return await run_listing(db, builder, "students", settings.res_per_page)


async def get_student(db: AsyncSession, registration_number: str) -> StudentResponse:
    return StudentResponse.model_validate(await get_or_404(db, Student, registration_number, "Student"))


async def update_student(
    db: AsyncSession,
    identity: AuthIdentity,
    registration_number: str,
    payload: StudentUpdate,
) -> StudentResponse:
    student = await get_or_404(db, Student, registration_number, "Student")
    if payload.school_id is not None:
        ensure_same_school(identity, payload.school_id)
    if payload.class_id is not None or payload.school_id is not None:
        await _check_placement(
            db,
            payload.class_id or student.class_id,
            payload.school_id or student.school_id,
        )

    apply_changes(student, payload)
    await commit_or_raise(db, student)
    return StudentResponse.model_validate(student)


async def delete_student(db: AsyncSession, registration_number: str) -> None:
    """Notes, averages and results of the student go with it."""
    student = await get_or_404(db, Student, registration_number, "Student")
    await delete_or_raise(db, student)
