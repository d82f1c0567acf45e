from typing import Any, Dict, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ensure_same_school, student_school_scope
from scolarix.auth.schemas import AuthIdentity
from scolarix.core import collections
from scolarix.core.config import settings
from scolarix.core.models import Composition, EvaluationType, Note, Student
from scolarix.core.query_builder import QueryBuilder, run_listing
from scolarix.core.services import apply_changes, commit_or_raise, delete_or_raise, ensure_absent, get_or_404

from .schemas import NoteCreate, NoteResponse, NoteUpdate


def _note_key(student_id: str, evaluation_code: str, composition_code: str):
    return (student_id, evaluation_code, composition_code)


async def create_note(db: AsyncSession, identity: AuthIdentity, payload: NoteCreate) -> NoteResponse:
    """Record one grade. Teachers may only grade students of their own school."""
    student = await get_or_404(db, Student, payload.student_id, "Student")
    ensure_same_school(identity, student.school_id)
    await get_or_404(db, EvaluationType, payload.evaluation_code, "Evaluation type")
    await get_or_404(db, Composition, payload.composition_code, "Composition")
    await ensure_absent(
        db,
        Note,
        _note_key(payload.student_id, payload.evaluation_code, payload.composition_code),
        "A note for this student, evaluation type and composition",
    )

    note = Note(**payload.model_dump())
    db.add(note)
    await commit_or_raise(db, note)
    return NoteResponse.model_validate(note)


async def list_notes(
    db: AsyncSession,
    identity: AuthIdentity,
    params: Mapping[str, str],
    *conditions,
) -> Dict[str, Any]:
    builder = (
        QueryBuilder(Note, params, collections.NOTES)
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
        .where(student_school_scope(identity, Note.student_id), *conditions)
    )
    return await run_listing(db, builder, "notes", settings.res_per_page)


async def list_student_notes(
    db: AsyncSession,
    identity: AuthIdentity,
    student_id: str,
    params: Mapping[str, str],
) -> Dict[str, Any]:
    await get_or_404(db, Student, student_id, "Student")
    return await list_notes(db, identity, params, Note.student_id == student_id)


async def update_note(
    db: AsyncSession,
    student_id: str,
    evaluation_code: str,
    composition_code: str,
    payload: NoteUpdate,
) -> NoteResponse:
    # The stored average is not recomputed; POST /averages again to refresh it.
    note = await get_or_404(db, Note, _note_key(student_id, evaluation_code, composition_code), "Note")
    apply_changes(note, payload)
    await commit_or_raise(db, note)
    return NoteResponse.model_validate(note)


async def delete_note(db: AsyncSession, student_id: str, evaluation_code: str, composition_code: str) -> None:
    note = await get_or_404(db, Note, _note_key(student_id, evaluation_code, composition_code), "Note")
    await delete_or_raise(db, note)
