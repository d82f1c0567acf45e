from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ADMIN_ONLY, TEACHER_ONLY, TEACHING_STAFF, authorize, school_scoped
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.models import Student
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import NoteCreate, NoteResponse, NoteUpdate

router = APIRouter(prefix="/notes", tags=["notes"])
logger = get_logger("notes")

STUDENT_OF_SAME_SCHOOL = school_scoped(Student)


@router.post("", response_model=DataResponse[NoteResponse], status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHER_ONLY)),
) -> DataResponse[NoteResponse]:
    note = await service.create_note(db, identity, payload)
    logger.info(
        "note %s/%s/%s created by %s",
        note.student_id, note.evaluation_code, note.composition_code, identity.id,
    )
    return DataResponse[NoteResponse](data=note)


@router.get("")
async def list_notes(
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> Dict[str, Any]:
    return await service.list_notes(db, identity, request.query_params)


@router.get("/eleve/{student_id}")
async def list_student_notes(
    student_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(
        authorize(TEACHING_STAFF, STUDENT_OF_SAME_SCHOOL, id_param="student_id")
    ),
) -> Dict[str, Any]:
    return await service.list_student_notes(db, identity, student_id, request.query_params)


@router.put("/{student_id}/{evaluation_code}/{composition_code}", response_model=DataResponse[NoteResponse])
async def update_note(
    student_id: str,
    evaluation_code: str,
    composition_code: str,
    payload: NoteUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHER_ONLY, STUDENT_OF_SAME_SCHOOL, id_param="student_id")),
) -> DataResponse[NoteResponse]:
    note = await service.update_note(db, student_id, evaluation_code, composition_code, payload)
    logger.info("note %s/%s/%s updated by %s", student_id, evaluation_code, composition_code, identity.id)
    return DataResponse[NoteResponse](data=note)


@router.delete("/{student_id}/{evaluation_code}/{composition_code}", response_model=DeletedResponse)
async def delete_note(
    student_id: str,
    evaluation_code: str,
    composition_code: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_note(db, student_id, evaluation_code, composition_code)
    logger.info("note %s/%s/%s deleted by %s", student_id, evaluation_code, composition_code, identity.id)
    return DeletedResponse()
