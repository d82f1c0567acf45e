from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ADMIN_ONLY, TEACHING_STAFF, authorize, school_scoped
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.models import Student
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import StudentCreate, StudentResponse, StudentUpdate

router = APIRouter(prefix="/students", tags=["students"])
logger = get_logger("students")

SAME_SCHOOL = school_scoped(Student)


@router.post("", response_model=DataResponse[StudentResponse], status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> DataResponse[StudentResponse]:
    student = await service.create_student(db, identity, payload)
    logger.info("student %s created by %s", student.registration_number, identity.id)
    return DataResponse[StudentResponse](data=student)


@router.get("")
async def list_students(
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> Dict[str, Any]:
    return await service.list_students(db, identity, request.query_params)


@router.get("/{student_id}", response_model=DataResponse[StudentResponse])
async def get_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF, SAME_SCHOOL, id_param="student_id")),
) -> DataResponse[StudentResponse]:
    return DataResponse[StudentResponse](data=await service.get_student(db, student_id))


@router.put("/{student_id}", response_model=DataResponse[StudentResponse])
async def update_student(
    student_id: str,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF, SAME_SCHOOL, id_param="student_id")),
) -> DataResponse[StudentResponse]:
    student = await service.update_student(db, identity, student_id, payload)
    logger.info("student %s updated by %s", student_id, identity.id)
    return DataResponse[StudentResponse](data=student)


@router.delete("/{student_id}", response_model=DeletedResponse)
async def delete_student(
    student_id: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_student(db, student_id)
    logger.info("student %s deleted by %s", student_id, identity.id)
    return DeletedResponse()
