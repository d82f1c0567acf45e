from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ADMIN_ONLY, TEACHER_ONLY, TEACHING_STAFF, authorize, school_scoped
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.models import Student
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import AverageCompute, AverageResponse, AverageUpdate

router = APIRouter(prefix="/averages", tags=["averages"])
logger = get_logger("averages")

STUDENT_OF_SAME_SCHOOL = school_scoped(Student)


@router.post("", response_model=DataResponse[AverageResponse], status_code=status.HTTP_201_CREATED)
async def calculate_average(
    payload: AverageCompute,
    response: Response,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHER_ONLY)),
) -> DataResponse[AverageResponse]:
    """Compute the weighted average from the student's notes. 201 when created, 200 when recomputed."""
    average, created = await service.calculate_average(db, identity, payload)
    if not created:
        response.status_code = status.HTTP_200_OK
    return DataResponse[AverageResponse](data=average)


@router.get("")
async def list_averages(
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> Dict[str, Any]:
    return await service.list_averages(db, identity, request.query_params)


@router.get("/eleve/{student_id}")
async def list_student_averages(
    student_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(
        authorize(TEACHING_STAFF, STUDENT_OF_SAME_SCHOOL, id_param="student_id")
    ),
) -> Dict[str, Any]:
    return await service.list_student_averages(db, identity, student_id, request.query_params)


@router.get("/composition/{composition_code}")
async def list_composition_averages(
    composition_code: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> Dict[str, Any]:
    return await service.list_composition_averages(db, identity, composition_code, request.query_params)


@router.put("/{student_id}/{composition_code}", response_model=DataResponse[AverageResponse])
async def update_average(
    student_id: str,
    composition_code: str,
    payload: AverageUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHER_ONLY, STUDENT_OF_SAME_SCHOOL, id_param="student_id")),
) -> DataResponse[AverageResponse]:
    average = await service.update_average(db, student_id, composition_code, payload)
    logger.info("average %s/%s overridden by %s", student_id, composition_code, identity.id)
    return DataResponse[AverageResponse](data=average)


@router.delete("/{student_id}/{composition_code}", response_model=DeletedResponse)
async def delete_average(
    student_id: str,
    composition_code: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_average(db, student_id, composition_code)
    logger.info("average %s/%s deleted by %s", student_id, composition_code, identity.id)
    return DeletedResponse()
