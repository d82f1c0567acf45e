from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ADMIN_ONLY, TEACHING_STAFF, authorize, school_scoped
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.models import Student
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import ResultResponse, ResultUpdate, ResultUpsert

router = APIRouter(prefix="/results", tags=["results"])
logger = get_logger("results")

STUDENT_OF_SAME_SCHOOL = school_scoped(Student)


@router.post("", response_model=DataResponse[ResultResponse], status_code=status.HTTP_201_CREATED)
async def save_result(
    payload: ResultUpsert,
    response: Response,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DataResponse[ResultResponse]:
    result, created = await service.save_result(db, payload)
    if not created:
        response.status_code = status.HTTP_200_OK
    logger.info(
        "result %s/%s %s by %s",
        result.student_id, result.school_year_code, "created" if created else "overwritten", identity.id,
    )
    return DataResponse[ResultResponse](data=result)


@router.get("")
async def list_results(
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> Dict[str, Any]:
    return await service.list_results(db, identity, request.query_params)


@router.get("/eleve/{student_id}")
async def list_student_results(
    student_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(
        authorize(TEACHING_STAFF, STUDENT_OF_SAME_SCHOOL, id_param="student_id")
    ),
) -> Dict[str, Any]:
    return await service.list_student_results(db, identity, student_id, request.query_params)


@router.get("/annee/{school_year_code}")
async def list_year_results(
    school_year_code: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> Dict[str, Any]:
    return await service.list_year_results(db, identity, school_year_code, request.query_params)


@router.put("/{student_id}/{school_year_code}", response_model=DataResponse[ResultResponse])
async def update_result(
    student_id: str,
    school_year_code: str,
    payload: ResultUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DataResponse[ResultResponse]:
    result = await service.update_result(db, student_id, school_year_code, payload)
    logger.info("result %s/%s updated by %s", student_id, school_year_code, identity.id)
    return DataResponse[ResultResponse](data=result)


@router.delete("/{student_id}/{school_year_code}", response_model=DeletedResponse)
async def delete_result(
    student_id: str,
    school_year_code: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_result(db, student_id, school_year_code)
    logger.info("result %s/%s deleted by %s", student_id, school_year_code, identity.id)
    return DeletedResponse()
