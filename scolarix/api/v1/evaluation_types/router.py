from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ADMIN_ONLY, TEACHING_STAFF, authorize
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import EvaluationTypeCreate, EvaluationTypeResponse, EvaluationTypeUpdate

router = APIRouter(prefix="/evaluation-types", tags=["evaluation-types"])
logger = get_logger("evaluation_types")


@router.post("", response_model=DataResponse[EvaluationTypeResponse], status_code=status.HTTP_201_CREATED)
async def create_evaluation_type(
    payload: EvaluationTypeCreate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DataResponse[EvaluationTypeResponse]:
    evaluation = await service.create_evaluation_type(db, payload)
    logger.info("evaluation type %s created by %s", evaluation.code, identity.id)
    return DataResponse[EvaluationTypeResponse](data=evaluation)


@router.get("", dependencies=[Depends(authorize(TEACHING_STAFF))])
async def list_evaluation_types(request: Request, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await service.list_evaluation_types(db, request.query_params)


@router.get(
    "/{code}",
    response_model=DataResponse[EvaluationTypeResponse],
    dependencies=[Depends(authorize(TEACHING_STAFF))],
)
async def get_evaluation_type(
    code: str, db: AsyncSession = Depends(get_db)
) -> DataResponse[EvaluationTypeResponse]:
    return DataResponse[EvaluationTypeResponse](data=await service.get_evaluation_type(db, code))


@router.put("/{code}", response_model=DataResponse[EvaluationTypeResponse])
async def update_evaluation_type(
    code: str,
    payload: EvaluationTypeUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DataResponse[EvaluationTypeResponse]:
    evaluation = await service.update_evaluation_type(db, code, payload)
    logger.info("evaluation type %s updated by %s", code, identity.id)
    return DataResponse[EvaluationTypeResponse](data=evaluation)


@router.delete("/{code}", response_model=DeletedResponse)
async def delete_evaluation_type(
    code: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_evaluation_type(db, code)
    logger.info("evaluation type %s deleted by %s", code, identity.id)
    return DeletedResponse()
