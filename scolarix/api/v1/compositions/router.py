from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ADMIN_ONLY, TEACHING_STAFF, authorize
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import CompositionCreate, CompositionResponse, CompositionUpdate

router = APIRouter(prefix="/compositions", tags=["compositions"])
logger = get_logger("compositions")


@router.post("", response_model=DataResponse[CompositionResponse], status_code=status.HTTP_201_CREATED)
async def create_composition(
    payload: CompositionCreate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> DataResponse[CompositionResponse]:
    composition = await service.create_composition(db, payload)
    logger.info("composition %s created by %s", composition.code, identity.id)
    return DataResponse[CompositionResponse](data=composition)


@router.get("", dependencies=[Depends(authorize(TEACHING_STAFF))])
async def list_compositions(request: Request, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await service.list_compositions(db, request.query_params)


@router.get(
    "/{code}",
    response_model=DataResponse[CompositionResponse],
    dependencies=[Depends(authorize(TEACHING_STAFF))],
)
async def get_composition(code: str, db: AsyncSession = Depends(get_db)) -> DataResponse[CompositionResponse]:
    return DataResponse[CompositionResponse](data=await service.get_composition(db, code))


@router.put("/{code}", response_model=DataResponse[CompositionResponse])
async def update_composition(
    code: str,
    payload: CompositionUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> DataResponse[CompositionResponse]:
    composition = await service.update_composition(db, code, payload)
    logger.info("composition %s updated by %s", code, identity.id)
    return DataResponse[CompositionResponse](data=composition)


@router.delete("/{code}", response_model=DeletedResponse)
async def delete_composition(
    code: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_composition(db, code)
    logger.info("composition %s deleted by %s", code, identity.id)
    return DeletedResponse()
