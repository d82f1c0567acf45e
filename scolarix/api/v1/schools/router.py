from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ADMIN_ONLY, TEACHING_STAFF, authorize
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import SchoolCreate, SchoolResponse, SchoolUpdate

router = APIRouter(prefix="/schools", tags=["schools"])
logger = get_logger("schools")


@router.post("", response_model=DataResponse[SchoolResponse], status_code=status.HTTP_201_CREATED)
async def create_school(
    payload: SchoolCreate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DataResponse[SchoolResponse]:
    school = await service.create_school(db, payload)
    logger.info("school %s created by %s", school.school_id, identity.id)
    return DataResponse[SchoolResponse](data=school)


@router.get("", dependencies=[Depends(authorize(TEACHING_STAFF))])
async def list_schools(request: Request, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await service.list_schools(db, request.query_params)


@router.get(
    "/{school_id}",
    response_model=DataResponse[SchoolResponse],
    dependencies=[Depends(authorize(TEACHING_STAFF))],
)
async def get_school(school_id: str, db: AsyncSession = Depends(get_db)) -> DataResponse[SchoolResponse]:
    return DataResponse[SchoolResponse](data=await service.get_school(db, school_id))


@router.put("/{school_id}", response_model=DataResponse[SchoolResponse])
async def update_school(
    school_id: str,
    payload: SchoolUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DataResponse[SchoolResponse]:
    school = await service.update_school(db, school_id, payload)
    logger.info("school %s updated by %s", school_id, identity.id)
    return DataResponse[SchoolResponse](data=school)


@router.delete("/{school_id}", response_model=DeletedResponse)
async def delete_school(
    school_id: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_school(db, school_id)
    logger.info("school %s deleted by %s", school_id, identity.id)
    return DeletedResponse()
