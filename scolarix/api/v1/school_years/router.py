from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ADMIN_ONLY, TEACHING_STAFF, authorize
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import SchoolYearCreate, SchoolYearResponse, SchoolYearUpdate

router = APIRouter(prefix="/school-years", tags=["school-years"])
logger = get_logger("school_years")


@router.post("", response_model=DataResponse[SchoolYearResponse], status_code=status.HTTP_201_CREATED)
async def create_school_year(
    payload: SchoolYearCreate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DataResponse[SchoolYearResponse]:
    year = await service.create_school_year(db, payload)
    logger.info("school year %s created by %s", year.code, identity.id)
    return DataResponse[SchoolYearResponse](data=year)


@router.get("", dependencies=[Depends(authorize(TEACHING_STAFF))])
async def list_school_years(request: Request, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await service.list_school_years(db, request.query_params)


@router.get(
    "/{code}",
    response_model=DataResponse[SchoolYearResponse],
    dependencies=[Depends(authorize(TEACHING_STAFF))],
)
async def get_school_year(code: str, db: AsyncSession = Depends(get_db)) -> DataResponse[SchoolYearResponse]:
    return DataResponse[SchoolYearResponse](data=await service.get_school_year(db, code))


@router.put("/{code}", response_model=DataResponse[SchoolYearResponse])
async def update_school_year(
    code: str,
    payload: SchoolYearUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DataResponse[SchoolYearResponse]:
    year = await service.update_school_year(db, code, payload)
    logger.info("school year %s updated by %s", code, identity.id)
    return DataResponse[SchoolYearResponse](data=year)


@router.delete("/{code}", response_model=DeletedResponse)
async def delete_school_year(
    code: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_school_year(db, code)
    logger.info("school year %s deleted by %s", code, identity.id)
    return DeletedResponse()
