from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.rbac import ADMIN_ONLY, TEACHING_STAFF, authorize, school_scoped
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.models import SchoolClass
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import ClassCreate, ClassResponse, ClassUpdate

router = APIRouter(prefix="/classes", tags=["classes"])
logger = get_logger("classes")

SAME_SCHOOL = school_scoped(SchoolClass)


@router.post("", response_model=DataResponse[ClassResponse], status_code=status.HTTP_201_CREATED)
async def create_class(
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> DataResponse[ClassResponse]:
    school_class = await service.create_class(db, identity, payload)
    logger.info("class %s created by %s", school_class.class_id, identity.id)
    return DataResponse[ClassResponse](data=school_class)


@router.get("")
async def list_classes(
    request: Request,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF)),
) -> Dict[str, Any]:
    return await service.list_classes(db, identity, request.query_params)


@router.get("/{class_id}", response_model=DataResponse[ClassResponse])
async def get_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF, SAME_SCHOOL, id_param="class_id")),
) -> DataResponse[ClassResponse]:
    return DataResponse[ClassResponse](data=await service.get_class(db, class_id))


@router.put("/{class_id}", response_model=DataResponse[ClassResponse])
async def update_class(
    class_id: str,
    payload: ClassUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(TEACHING_STAFF, SAME_SCHOOL, id_param="class_id")),
) -> DataResponse[ClassResponse]:
    school_class = await service.update_class(db, identity, class_id, payload)
    logger.info("class %s updated by %s", class_id, identity.id)
    return DataResponse[ClassResponse](data=school_class)


@router.delete("/{class_id}", response_model=DeletedResponse)
async def delete_class(
    class_id: str,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_class(db, class_id)
    logger.info("class %s deleted by %s", class_id, identity.id)
    return DeletedResponse()
