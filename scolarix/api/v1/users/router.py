from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.models import User
from scolarix.auth.rbac import ADMIN_ONLY, DirectOwnerField, authorize
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.logging import get_logger
from scolarix.core.schemas import DataResponse, DeletedResponse
from scolarix.db.session import get_db

from . import service
from .schemas import UserCreate, UserResponse, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])
logger = get_logger("users")

SELF = DirectOwnerField(User, "id")


@router.post("", response_model=DataResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DataResponse[UserResponse]:
    user = await service.create_user(db, payload)
    logger.info("user %s created by %s", user.id, identity.id)
    return DataResponse[UserResponse](data=user)


@router.get("", dependencies=[Depends(authorize(ADMIN_ONLY))])
async def list_users(request: Request, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await service.list_users(db, request.query_params)


@router.get("/{user_id}", response_model=DataResponse[UserResponse])
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ownership=SELF, id_param="user_id")),
) -> DataResponse[UserResponse]:
    return DataResponse[UserResponse](data=await service.get_user(db, user_id))


@router.put("/{user_id}", response_model=DataResponse[UserResponse])
async def update_user(
    user_id: int,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ownership=SELF, id_param="user_id")),
) -> DataResponse[UserResponse]:
    user = await service.update_user(db, identity, user_id, payload)
    logger.info("user %s updated by %s", user_id, identity.id)
    return DataResponse[UserResponse](data=user)


@router.delete("/{user_id}", response_model=DeletedResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: AuthIdentity = Depends(authorize(ADMIN_ONLY)),
) -> DeletedResponse:
    await service.delete_user(db, user_id)
    logger.info("user %s deleted by %s", user_id, identity.id)
    return DeletedResponse()
