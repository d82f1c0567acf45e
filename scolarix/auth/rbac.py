"""
Authorization gate: role checks plus per-resource ownership checks.

    @router.put("/{class_id}")
    async def update(
        class_id: str,
        identity: AuthIdentity = Depends(
            authorize(TEACHING_STAFF, school_scoped(SchoolClass), id_param="class_id")
        ),
    ): ...

Administrators pass every ownership check. Other roles must satisfy the
ownership policy attached to the route:

* ``DirectOwnerField(model, field)``: the resource loaded by primary key has
  ``field`` equal to the caller's user id.
* ``CustomPredicate(resolve)``: ``await resolve(db, identity, resource_id)``
  returns True when the caller may act on the resource.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from fastapi import Depends, Request, status
from sqlalchemy import false, select
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.dependencies import get_current_user
from scolarix.auth.schemas import AuthIdentity
from scolarix.core.enums import UserRole
from scolarix.core.exceptions import ServiceError
from scolarix.core.logging import get_logger
from scolarix.core.models import Student
from scolarix.core.query_builder import coerce_value
from scolarix.db.entity import is_soft_deleted
from scolarix.db.session import get_db

logger = get_logger("auth")

ADMIN_ONLY = (UserRole.ADMINISTRATOR,)
TEACHER_ONLY = (UserRole.TEACHER,)
TEACHING_STAFF = (UserRole.ADMINISTRATOR, UserRole.TEACHER)


@dataclass(frozen=True)
class DirectOwnerField:
    model: Any
    field: str = "id"


@dataclass(frozen=True)
class CustomPredicate:
    resolve: Callable[[AsyncSession, AuthIdentity, Optional[str]], Awaitable[bool]]


OwnershipPolicy = Union[DirectOwnerField, CustomPredicate]


def _forbidden(message: str, code: str = "FORBIDDEN") -> ServiceError:
    return ServiceError(message, code, status.HTTP_403_FORBIDDEN)


async def load_by_key(db: AsyncSession, model, resource_id: Optional[str]):
    """Load a row by its single-column primary key from a path value. None when absent or unparsable."""
    if resource_id is None:
        return None
    pk_column = model.__mapper__.primary_key[0]
    try:
        key = coerce_value(pk_column, resource_id)
    except ValueError:
        return None
    resource = await db.get(model, key)
    if resource is None or is_soft_deleted(resource):
        return None
    return resource


async def check_ownership(
    db: AsyncSession,
    identity: AuthIdentity,
    policy: OwnershipPolicy,
    resource_id: Optional[str],
) -> bool:
    if isinstance(policy, DirectOwnerField):
        if policy.model is None or not policy.field:
            raise ServiceError(
                "Ownership check is misconfigured for this route",
                "AUTH_CONFIG_ERROR",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        resource = await load_by_key(db, policy.model, resource_id)
        if resource is None:
            return False
        return getattr(resource, policy.field, None) == identity.id
    if isinstance(policy, CustomPredicate):
        return bool(await policy.resolve(db, identity, resource_id))
    raise ServiceError(
        "Ownership check is misconfigured for this route",
        "AUTH_CONFIG_ERROR",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def authorize(
    roles: Sequence[UserRole] = (),
    ownership: Optional[OwnershipPolicy] = None,
    id_param: str = "id",
):
    """
    Dependency factory enforcing role membership and, optionally, ownership.

    Example:
        Depends(authorize(ADMIN_ONLY))
    """
    allowed = tuple(roles)

    async def _checker(
        request: Request,
        identity: AuthIdentity = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
    ) -> AuthIdentity:
        if allowed and identity.role not in allowed:
            logger.warning(
                "role %s denied on %s %s", identity.role.value, request.method, request.url.path
            )
            raise _forbidden("You do not have permission to perform this action")

        if ownership is None or identity.is_admin:
            return identity

        resource_id = request.path_params.get(id_param)
        if not await check_ownership(db, identity, ownership, resource_id):
            logger.warning(
                "user %s denied ownership of %s=%s on %s %s",
                identity.id, id_param, resource_id, request.method, request.url.path,
            )
            raise _forbidden("You can only access resources you own", "OWNERSHIP_REQUIRED")
        return identity

    return _checker


def school_scoped(model) -> CustomPredicate:
    """Ownership through the resource's school_id: the caller must belong to the same school."""

    async def _resolve(db: AsyncSession, identity: AuthIdentity, resource_id: Optional[str]) -> bool:
        resource = await load_by_key(db, model, resource_id)
        if resource is None or identity.school_id is None:
            return False
        return resource.school_id == identity.school_id

    return CustomPredicate(_resolve)


def ensure_same_school(identity: AuthIdentity, school_id: Optional[str]) -> None:
    """Reject a non-administrator acting on data that belongs to another school."""
    if identity.is_admin:
        return
    if school_id is None or school_id != identity.school_id:
        logger.warning("user %s denied access to school %s", identity.id, school_id)
        raise _forbidden("You can only access resources of your own school", "OWNERSHIP_REQUIRED")


def school_scope(identity: AuthIdentity, school_column):
    """Listing condition restricting non-administrators to their school. None means unrestricted."""
    if identity.is_admin:
        return None
    if not identity.school_id:
        return false()
    return school_column == identity.school_id


def student_school_scope(identity: AuthIdentity, student_column):
    """Listing condition for rows keyed by student: only students of the caller's school."""
    if identity.is_admin:
        return None
    if not identity.school_id:
        return false()
    students = select(Student.registration_number).where(Student.school_id == identity.school_id)
    return student_column.in_(students)
