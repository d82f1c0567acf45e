from types import SimpleNamespace

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.api.v1.averages.service import list_averages
from scolarix.api.v1.classes.service import list_classes
from scolarix.api.v1.notes.service import list_notes
from scolarix.api.v1.students.service import list_students
from scolarix.auth.models import User
from scolarix.auth.rbac import CustomPredicate, DirectOwnerField, check_ownership, school_scoped
from scolarix.auth.schemas import AuthIdentity
from scolarix.auth.security import decode_token, issue_token, verify_password
from scolarix.core.config import settings
from scolarix.core.enums import UserRole
from scolarix.core.exceptions import ServiceError
from scolarix.core.models import Average, Note, Student
from scolarix.db.entity import soft_delete

API = "/scolarix-api/v1"


def _identity(user: User) -> AuthIdentity:
    return AuthIdentity(id=user.id, username=user.username, role=user.role, school_id=user.school_id)


@pytest.mark.asyncio
async def test_login_success_returns_token_and_stamps_last_login(
    client: AsyncClient, db_session: AsyncSession, seed: SimpleNamespace
) -> None:
    response = await client.post(f"{API}/login", json={"username": "teacher_a", "password": "secret123"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True

    claims = decode_token(body["token"])
    assert claims["userId"] == seed.teacher_a.id
    assert claims["role"] == "Teacher"
    assert claims["iss"] == settings.jwt_issuer
    assert claims["aud"] == settings.jwt_audience
    assert claims["exp"] > claims["iat"]

    result = await db_session.execute(select(User.last_login).where(User.id == seed.teacher_a.id))
    assert result.scalar_one() is not None


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.post(f"{API}/login", json={"username": "teacher_a", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json() == {
        "success": False,
        "error": {"code": "INVALID_CREDENTIALS", "message": "Invalid username or password"},
    }


@pytest.mark.asyncio
async def test_login_unknown_user(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.post(f"{API}/login", json={"username": "nobody", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_soft_deleted_user_rejected(
    client: AsyncClient, db_session: AsyncSession, seed: SimpleNamespace
) -> None:
    await soft_delete(db_session, seed.teacher_b)
    response = await client.post(f"{API}/login", json={"username": "teacher_b", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_missing_token_is_auth_required(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.get(f"{API}/schools")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTH_REQUIRED"


@pytest.mark.asyncio
async def test_malformed_token(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.get(f"{API}/schools", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_MALFORMED"


@pytest.mark.asyncio
async def test_token_signed_with_other_secret_is_malformed(
    client: AsyncClient, seed: SimpleNamespace, monkeypatch
) -> None:
    monkeypatch.setattr(settings, "jwt_secret", "another-secret")
    token = issue_token(_identity(seed.admin))
    monkeypatch.setattr(settings, "jwt_secret", "test-secret-key")

    response = await client.get(f"{API}/schools", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_MALFORMED"


@pytest.mark.asyncio
async def test_expired_token(client: AsyncClient, seed: SimpleNamespace) -> None:
    token = issue_token(_identity(seed.admin), expires_minutes=-5)
    response = await client.get(f"{API}/schools", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"


@pytest.mark.asyncio
async def test_deleted_user_token_is_user_not_found(
    client: AsyncClient, db_session: AsyncSession, seed: SimpleNamespace
) -> None:
    await soft_delete(db_session, seed.teacher_b)
    response = await client.get(f"{API}/schools", headers=seed.teacher_b_headers)
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_missing_secret_is_config_error(seed: SimpleNamespace, monkeypatch) -> None:
    monkeypatch.setattr(settings, "jwt_secret", None)
    with pytest.raises(ServiceError) as exc_info:
        issue_token(_identity(seed.admin))
    assert exc_info.value.code == "JWT_CONFIG_ERROR"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_role_not_allowed_is_forbidden(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.get(f"{API}/schools", headers=seed.other_headers)
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"

    response = await client.post(
        f"{API}/schools",
        headers=seed.teacher_a_headers,
        json={"school_id": "EC009", "name": "New School"},
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_direct_owner_field(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    policy = DirectOwnerField(User, "id")
    identity = _identity(seed.teacher_a)
    assert await check_ownership(db_session, identity, policy, str(seed.teacher_a.id)) is True
    assert await check_ownership(db_session, identity, policy, str(seed.teacher_b.id)) is False
    assert await check_ownership(db_session, identity, policy, "not-an-int") is False
    assert await check_ownership(db_session, identity, policy, "9999") is False


@pytest.mark.asyncio
async def test_custom_predicate_receives_identity_and_id(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    seen = []

    async def resolve(db, identity, resource_id):
        seen.append((identity.id, resource_id))
        return resource_id == "S001"

    policy = CustomPredicate(resolve)
    identity = _identity(seed.teacher_a)
    assert await check_ownership(db_session, identity, policy, "S001") is True
    assert await check_ownership(db_session, identity, policy, "S002") is False
    assert seen == [(seed.teacher_a.id, "S001"), (seed.teacher_a.id, "S002")]


@pytest.mark.asyncio
async def test_unknown_policy_is_config_error(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    with pytest.raises(ServiceError) as exc_info:
        await check_ownership(db_session, _identity(seed.teacher_a), object(), "S001")
    assert exc_info.value.code == "AUTH_CONFIG_ERROR"

    with pytest.raises(ServiceError) as exc_info:
        await check_ownership(db_session, _identity(seed.teacher_a), DirectOwnerField(None), "S001")
    assert exc_info.value.code == "AUTH_CONFIG_ERROR"


@pytest.mark.asyncio
async def test_teacher_cannot_read_student_of_other_school(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.get(f"{API}/students/S002", headers=seed.teacher_a_headers)
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "OWNERSHIP_REQUIRED"

    response = await client.get(f"{API}/students/S002", headers=seed.admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["school_id"] == "EC002"


@pytest.mark.asyncio
async def test_teacher_reads_student_of_own_school(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.get(f"{API}/students/S001", headers=seed.teacher_a_headers)
    assert response.status_code == 200
    assert response.json()["data"]["registration_number"] == "S001"


@pytest.mark.asyncio
async def test_user_can_read_self_but_not_others(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.get(f"{API}/users/{seed.teacher_a.id}", headers=seed.teacher_a_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "teacher_a"
    assert "password_hash" not in data

    response = await client.get(f"{API}/users/{seed.teacher_b.id}", headers=seed.teacher_a_headers)
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "OWNERSHIP_REQUIRED"

    response = await client.get(f"{API}/users/{seed.teacher_b.id}", headers=seed.admin_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_user_cannot_promote_self(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.put(
        f"{API}/users/{seed.teacher_a.id}",
        headers=seed.teacher_a_headers,
        json={"role": "Administrator"},
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_user_changes_own_password(
    client: AsyncClient, db_session: AsyncSession, seed: SimpleNamespace
) -> None:
    response = await client.put(
        f"{API}/users/{seed.teacher_a.id}",
        headers=seed.teacher_a_headers,
        json={"password": "brand-new-pass"},
    )
    assert response.status_code == 200

    result = await db_session.execute(select(User.password_hash).where(User.id == seed.teacher_a.id))
    assert verify_password("brand-new-pass", result.scalar_one())


@pytest.mark.asyncio
async def test_identity_is_admin() -> None:
    admin = AuthIdentity(id=1, username="a", role=UserRole.ADMINISTRATOR, school_id="EC001")
    teacher = AuthIdentity(id=2, username="t", role=UserRole.TEACHER, school_id="EC001")
    assert admin.is_admin
    assert not teacher.is_admin


@pytest.mark.asyncio
async def test_school_scoped_predicate_for_missing_student(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    policy = school_scoped(Student)
    assert await check_ownership(db_session, _identity(seed.teacher_a), policy, "S001") is True
    assert await check_ownership(db_session, _identity(seed.teacher_a), policy, "NOPE") is False


@pytest.mark.asyncio
async def test_teacher_without_school_lists_nothing(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    db_session.add_all(
        [
            Note(student_id="S001", evaluation_code="DEV", composition_code="COMP1", value=8),
            Average(student_id="S001", composition_code="COMP1", value=8),
        ]
    )
    await db_session.commit()
    orphan = AuthIdentity(id=seed.teacher_a.id, username="teacher_a", role=UserRole.TEACHER, school_id=None)

    students = await list_students(db_session, orphan, {})
    assert students["totalCount"] == 0
    assert students["students"] == []

    classes = await list_classes(db_session, orphan, {})
    assert classes["totalCount"] == 0

    notes = await list_notes(db_session, orphan, {})
    assert notes["totalCount"] == 0
    assert notes["count"] == 0

    averages = await list_averages(db_session, orphan, {})
    assert averages["totalCount"] == 0

    # Same listings for a teacher attached to the school see the rows.
    notes = await list_notes(db_session, _identity(seed.teacher_a), {})
    assert notes["totalCount"] == 1
