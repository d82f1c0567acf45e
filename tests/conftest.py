import os

# Settings are read at import time: configure before importing the application.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"
os.environ["RES_PER_PAGE"] = "10"

from datetime import date
from types import SimpleNamespace
from typing import AsyncGenerator, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from scolarix.auth.models import User
from scolarix.auth.schemas import AuthIdentity
from scolarix.auth.security import hash_password, issue_token
from scolarix.core.config import settings
from scolarix.core.enums import CompositionType, Gender, UserRole
from scolarix.core.models import (
    Composition,
    EvaluationType,
    School,
    SchoolClass,
    SchoolYear,
    Student,
)
from scolarix.db.session import Base, enable_sqlite_foreign_keys, get_db
from scolarix.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite://"
API = settings.api_prefix
PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory schema per test; the app shares this session through get_db."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine.sync_engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def auth_headers(user: User) -> Dict[str, str]:
    token = issue_token(
        AuthIdentity(id=user.id, username=user.username, role=user.role, school_id=user.school_id)
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def seed(db_session: AsyncSession) -> SimpleNamespace:
    """
    Two schools, one school year, a class and a student per school,
    two evaluation types (coefficients 2 and 1) and two compositions.
    """
    db_session.add_all(
        [
            School(school_id="EC001", name="Lycee Alpha", city="Abidjan", inspection_district="IEP Nord"),
            School(school_id="EC002", name="College Beta", city="Bouake"),
            SchoolYear(code="2024-2025", label="2024/25"),
        ]
    )
    await db_session.flush()

    admin = User(username="admin", password_hash=PASSWORD_HASH, role=UserRole.ADMINISTRATOR, school_id="EC001")
    teacher_a = User(username="teacher_a", password_hash=PASSWORD_HASH, role=UserRole.TEACHER, school_id="EC001")
    teacher_b = User(username="teacher_b", password_hash=PASSWORD_HASH, role=UserRole.TEACHER, school_id="EC002")
    other = User(username="clerk", password_hash=PASSWORD_HASH, role=UserRole.OTHER, school_id="EC001")
    db_session.add_all([admin, teacher_a, teacher_b, other])
    db_session.add_all(
        [
            SchoolClass(class_id="C1", label="6eme A", level="6eme", school_year_code="2024-2025", school_id="EC001"),
            SchoolClass(class_id="C2", label="6eme B", level="6eme", school_year_code="2024-2025", school_id="EC002"),
            EvaluationType(code="DEV", name="Devoir", coefficient=2),
            EvaluationType(code="INT", name="Interrogation", coefficient=1),
            Composition(
                code="COMP1",
                label="First term",
                composition_date=date(2024, 11, 15),
                type=CompositionType.MONTHLY,
                school_year_code="2024-2025",
            ),
            Composition(
                code="COMP2",
                label="Second term",
                composition_date=date(2025, 2, 14),
                type=CompositionType.MONTHLY,
                school_year_code="2024-2025",
            ),
        ]
    )
    await db_session.flush()
    db_session.add_all(
        [
            Student(
                registration_number="S001",
                last_name="Kouassi",
                first_name="Awa",
                gender=Gender.F,
                class_id="C1",
                school_id="EC001",
            ),
            Student(
                registration_number="S002",
                last_name="Traore",
                first_name="Moussa",
                gender=Gender.M,
                class_id="C2",
                school_id="EC002",
            ),
        ]
    )
    await db_session.commit()

    return SimpleNamespace(
        admin=admin,
        teacher_a=teacher_a,
        teacher_b=teacher_b,
        other=other,
        admin_headers=auth_headers(admin),
        teacher_a_headers=auth_headers(teacher_a),
        teacher_b_headers=auth_headers(teacher_b),
        other_headers=auth_headers(other),
    )
