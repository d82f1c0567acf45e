from types import SimpleNamespace

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.core.models import Note

API = "/scolarix-api/v1"

NOTE = {"student_id": "S001", "evaluation_code": "DEV", "composition_code": "COMP1", "value": 8}


@pytest.mark.asyncio
async def test_teacher_creates_note(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.post(f"{API}/notes", json=NOTE, headers=seed.teacher_a_headers)
    assert response.status_code == 201
    assert response.json() == {"success": True, "data": NOTE}


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [10.5, -1])
async def test_note_out_of_range_is_rejected(client: AsyncClient, seed: SimpleNamespace, value: float) -> None:
    response = await client.post(f"{API}/notes", json={**NOTE, "value": value}, headers=seed.teacher_a_headers)
    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"][0]["loc"] == ["body", "value"]


@pytest.mark.asyncio
async def test_duplicate_note_is_unique_conflict(client: AsyncClient, seed: SimpleNamespace) -> None:
    first = await client.post(f"{API}/notes", json=NOTE, headers=seed.teacher_a_headers)
    assert first.status_code == 201

    second = await client.post(f"{API}/notes", json={**NOTE, "value": 5}, headers=seed.teacher_a_headers)
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "UNIQUE_CONSTRAINT"


@pytest.mark.asyncio
async def test_note_for_student_of_other_school(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.post(
        f"{API}/notes", json={**NOTE, "student_id": "S002"}, headers=seed.teacher_a_headers
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "OWNERSHIP_REQUIRED"


@pytest.mark.asyncio
async def test_note_references_must_exist(client: AsyncClient, seed: SimpleNamespace) -> None:
    response = await client.post(
        f"{API}/notes", json={**NOTE, "evaluation_code": "NOPE"}, headers=seed.teacher_a_headers
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Evaluation type not found"


@pytest.mark.asyncio
async def test_notes_listing_is_scoped_to_school(
    client: AsyncClient, db_session: AsyncSession, seed: SimpleNamespace
) -> None:
    db_session.add_all(
        [
            Note(student_id="S001", evaluation_code="DEV", composition_code="COMP1", value=8),
            Note(student_id="S001", evaluation_code="INT", composition_code="COMP1", value=6),
            Note(student_id="S002", evaluation_code="DEV", composition_code="COMP1", value=4),
        ]
    )
    await db_session.commit()

    response = await client.get(f"{API}/notes", headers=seed.teacher_a_headers)
    body = response.json()
    assert body["totalCount"] == 2
    assert {n["student_id"] for n in body["notes"]} == {"S001"}

    response = await client.get(f"{API}/notes", headers=seed.admin_headers)
    assert response.json()["totalCount"] == 3

    response = await client.get(f"{API}/notes?value=gte5", headers=seed.admin_headers)
    assert response.json()["totalCount"] == 2

    response = await client.get(f"{API}/notes/eleve/S001", headers=seed.teacher_a_headers)
    assert response.json()["count"] == 2


@pytest.mark.asyncio
async def test_update_and_delete_note(
    client: AsyncClient, db_session: AsyncSession, seed: SimpleNamespace
) -> None:
    db_session.add(Note(student_id="S001", evaluation_code="DEV", composition_code="COMP1", value=8))
    await db_session.commit()

    response = await client.put(f"{API}/notes/S001/DEV/COMP1", json={}, headers=seed.teacher_a_headers)
    assert response.status_code == 422

    response = await client.put(f"{API}/notes/S001/DEV/COMP1", json={"value": 9.5}, headers=seed.teacher_a_headers)
    assert response.status_code == 200
    assert response.json()["data"]["value"] == 9.5

    response = await client.put(f"{API}/notes/S001/DEV/COMP1", json={"value": 5}, headers=seed.teacher_b_headers)
    assert response.status_code == 403

    response = await client.delete(f"{API}/notes/S001/DEV/COMP1", headers=seed.teacher_a_headers)
    assert response.status_code == 403

    response = await client.delete(f"{API}/notes/S001/DEV/COMP1", headers=seed.admin_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {}}

    response = await client.delete(f"{API}/notes/S001/DEV/COMP1", headers=seed.admin_headers)
    assert response.status_code == 404
