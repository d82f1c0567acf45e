from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.models import User
from scolarix.core import collections
from scolarix.core.models import EvaluationType, School, Student
from scolarix.core.query_builder import (
    MAX_PAGE_SIZE,
    CollectionConfig,
    QueryBuilder,
    coerce_value,
    escape_like,
    list_envelope,
    parse_operator,
    run_listing,
)
from scolarix.db.entity import soft_delete


def test_parse_operator_tokens() -> None:
    assert parse_operator("gte18") == ("gte", "18")
    assert parse_operator("gt18") == ("gt", "18")
    assert parse_operator("lte 3.5") == ("lte", "3.5")
    assert parse_operator("lt2") == ("lt", "2")
    assert parse_operator("in Teacher,Administrator") == ("in", "Teacher,Administrator")
    assert parse_operator("neArchived") == ("ne", "Archived")
    assert parse_operator("Teacher") == ("eq", "Teacher")


def test_coerce_value_follows_column_type() -> None:
    assert coerce_value(EvaluationType.__table__.c.coefficient, "2.5") == 2.5
    assert coerce_value(User.__table__.c.id, "7") == 7
    assert coerce_value(User.__table__.c.role, "Teacher").value == "Teacher"
    with pytest.raises(ValueError):
        coerce_value(User.__table__.c.id, "seven")
    with pytest.raises(ValueError):
        coerce_value(User.__table__.c.role, "Janitor")


def test_paginate_bounds() -> None:
    builder = QueryBuilder(Student, {"limit": "5000", "page": "0"}, collections.STUDENTS).paginate(10)
    assert builder.limit == MAX_PAGE_SIZE
    assert builder.page == 1
    assert builder.offset == 0

    builder = QueryBuilder(Student, {"limit": "-3", "page": "abc"}, collections.STUDENTS).paginate(10)
    assert builder.limit == 10
    assert builder.page == 1

    builder = QueryBuilder(Student, {"limit": "5", "page": "3"}, collections.STUDENTS).paginate(10)
    assert builder.offset == 10


def test_collection_config_rejects_unknown_and_protected_search_fields() -> None:
    with pytest.raises(ValueError):
        CollectionConfig(searchable_fields=("nickname",)).validate(Student)
    with pytest.raises(ValueError):
        CollectionConfig(searchable_fields=("username",), protected_fields=("username",)).validate(User)


def test_list_envelope_shape() -> None:
    assert list_envelope("students", [{"a": 1}], 12, 10) == {
        "success": True,
        "count": 1,
        "totalCount": 12,
        "resPerPage": 10,
        "students": [{"a": 1}],
    }


async def _add_evaluation_types(db_session: AsyncSession) -> None:
    db_session.add_all(
        [
            EvaluationType(code="E1", name="Oral", coefficient=1),
            EvaluationType(code="E2", name="Written", coefficient=2),
            EvaluationType(code="E3", name="Exam", coefficient=3),
            EvaluationType(code="E4", name="Project", coefficient=4),
        ]
    )
    await db_session.commit()


@pytest.mark.asyncio
async def test_filter_comparison_operators(db_session: AsyncSession) -> None:
    await _add_evaluation_types(db_session)

    builder = QueryBuilder(EvaluationType, {"coefficient": "gte3"}, collections.EVALUATION_TYPES).filter()
    rows = await builder.execute(db_session)
    assert sorted(r["code"] for r in rows) == ["E3", "E4"]

    builder = QueryBuilder(EvaluationType, {"coefficient": "lt2"}, collections.EVALUATION_TYPES).filter()
    rows = await builder.execute(db_session)
    assert [r["code"] for r in rows] == ["E1"]

    builder = QueryBuilder(EvaluationType, {"code": "in E1, E4"}, collections.EVALUATION_TYPES).filter()
    rows = await builder.execute(db_session)
    assert sorted(r["code"] for r in rows) == ["E1", "E4"]

    builder = QueryBuilder(EvaluationType, {"name": "neExam"}, collections.EVALUATION_TYPES).filter()
    rows = await builder.execute(db_session)
    assert sorted(r["code"] for r in rows) == ["E1", "E2", "E4"]


@pytest.mark.asyncio
async def test_filter_skips_unknown_and_uncoercible_values(db_session: AsyncSession) -> None:
    await _add_evaluation_types(db_session)
    builder = QueryBuilder(
        EvaluationType,
        {"colour": "blue", "coefficient": "gteabc"},
        collections.EVALUATION_TYPES,
    ).filter()
    assert len(await builder.execute(db_session)) == 4


@pytest.mark.asyncio
async def test_enum_membership_filter(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    builder = QueryBuilder(User, {"role": "in Teacher,Administrator"}, collections.USERS).filter()
    rows = await builder.execute(db_session)
    assert sorted(r["username"] for r in rows) == ["admin", "teacher_a", "teacher_b"]


@pytest.mark.asyncio
async def test_sort_and_field_projection(db_session: AsyncSession) -> None:
    await _add_evaluation_types(db_session)
    builder = (
        QueryBuilder(EvaluationType, {"sort": "-coefficient,bogus", "fields": "code,unknown"}, collections.EVALUATION_TYPES)
        .sort()
        .limit_fields()
    )
    rows = await builder.execute(db_session)
    assert rows == [{"code": "E4"}, {"code": "E3"}, {"code": "E2"}, {"code": "E1"}]


@pytest.mark.asyncio
async def test_default_projection_hides_timestamps_and_protected_fields(
    db_session: AsyncSession, seed: SimpleNamespace
) -> None:
    builder = QueryBuilder(User, {"fields": "password_hash"}, collections.USERS).limit_fields()
    rows = await builder.execute(db_session)
    assert rows
    for row in rows:
        assert "password_hash" not in row
        assert "created_at" not in row
        assert "deleted_at" not in row
        assert "username" in row


@pytest.mark.asyncio
async def test_protected_field_cannot_be_filtered(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    builder = QueryBuilder(User, {"password_hash": "anything"}, collections.USERS).filter()
    assert len(await builder.execute(db_session)) == 4


@pytest.mark.asyncio
async def test_keyword_search_is_case_insensitive(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    builder = QueryBuilder(School, {"keyword": "ALPHA"}, collections.SCHOOLS).search()
    rows = await builder.execute(db_session)
    assert [r["school_id"] for r in rows] == ["EC001"]

    builder = QueryBuilder(School, {"keyword": "bouake"}, collections.SCHOOLS).search()
    rows = await builder.execute(db_session)
    assert [r["school_id"] for r in rows] == ["EC002"]


def test_escape_like() -> None:
    assert escape_like("100%") == "100\\%"
    assert escape_like("a_b") == "a\\_b"
    assert escape_like("c:\\d") == "c:\\\\d"
    assert escape_like("plain") == "plain"


@pytest.mark.asyncio
async def test_keyword_wildcards_match_literally(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    db_session.add(School(school_id="EC003", name="Ecole 100% Reussite"))
    await db_session.commit()

    builder = QueryBuilder(School, {"keyword": "%"}, collections.SCHOOLS).search()
    assert [r["school_id"] for r in await builder.execute(db_session)] == ["EC003"]
    assert await builder.count(db_session) == 1

    builder = QueryBuilder(School, {"keyword": "_"}, collections.SCHOOLS).search()
    assert await builder.execute(db_session) == []


@pytest.mark.asyncio
async def test_count_ignores_pagination_and_keeps_where(db_session: AsyncSession) -> None:
    await _add_evaluation_types(db_session)
    builder = (
        QueryBuilder(EvaluationType, {"limit": "1", "page": "2", "sort": "code"}, collections.EVALUATION_TYPES)
        .filter()
        .sort()
        .limit_fields()
        .paginate(10)
        .where(EvaluationType.coefficient > 1)
    )
    envelope = await run_listing(db_session, builder, "evaluationTypes", 10)
    assert envelope["count"] == 1
    assert envelope["totalCount"] == 3
    assert envelope["evaluationTypes"][0]["code"] == "E3"


@pytest.mark.asyncio
async def test_soft_deleted_rows_are_not_listed(db_session: AsyncSession, seed: SimpleNamespace) -> None:
    await soft_delete(db_session, seed.other)
    builder = QueryBuilder(User, {}, collections.USERS).filter().paginate(10)
    rows = await builder.execute(db_session)
    assert "clerk" not in {r["username"] for r in rows}
    assert await builder.count(db_session) == 3
