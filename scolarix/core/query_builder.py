"""
Query-string driven listing: search, filter, sort, field projection and pagination
for any mapped model, without per-resource code.

    builder = (
        QueryBuilder(Student, request.query_params, STUDENTS)
        .search()
        .filter()
        .sort()
        .limit_fields()
        .paginate(settings.res_per_page)
    )
    builder.where(Student.school_id == identity.school_id)
    rows = await builder.execute(db)
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import String, cast, func, not_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.core.logging import get_logger
from scolarix.db.entity import entity_meta

RESERVED_PARAMS = frozenset({"page", "sort", "limit", "fields", "keyword"})
MAX_PAGE_SIZE = 1000
DEFAULT_SORT_FIELD = "created_at"
DEFAULT_HIDDEN_FIELDS = ("deleted_at", "created_at", "updated_at")
LIKE_ESCAPE = "\\"

# Longer tokens first: "gte" must win over "gt".
_OPERATOR_TOKENS = ("gte", "gt", "lte", "lt", "in", "ne")


@dataclass(frozen=True)
class CollectionConfig:
    """Per-collection listing options.

    searchable_fields: columns matched (case-insensitive substring) by ``keyword``.
    default_hidden_fields: columns left out when the caller does not ask for ``fields``.
    protected_fields: columns never exposed, filtered, sorted or searched.
    """

    searchable_fields: Tuple[str, ...] = ()
    default_hidden_fields: Tuple[str, ...] = DEFAULT_HIDDEN_FIELDS
    protected_fields: Tuple[str, ...] = ()

    def validate(self, model) -> "CollectionConfig":
        columns = set(model.__mapper__.columns.keys())
        unknown = [f for f in (*self.searchable_fields, *self.protected_fields) if f not in columns]
        if unknown:
            raise ValueError(f"{model.__name__}: unknown collection field(s) {', '.join(sorted(unknown))}")
        overlap = set(self.searchable_fields) & set(self.protected_fields)
        if overlap:
            raise ValueError(f"{model.__name__}: protected field(s) cannot be searchable: {', '.join(sorted(overlap))}")
        return self


def _to_int(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def coerce_value(column, raw: str) -> Any:
    """Convert a query-string value to the column's Python type. Raises ValueError when it does not fit."""
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw
    if issubclass(python_type, Enum):
        return python_type(raw)
    if python_type is bool:
        lowered = raw.lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if python_type is datetime:
        return datetime.fromisoformat(raw)
    if python_type is date:
        return date.fromisoformat(raw)
    if python_type in (int, float, Decimal, str):
        return python_type(raw)
    return raw


def escape_like(value: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def parse_operator(value: str) -> Tuple[str, str]:
    """Split a filter value into (operator, operand). No leading token means equality."""
    for token in _OPERATOR_TOKENS:
        if value.startswith(token):
            return token, value[len(token):].strip()
    return "eq", value


class QueryBuilder:
    """Builds one SELECT from query parameters. Each stage only touches its own part of the plan."""

    def __init__(
        self,
        model,
        params: Mapping[str, str],
        config: CollectionConfig,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.model = model
        self.params = dict(params)
        self.config = config
        self.logger = logger or get_logger("query")

        self._columns = dict(model.__mapper__.columns.items())
        self._search: List[Any] = []
        self._filters: List[Any] = []
        self._conditions: List[Any] = []
        self._order: List[Any] = []
        self._fields: Optional[List[str]] = None
        self.page = 1
        self.limit: Optional[int] = None
        self.offset = 0

    # ----- helpers -----

    def _column(self, name: str):
        if name in self.config.protected_fields or name not in self._columns:
            return None
        return getattr(self.model, name)

    def _default_fields(self) -> List[str]:
        hidden = set(self.config.default_hidden_fields) | set(self.config.protected_fields)
        return [name for name in self._columns if name not in hidden]

    # ----- stages -----

    def search(self) -> "QueryBuilder":
        keyword = (self.params.get("keyword") or "").strip()
        if not keyword or not self.config.searchable_fields:
            return self
        pattern = f"%{escape_like(keyword)}%"
        clauses = []
        for name in self.config.searchable_fields:
            col = self._column(name)
            if col is None:
                continue
            target = col if isinstance(self._columns[name].type, String) else cast(col, String)
            clauses.append(target.ilike(pattern, escape=LIKE_ESCAPE))
        if clauses:
            self._search = [or_(*clauses)]
            self.logger.debug("search %r on %s", keyword, ", ".join(self.config.searchable_fields))
        return self

    def filter(self) -> "QueryBuilder":
        predicates = []
        for key, value in self.params.items():
            if key in RESERVED_PARAMS:
                continue
            col = self._column(key)
            if col is None:
                self.logger.debug("filter on unknown field %r ignored", key)
                continue
            column = self._columns[key]
            operator, operand = parse_operator(value)
            try:
                if operator in ("in", "ne"):
                    values = [coerce_value(column, v.strip()) for v in operand.split(",") if v.strip()]
                else:
                    values = [coerce_value(column, operand)]
            except ValueError:
                self.logger.debug("filter %s=%r ignored: value does not fit column type", key, value)
                continue
            if operator == "gte":
                predicates.append(col >= values[0])
            elif operator == "gt":
                predicates.append(col > values[0])
            elif operator == "lte":
                predicates.append(col <= values[0])
            elif operator == "lt":
                predicates.append(col < values[0])
            elif operator == "in":
                predicates.append(col.in_(values))
            elif operator == "ne":
                predicates.append(not_(col.in_(values)))
            else:
                predicates.append(col == values[0])
        self._filters = predicates
        return self

    def sort(self) -> "QueryBuilder":
        order = []
        raw = self.params.get("sort") or ""
        for item in raw.split(","):
            item = item.strip()
            if not item:
                continue
            descending = item.startswith("-")
            col = self._column(item.lstrip("-"))
            if col is None:
                continue
            order.append(col.desc() if descending else col.asc())
        if not order and DEFAULT_SORT_FIELD in self._columns:
            order = [getattr(self.model, DEFAULT_SORT_FIELD).desc()]
        self._order = order
        return self

    def limit_fields(self) -> "QueryBuilder":
        raw = self.params.get("fields") or ""
        requested = [f.strip() for f in raw.split(",") if f.strip()]
        selected = [f for f in requested if self._column(f) is not None]
        self._fields = selected or self._default_fields()
        return self

    def paginate(self, default_page_size: int) -> "QueryBuilder":
        self.page = max(_to_int(self.params.get("page"), 1), 1)
        limit = _to_int(self.params.get("limit"), default_page_size)
        if limit < 1:
            limit = default_page_size
        self.limit = min(limit, MAX_PAGE_SIZE)
        self.offset = (self.page - 1) * self.limit
        return self

    def where(self, *conditions) -> "QueryBuilder":
        """Merge caller conditions (ownership, route scope) with the parsed ones."""
        self._conditions.extend(c for c in conditions if c is not None)
        return self

    # ----- execution -----

    def conditions(self) -> List[Any]:
        merged = [*self._filters, *self._search, *self._conditions]
        if entity_meta(self.model).soft_delete:
            merged.append(self.model.deleted_at.is_(None))
        return merged

    def statement(self):
        fields = self._fields if self._fields is not None else self._default_fields()
        stmt = select(*[getattr(self.model, f) for f in fields]).where(*self.conditions())
        if self._order:
            stmt = stmt.order_by(*self._order)
        if self.limit is not None:
            stmt = stmt.offset(self.offset).limit(self.limit)
        return stmt

    async def execute(self, db: AsyncSession) -> List[Dict[str, Any]]:
        result = await db.execute(self.statement())
        return [dict(row) for row in result.mappings().all()]

    async def count(self, db: AsyncSession) -> int:
        stmt = select(func.count()).select_from(self.model).where(*self.conditions())
        result = await db.execute(stmt)
        return result.scalar() or 0


def list_envelope(plural: str, rows: List[Dict[str, Any]], total: int, per_page: int) -> Dict[str, Any]:
    return {
        "success": True,
        "count": len(rows),
        "totalCount": total,
        "resPerPage": per_page,
        plural: rows,
    }


async def run_listing(
    db: AsyncSession,
    builder: QueryBuilder,
    plural: str,
    per_page: int,
) -> Dict[str, Any]:
    rows = await builder.execute(db)
    total = await builder.count(db)
    return list_envelope(plural, rows, total, per_page)
