"""
SQL catalog adapter. Compiles the predicate tree to SQLAlchemy clauses over the resources table.
Tag and category lists are stored as JSON text, so list matches are LIKE patterns on that text.
SQLite's lower() folds ASCII only: non-ASCII terms that differ in case from the stored text
match in InMemoryCatalog but not here.
"""

import json
from typing import Any, Iterable

from sqlalchemy import and_, false, func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from db import ResourceRow, get_session_factory
from vetmatch.matching.catalog import CatalogError, SortSpec
from vetmatch.matching.predicates import (
    BOOL_FIELDS,
    LIST_FIELDS,
    And,
    FieldMatch,
    Or,
    Predicate,
    RangeMatch,
    is_separator_only,
)
from vetmatch.matching.seed_data import static_resources
from vetmatch.models import Resource

_COLUMNS = {
    "id": ResourceRow.id,
    "title": ResourceRow.title,
    "description": ResourceRow.description,
    "categories": ResourceRow.categories_json,
    "tags": ResourceRow.tags_json,
    "organization": ResourceRow.organization,
    "org_type": ResourceRow.org_type,
    "location": ResourceRow.location,
    "is_verified": ResourceRow.is_verified,
    "is_featured": ResourceRow.is_featured,
    "rating": ResourceRow.rating,
    "review_count": ResourceRow.review_count,
    "view_count": ResourceRow.view_count,
    "last_updated": ResourceRow.last_updated,
}


def _column(field: str):
    try:
        return _COLUMNS[field]
    except KeyError:
        raise ValueError(f"Unknown catalog field: {field}") from None


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _exact(field: str, value: Any):
    col = _column(field)
    if value is None:
        empty = "[]" if field in LIST_FIELDS else ""
        return or_(col.is_(None), col == empty)
    text = str(value).lower()
    if field in LIST_FIELDS:
        # One element equal to value: the JSON-encoded string appears in the list text.
        return func.lower(col).like(f"%{_escape_like(json.dumps(text, ensure_ascii=False))}%", escape="\\")
    return func.lower(col) == text


def compile_field_match(predicate: FieldMatch):
    col = _column(predicate.field)
    if predicate.field in BOOL_FIELDS:
        return col == bool(predicate.value)
    if predicate.mode == "in":
        values = tuple(predicate.value or ())
        if not values:
            return false()
        return or_(*(_exact(predicate.field, v) for v in values))
    if predicate.mode == "exact":
        return _exact(predicate.field, predicate.value)
    needle = str(predicate.value).lower()
    if predicate.field in LIST_FIELDS:
        if is_separator_only(needle):
            return false()
        # Match the element text as json.dumps wrote it, quotes and backslashes escaped.
        needle = json.dumps(needle, ensure_ascii=False)[1:-1]
    return func.lower(col).like(f"%{_escape_like(needle)}%", escape="\\")


def compile_predicate(predicate: Predicate | None):
    """SQLAlchemy boolean clause for a predicate tree, or None for no filter."""
    if predicate is None:
        return None
    if isinstance(predicate, And):
        return and_(*(compile_predicate(c) for c in predicate.clauses))
    if isinstance(predicate, Or):
        return or_(*(compile_predicate(c) for c in predicate.clauses))
    if isinstance(predicate, RangeMatch):
        col = _column(predicate.field)
        clauses = [col.is_not(None)]
        if predicate.gte is not None:
            clauses.append(col >= predicate.gte)
        if predicate.lte is not None:
            clauses.append(col <= predicate.lte)
        return and_(*clauses)
    if isinstance(predicate, FieldMatch):
        return compile_field_match(predicate)
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")


def _order_by(sort: SortSpec) -> list:
    order = []
    for field, descending in sort:
        col = _column(field)
        order.append(col.is_(None))  # nulls last
        if field in ("title", "organization", "location", "id"):
            col = func.lower(col)
        order.append(col.desc() if descending else col.asc())
    return order


def _load_json(text: str | None, default: Any) -> Any:
    if not text:
        return default
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return default


def row_to_resource(row: ResourceRow) -> Resource:
    return Resource.model_validate(
        {
            "id": row.id,
            "title": row.title or "",
            "description": row.description or "",
            "categories": _load_json(row.categories_json, []),
            "tags": _load_json(row.tags_json, []),
            "organization": row.organization or "",
            "org_type": row.org_type or "unknown",
            "location": row.location,
            "is_verified": bool(row.is_verified),
            "is_featured": bool(row.is_featured),
            "rating": row.rating or 0.0,
            "review_count": row.review_count or 0,
            "view_count": row.view_count or 0,
            "contact": _load_json(row.contact_json, None),
            "last_updated": row.last_updated,
        }
    )


def resource_to_row(resource: Resource) -> ResourceRow:
    return ResourceRow(
        id=resource.id,
        title=resource.title,
        description=resource.description,
        categories_json=json.dumps(resource.categories, ensure_ascii=False),
        tags_json=json.dumps(resource.tags, ensure_ascii=False),
        organization=resource.organization,
        org_type=resource.org_type,
        location=resource.location,
        is_verified=resource.is_verified,
        is_featured=resource.is_featured,
        rating=resource.rating,
        review_count=resource.review_count,
        view_count=resource.view_count,
        contact_json=resource.contact.model_dump_json() if resource.contact else None,
        last_updated=resource.last_updated,
    )


class SqlCatalog:
    """Catalog backed by the resources table. Store failures surface as CatalogError."""

    def __init__(self, session_factory=None) -> None:
        self._session_factory = session_factory

    def _session(self):
        SessionLocal = self._session_factory or get_session_factory()
        return SessionLocal()

    def find(
        self,
        predicate: Predicate | None,
        *,
        sort: SortSpec = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Resource]:
        stmt = select(ResourceRow)
        clause = compile_predicate(predicate)
        if clause is not None:
            stmt = stmt.where(clause)
        if sort:
            stmt = stmt.order_by(*_order_by(sort))
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            with self._session() as session:
                rows = session.scalars(stmt).all()
                return [row_to_resource(r) for r in rows]
        except SQLAlchemyError as e:
            raise CatalogError(f"Catalog query failed: {e}") from e

    def count(self, predicate: Predicate | None) -> int:
        stmt = select(func.count()).select_from(ResourceRow)
        clause = compile_predicate(predicate)
        if clause is not None:
            stmt = stmt.where(clause)
        try:
            with self._session() as session:
                return int(session.scalar(stmt) or 0)
        except SQLAlchemyError as e:
            raise CatalogError(f"Catalog count failed: {e}") from e


def add_resources(resources: Iterable[Resource], session_factory=None) -> int:
    """Insert or replace resources by id. Returns how many were written."""
    SessionLocal = session_factory or get_session_factory()
    written = 0
    with SessionLocal() as session:
        for resource in resources:
            session.merge(resource_to_row(resource))
            written += 1
        session.commit()
    return written


def seed_if_empty(session_factory=None) -> int:
    """Load the starter catalog into an empty store. Returns how many resources were added."""
    SessionLocal = session_factory or get_session_factory()
    with SessionLocal() as session:
        existing = session.scalar(select(func.count()).select_from(ResourceRow)) or 0
    if existing:
        return 0
    return add_resources(static_resources(), SessionLocal)
