"""
Catalog adapter interface and the in-memory adapter.
The in-memory adapter is the reference interpretation of the predicate tree; the SQL
adapter in repo.py compiles the same tree to SQLAlchemy clauses.
"""

from typing import Any, Iterable, Protocol, Sequence

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
from vetmatch.models import Resource

# (field, descending) pairs, applied left to right. Nulls always sort last.
SortSpec = Sequence[tuple[str, bool]]

RECENT_FIRST: SortSpec = (("last_updated", True), ("rating", True))


class CatalogError(RuntimeError):
    """The catalog store could not be queried."""


class Catalog(Protocol):
    def find(
        self,
        predicate: Predicate | None,
        *,
        sort: SortSpec = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Resource]: ...

    def count(self, predicate: Predicate | None) -> int: ...


def _field_values(resource: Resource, field: str) -> list[Any]:
    value = getattr(resource, field, None)
    if field in LIST_FIELDS:
        return [v for v in (value or []) if v is not None]
    if value is None:
        return []
    return [value]


def _field_match(predicate: FieldMatch, resource: Resource) -> bool:
    values = _field_values(resource, predicate.field)
    if predicate.field in BOOL_FIELDS:
        return bool(values and values[0]) == bool(predicate.value)
    texts = [str(v).lower() for v in values]
    if predicate.mode == "exact" and predicate.value is None:
        return not any(texts)
    if predicate.mode == "in":
        wanted = {str(v).lower() for v in (predicate.value or ())}
        return any(t in wanted for t in texts)
    needle = str(predicate.value).lower()
    if predicate.mode == "exact":
        return any(t == needle for t in texts)
    if predicate.field in LIST_FIELDS and is_separator_only(needle):
        return False
    return any(needle in t for t in texts)


def matches(predicate: Predicate | None, resource: Resource) -> bool:
    """Evaluate a predicate tree against one resource. None matches everything."""
    if predicate is None:
        return True
    if isinstance(predicate, And):
        return all(matches(c, resource) for c in predicate.clauses)
    if isinstance(predicate, Or):
        return any(matches(c, resource) for c in predicate.clauses)
    if isinstance(predicate, RangeMatch):
        value = getattr(resource, predicate.field, None)
        if value is None:
            return False
        if predicate.gte is not None and value < predicate.gte:
            return False
        if predicate.lte is not None and value > predicate.lte:
            return False
        return True
    if isinstance(predicate, FieldMatch):
        return _field_match(predicate, resource)
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")


def _sort_value(resource: Resource, field: str) -> Any:
    value = getattr(resource, field, None)
    if isinstance(value, str):
        return value.lower()
    return value


def sort_resources(resources: Iterable[Resource], sort: SortSpec) -> list[Resource]:
    """Stable multi-key sort; applies keys right to left so the first key dominates."""
    items = list(resources)
    for field, descending in reversed(list(sort)):
        present = [r for r in items if _sort_value(r, field) is not None]
        missing = [r for r in items if _sort_value(r, field) is None]
        present.sort(key=lambda r: _sort_value(r, field), reverse=descending)
        items = present + missing
    return items


class InMemoryCatalog:
    """Catalog over a fixed list of resources. Read-only after construction."""

    def __init__(self, resources: Iterable[Resource]) -> None:
        self._resources: tuple[Resource, ...] = tuple(resources)

    def __len__(self) -> int:
        return len(self._resources)

    def find(
        self,
        predicate: Predicate | None,
        *,
        sort: SortSpec = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Resource]:
        hits = [r for r in self._resources if matches(predicate, r)]
        if sort:
            hits = sort_resources(hits, sort)
        end = None if limit is None else skip + limit
        return hits[skip:end]

    def count(self, predicate: Predicate | None) -> int:
        return sum(1 for r in self._resources if matches(predicate, r))
