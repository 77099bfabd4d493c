"""
Predicate tree over catalog fields. Built by the query builder, interpreted by a catalog
adapter (in-memory or SQL); nothing here knows about a particular query language.
"""

from dataclasses import dataclass
from typing import Literal, Union

MatchMode = Literal["contains", "exact", "in"]

TEXT_FIELDS = frozenset({"id", "title", "description", "organization", "org_type", "location"})
LIST_FIELDS = frozenset({"tags", "categories"})
NUMERIC_FIELDS = frozenset({"rating", "review_count", "view_count"})
BOOL_FIELDS = frozenset({"is_verified", "is_featured"})

# Punctuation the SQL adapter stores between list elements.
_LIST_SEPARATORS = " ,[]"


def is_separator_only(term: object) -> bool:
    """True for a term with nothing to match inside a list element (blank, commas, brackets)."""
    return not str(term).strip(_LIST_SEPARATORS)


@dataclass(frozen=True)
class FieldMatch:
    """
    Case-insensitive match on one field.
    contains: substring of the field (any element for list fields).
    exact: equality (any element for list fields); value None matches null or empty.
    in: equality against any of a tuple of values.
    """

    field: str
    value: str | bool | None | tuple[str, ...]
    mode: MatchMode = "contains"


@dataclass(frozen=True)
class RangeMatch:
    field: str
    gte: float | None = None
    lte: float | None = None


@dataclass(frozen=True)
class And:
    clauses: tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    clauses: tuple["Predicate", ...]


Predicate = Union[And, Or, FieldMatch, RangeMatch]


def all_of(*clauses: Predicate | None) -> Predicate | None:
    """AND of the non-empty clauses; None when nothing is left, the clause itself when only one."""
    kept = tuple(c for c in clauses if c is not None)
    if not kept:
        return None
    if len(kept) == 1:
        return kept[0]
    return And(kept)


def any_of(*clauses: Predicate | None) -> Predicate | None:
    """OR of the non-empty clauses; None when nothing is left, the clause itself when only one."""
    kept = tuple(c for c in clauses if c is not None)
    if not kept:
        return None
    if len(kept) == 1:
        return kept[0]
    return Or(kept)


def text_search(term: str, fields: tuple[str, ...]) -> Predicate | None:
    """Substring match of one term across several fields. Bare punctuation terms are dropped."""
    if is_separator_only(term):
        return None
    return any_of(*(FieldMatch(f, term, "contains") for f in fields))
