"""
Turn a SearchRequest into a predicate tree plus the facts the scorer needs.
Never raises on odd input: unknown symptom keys become literal terms, unknown
resource types and locations of "all" are dropped.
"""

from dataclasses import dataclass

from vetmatch.matching.predicates import FieldMatch, Predicate, RangeMatch, all_of, any_of, text_search
from vetmatch.matching.taxonomy import category_labels, expand_symptoms
from vetmatch.models import OrgType, SearchRequest, Severity

FREE_TEXT_FIELDS = ("title", "description", "tags", "organization")
SYMPTOM_FIELDS = FREE_TEXT_FIELDS + ("categories",)

RESOURCE_TYPE_ALIASES: dict[str, OrgType] = {
    "institutional": "institutional",
    "va": "institutional",
    "federal": "institutional",
    "government": "institutional",
    "grassroots": "grassroots",
    "ngo": "grassroots",
    "nonprofit": "grassroots",
    "non-profit": "grassroots",
    "community": "grassroots",
    "regional": "regional",
    "state": "regional",
    "local": "regional",
}

_SEVERITY_ALIASES: dict[str, Severity] = {
    "low": "low",
    "mild": "low",
    "1": "low",
    "2": "low",
    "moderate": "moderate",
    "medium": "moderate",
    "3": "moderate",
    "high": "high",
    "severe": "high",
    "4": "high",
    "crisis": "crisis",
    "emergency": "crisis",
    "5": "crisis",
}


@dataclass(frozen=True)
class BuiltQuery:
    predicate: Predicate | None
    category_predicate: Predicate | None
    terms: tuple[str, ...]
    symptom_terms: tuple[str, ...]
    category: str | None
    category_labels: tuple[str, ...]
    location: str | None
    severity: Severity | None
    preferred_org_type: OrgType | None
    page: int
    page_size: int

    @property
    def has_category(self) -> bool:
        return self.category_predicate is not None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def match_terms(self) -> tuple[str, ...]:
        """Free-text terms and expanded symptom synonyms, de-duplicated."""
        return tuple(dict.fromkeys(self.terms + self.symptom_terms))


def severity_tier(value: str | None) -> Severity | None:
    if not value:
        return None
    return _SEVERITY_ALIASES.get(value.strip().lower())


def resolve_org_type(resource_type: str | None) -> OrgType | None:
    if not resource_type:
        return None
    return RESOURCE_TYPE_ALIASES.get(resource_type.strip().lower())


def preferred_org_type(severity: Severity | None) -> OrgType | None:
    """Crisis and high severity lean institutional; milder tiers lean grassroots."""
    if severity in ("crisis", "high"):
        return "institutional"
    if severity in ("low", "moderate"):
        return "grassroots"
    return None


def split_terms(query: str | None) -> tuple[str, ...]:
    if not query:
        return ()
    return tuple(dict.fromkeys(t.lower() for t in query.split() if t))


def _category_predicate(category: str | None) -> tuple[Predicate | None, tuple[str, ...]]:
    if not category or category.strip().lower() == "all":
        return None, ()
    labels = category_labels(category)
    key = category.strip()
    predicate = any_of(
        FieldMatch("categories", labels, "in"),
        FieldMatch("tags", labels, "in"),
        FieldMatch("categories", key, "contains"),
        FieldMatch("tags", key, "contains"),
    )
    return predicate, labels


def _location_predicate(location: str | None) -> Predicate | None:
    if not location or location.lower() == "all":
        return None
    if location.lower() == "national":
        return any_of(
            FieldMatch("location", "national", "exact"),
            FieldMatch("location", None, "exact"),
        )
    return FieldMatch("location", location, "exact")


def build_query(request: SearchRequest) -> BuiltQuery:
    terms = split_terms(request.query)
    text_group = all_of(*(text_search(t, FREE_TEXT_FIELDS) for t in terms))

    symptom_terms = expand_symptoms(request.symptoms)
    symptom_group = any_of(*(text_search(s, SYMPTOM_FIELDS) for s in symptom_terms))

    category_pred, labels = _category_predicate(request.category)
    location = request.location if request.location and request.location.lower() != "all" else None

    org_type = resolve_org_type(request.resource_type)
    type_pred = FieldMatch("org_type", org_type, "exact") if org_type else None
    rating_pred = RangeMatch("rating", gte=request.min_rating) if request.min_rating else None

    severity = severity_tier(request.severity)
    return BuiltQuery(
        predicate=all_of(
            text_group,
            symptom_group,
            category_pred,
            _location_predicate(location),
            type_pred,
            rating_pred,
        ),
        category_predicate=category_pred,
        terms=terms,
        symptom_terms=symptom_terms,
        category=request.category,
        category_labels=labels,
        location=location,
        severity=severity,
        preferred_org_type=org_type or preferred_org_type(severity),
        page=request.page,
        page_size=request.page_size,
    )
