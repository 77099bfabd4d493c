"""
Relevance scoring and the fallback cascade.
Scores only order results; filtering is the predicate's job. The cascade relaxes the
query in a fixed order (full -> category-only -> unfiltered sample), each level at most once.
"""

from dataclasses import dataclass, field

from vetmatch.config import CANDIDATE_BUDGET, UNFILTERED_SAMPLE_SIZE
from vetmatch.logging_structured import NullLogger, StructuredLogger
from vetmatch.matching.catalog import RECENT_FIRST, Catalog, SortSpec
from vetmatch.matching.composer import bucket_of
from vetmatch.matching.predicates import Predicate
from vetmatch.matching.query_builder import BuiltQuery
from vetmatch.models import Resource

CASCADE_LEVELS = ("full", "category", "unfiltered")

TERM_WEIGHT = 2
CATEGORY_WEIGHT = 3
ORG_TYPE_WEIGHT = 2
LOCATION_WEIGHT = 2

# Deterministic prefetch order so the candidate budget always cuts the same rows.
PREFETCH_ORDER: SortSpec = (("is_featured", True), ("rating", True), ("last_updated", True), ("id", False))


@dataclass(frozen=True)
class ScoredResource:
    resource: Resource
    score: int
    matched_terms: tuple[str, ...] = ()
    matched_categories: tuple[str, ...] = ()


@dataclass
class SearchOutcome:
    results: list[ScoredResource]
    level: str = "full"
    relaxed_levels: list[str] = field(default_factory=list)
    # Filter of the level that produced the results; None for the unfiltered sample.
    predicate: Predicate | None = None

    @property
    def degraded(self) -> bool:
        return self.level != "full"

    @property
    def resources(self) -> list[Resource]:
        return [s.resource for s in self.results]


def _location_matches(resource: Resource, location: str) -> bool:
    value = (resource.location or "").lower()
    if location.lower() == "national":
        return value in ("", "national")
    return value == location.lower()


def score_resource(resource: Resource, built: BuiltQuery) -> ScoredResource:
    text = f"{resource.title} {resource.description}".lower()
    matched_terms = tuple(t for t in built.match_terms if t in text)

    labels = {label.lower() for label in built.category_labels}
    key = (built.category or "").strip().lower()
    matched_categories = tuple(
        c for c in resource.categories if c.lower() in labels or (key and key in c.lower())
    )

    score = TERM_WEIGHT * len(matched_terms) + CATEGORY_WEIGHT * len(matched_categories)
    if built.preferred_org_type and bucket_of(resource) == built.preferred_org_type:
        score += ORG_TYPE_WEIGHT
    if built.location and _location_matches(resource, built.location):
        score += LOCATION_WEIGHT
    return ScoredResource(resource, score, matched_terms, matched_categories)


def _rank_key(scored: ScoredResource) -> tuple:
    r = scored.resource
    updated = r.last_updated.timestamp() if r.last_updated else float("-inf")
    return (-scored.score, not r.is_featured, -r.rating, -updated)


def rank(resources: list[Resource], built: BuiltQuery) -> list[ScoredResource]:
    """Score and order: score desc, then featured, rating desc, last updated desc."""
    return sorted((score_resource(r, built) for r in resources), key=_rank_key)


def run_cascade(
    built: BuiltQuery,
    catalog: Catalog,
    *,
    budget: int = CANDIDATE_BUDGET,
    sample_size: int = UNFILTERED_SAMPLE_SIZE,
    logger: StructuredLogger | None = None,
) -> SearchOutcome:
    """
    Execute the full query; when it is empty relax to category-only (if a category was given),
    then to an unfiltered most-recently-updated sample. Relaxation is reported, not raised.
    CatalogError from the adapter propagates to the caller.
    """
    logger = logger or NullLogger()
    relaxed: list[str] = []
    level = "full"
    predicate = built.predicate
    hits = catalog.find(predicate, sort=PREFETCH_ORDER, limit=budget)

    if not hits and built.predicate is not None:
        relaxed.append("full")
        if built.has_category:
            level = "category"
            predicate = built.category_predicate
            hits = catalog.find(predicate, sort=PREFETCH_ORDER, limit=budget)
            if not hits:
                relaxed.append("category")
        if not hits:
            level = "unfiltered"
            predicate = None
            hits = catalog.find(None, sort=RECENT_FIRST, limit=sample_size)
        logger.log_search_degraded(level=level, relaxed_levels=relaxed, category=built.category)

    return SearchOutcome(results=rank(hits, built), level=level, relaxed_levels=relaxed, predicate=predicate)
