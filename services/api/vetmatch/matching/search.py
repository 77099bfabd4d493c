"""
Direct resource search: build query -> cascade + rank -> paginate -> compose -> enrich tags.
"""

import math

from vetmatch.config import CANDIDATE_BUDGET
from vetmatch.logging_structured import StructuredLogger
from vetmatch.matching.catalog import Catalog
from vetmatch.matching.composer import compose, embedded_timestamp
from vetmatch.matching.query_builder import build_query
from vetmatch.matching.scorer import run_cascade
from vetmatch.matching.taxonomy import enrich_tags
from vetmatch.models import Pagination, SearchRequest, SearchResponse


def search_resources(
    request: SearchRequest,
    catalog: Catalog,
    *,
    logger: StructuredLogger | None = None,
) -> SearchResponse:
    """
    Run one search. A relaxed cascade is a successful, degraded response.
    Raises CatalogError when the store itself fails; there is no catalog fallback.
    """
    built = build_query(request)
    # Ranking happens inside the prefetch window, which always reaches the requested page.
    window = max(CANDIDATE_BUDGET, built.skip + built.page_size)
    outcome = run_cascade(built, catalog, budget=window, logger=logger)

    ranked = outcome.resources
    total = len(ranked)
    if outcome.level != "unfiltered" and total >= window:
        total = catalog.count(outcome.predicate)
    page_items = ranked[built.skip : built.skip + built.page_size]
    if request.seed:
        page_items = compose(
            page_items,
            request.seed,
            symptoms=request.symptoms,
            timestamp_ms=embedded_timestamp(request.seed),
        )

    return SearchResponse(
        degraded=outcome.degraded,
        level=outcome.level,
        relaxed_levels=outcome.relaxed_levels,
        data=[enrich_tags(r) for r in page_items],
        pagination=Pagination(
            page=built.page,
            page_size=built.page_size,
            total_items=total,
            total_pages=math.ceil(total / built.page_size) if total else 0,
        ),
    )
