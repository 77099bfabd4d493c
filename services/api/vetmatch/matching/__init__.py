from vetmatch.matching.catalog import Catalog, CatalogError, InMemoryCatalog
from vetmatch.matching.composer import compose, seeded_shuffle
from vetmatch.matching.query_builder import build_query
from vetmatch.matching.recommender import RecommendationOutcome, Recommender
from vetmatch.matching.scorer import run_cascade
from vetmatch.matching.search import search_resources

__all__ = [
    "Catalog",
    "CatalogError",
    "InMemoryCatalog",
    "build_query",
    "run_cascade",
    "compose",
    "seeded_shuffle",
    "search_resources",
    "Recommender",
    "RecommendationOutcome",
]
