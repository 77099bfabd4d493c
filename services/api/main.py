import json
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from db import init_db
from repo import SqlCatalog, seed_if_empty
from vetmatch.config import CATALOG_SEED_ON_EMPTY
from vetmatch.llm.client import TextGenerator, generate_text
from vetmatch.logging_structured import StructuredLogger, generate_request_id
from vetmatch.matching.catalog import Catalog, CatalogError
from vetmatch.matching.query_builder import severity_tier
from vetmatch.matching.recommender import Recommender
from vetmatch.matching.search import search_resources
from vetmatch.models import (
    RecommendResponse,
    SearchErrorResponse,
    SearchRequest,
    SearchResponse,
    TriageAnswers,
    TriageRequest,
    TriageResponse,
)
from vetmatch.triage.state_machine import TriageEngine


async def _read_json(request: Request) -> Any:
    """Request body as JSON, or None when it is missing or not JSON."""
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except (UnicodeDecodeError, ValueError):
        return None


def create_app(
    *,
    catalog: Catalog | None = None,
    generate: TextGenerator | None = generate_text,
    logger: StructuredLogger | None = None,
) -> FastAPI:
    """
    Build the API. With no catalog given, the SQL catalog is used and its tables are
    created (and seeded when empty) at startup.
    """
    logger = logger or StructuredLogger()
    use_sql = catalog is None
    catalog = catalog if catalog is not None else SqlCatalog()
    recommender = Recommender(catalog, logger=logger)
    engine = TriageEngine(generate=generate, recommender=recommender, logger=logger)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if use_sql:
            init_db()
            if CATALOG_SEED_ON_EMPTY:
                seeded = seed_if_empty()
                if seeded:
                    logger.emit("catalog_seeded", count=seeded)
        yield

    app = FastAPI(title="VetMatch API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics() -> dict:
        """Basic counters as JSON (no Prometheus)."""
        return logger.get_metrics()

    @app.post("/resources/search", response_model=SearchResponse)
    async def resources_search(request: Request):
        request_id = generate_request_id()
        start = time.perf_counter()
        search = SearchRequest.from_raw(await _read_json(request))
        try:
            response = await run_in_threadpool(search_resources, search, catalog, logger=logger)
        except CatalogError as e:
            logger.log_catalog_error(operation="search", error=str(e))
            logger.log_request(
                request_id=request_id,
                endpoint="/resources/search",
                latency_ms=(time.perf_counter() - start) * 1000,
                result_count=0,
            )
            error = SearchErrorResponse(message="Resource catalog is unavailable. Please try again later.", error=str(e))
            return JSONResponse(status_code=503, content=error.model_dump(by_alias=True))

        logger.log_request(
            request_id=request_id,
            endpoint="/resources/search",
            latency_ms=(time.perf_counter() - start) * 1000,
            degraded=response.degraded,
            result_count=len(response.data),
        )
        return response

    @app.post("/resources/recommend", response_model=RecommendResponse)
    async def resources_recommend(request: Request) -> RecommendResponse:
        request_id = generate_request_id()
        start = time.perf_counter()
        search = SearchRequest.from_raw(await _read_json(request))
        severity = severity_tier(search.severity) or "moderate"
        answers = TriageAnswers(category=search.category, symptoms=search.symptoms, location=search.location)
        outcome = await run_in_threadpool(recommender.recommend, severity, answers, seed=search.seed)
        logger.log_request(
            request_id=request_id,
            endpoint="/resources/recommend",
            latency_ms=(time.perf_counter() - start) * 1000,
            severity=severity,
            degraded=outcome.degraded,
            result_count=len(outcome.recommendations.all()),
        )
        return RecommendResponse(severity=severity, degraded=outcome.degraded, recommendations=outcome.recommendations)

    @app.post("/triage", response_model=TriageResponse, response_model_exclude_none=True)
    async def triage(request: Request) -> TriageResponse:
        request_id = generate_request_id()
        start = time.perf_counter()
        turn = TriageRequest.from_raw(await _read_json(request))
        response = await run_in_threadpool(engine.handle_turn, turn)
        logger.log_request(
            request_id=request_id,
            endpoint="/triage",
            latency_ms=(time.perf_counter() - start) * 1000,
            step=turn.step,
            severity=response.severity,
        )
        return response

    app.state.logger = logger
    app.state.catalog = catalog
    app.state.engine = engine
    return app


app = create_app()
