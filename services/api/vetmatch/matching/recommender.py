"""
Three-track recommendations (institutional / grassroots / regional).

Each track runs the query builder -> cascade pipeline with the track as the org-type filter.
Collaborator-suggested entries are merged in, the whole list goes through the composer
(seeded by the caller's seed; without one the scored order is kept), then it is split back into tracks.
Crisis severity pins the static crisis lines to the head of every track.
"""

from dataclasses import dataclass

from vetmatch.config import RECOMMENDATIONS_PER_TRACK
from vetmatch.logging_structured import NullLogger, StructuredLogger
from vetmatch.matching.catalog import Catalog, CatalogError
from vetmatch.matching.composer import BucketTarget, bucket_of, compose, embedded_timestamp
from vetmatch.matching.query_builder import build_query
from vetmatch.matching.scorer import ScoredResource, run_cascade
from vetmatch.models import (
    TRACKS,
    Recommendation,
    RecommendationSet,
    SearchRequest,
    Severity,
    Track,
    TriageAnswers,
)
from vetmatch.safety.crisis_bundle import crisis_recommendations

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

# Used when the catalog is unavailable or a track comes back empty.
STATIC_RECOMMENDATIONS = RecommendationSet(
    institutional=[
        Recommendation(
            track="institutional",
            title="VA Health Benefits",
            description="Apply for VA healthcare coverage.",
            url="https://www.va.gov/health-care/apply/application/introduction",
            priority="high",
            note="Start here if you are not enrolled",
        ),
        Recommendation(
            track="institutional",
            title="VA Mental Health Services",
            description="Counseling, therapy, and support.",
            url="https://www.va.gov/health-care/health-needs-conditions/mental-health/",
            priority="medium",
            note="General veteran support resource",
        ),
        Recommendation(
            track="institutional",
            title="My HealtheVet",
            description="Manage your VA health records online.",
            url="https://www.myhealth.va.gov/",
            priority="medium",
            note="General veteran support resource",
        ),
    ],
    grassroots=[
        Recommendation(
            track="grassroots",
            title="Wounded Warrior Project",
            description="Programs for post-9/11 veterans.",
            url="https://www.woundedwarriorproject.org/",
            phone="1-888-997-2586",
            priority="high",
            note="General veteran support resource",
        ),
        Recommendation(
            track="grassroots",
            title="Give An Hour",
            description="Free mental health services.",
            url="https://giveanhour.org/",
            priority="medium",
            note="General veteran support resource",
        ),
        Recommendation(
            track="grassroots",
            title="Cohen Veterans Network",
            description="Nationwide mental health clinics.",
            url="https://www.cohenveteransnetwork.org/",
            phone="1-888-523-6936",
            priority="medium",
            note="General veteran support resource",
        ),
    ],
    regional=[
        Recommendation(
            track="regional",
            title="State Veterans Affairs Office",
            description="Find your state VA office for local benefits.",
            url="https://www.va.gov/statedva.htm",
            priority="high",
            note="General veteran support resource",
        ),
        Recommendation(
            track="regional",
            title="State Health Programs",
            description="State-specific health programs for veterans.",
            url="https://www.benefits.gov/categories/Health",
            priority="medium",
            note="General veteran support resource",
        ),
    ],
)


@dataclass
class RecommendationOutcome:
    recommendations: RecommendationSet
    degraded: bool = False


def _priority(scored: ScoredResource, index: int, degraded: bool) -> str:
    if degraded:
        return "medium" if index == 0 else "low"
    if index == 0 or scored.score >= 6:
        return "high"
    if scored.score >= 3:
        return "medium"
    return "low"


def _note(scored: ScoredResource, degraded: bool) -> str:
    parts = []
    if scored.matched_terms:
        parts.append("Matches " + ", ".join(scored.matched_terms[:3]))
    if scored.matched_categories:
        parts.append("Covers " + ", ".join(scored.matched_categories[:2]))
    if scored.resource.is_verified:
        parts.append("Verified resource")
    if degraded:
        parts.append("Broadened match")
    return "; ".join(parts) or "General veteran support resource"


def to_recommendation(scored: ScoredResource, track: Track, index: int, degraded: bool) -> Recommendation:
    r = scored.resource
    contact = r.contact
    return Recommendation(
        track=track,
        title=r.title or r.organization or r.id,
        description=r.description,
        url=(contact.url if contact else None) or "",
        phone=contact.phone if contact else None,
        priority=_priority(scored, index, degraded),
        note=_note(scored, degraded),
        resource_id=r.id,
    )


def _dedupe(recs: list[Recommendation]) -> list[Recommendation]:
    seen: set[tuple[str, str]] = set()
    out = []
    for rec in recs:
        key = (rec.track, rec.title.strip().lower())
        if key in seen:
            continue
        seen.add(key)
        out.append(rec)
    return out


class Recommender:
    def __init__(
        self,
        catalog: Catalog | None,
        *,
        logger: StructuredLogger | None = None,
        per_track: int = RECOMMENDATIONS_PER_TRACK,
    ) -> None:
        self.catalog = catalog
        self.logger = logger or NullLogger()
        self.per_track = per_track

    def _track_candidates(
        self, track: Track, severity: Severity, answers: TriageAnswers
    ) -> tuple[list[Recommendation], bool]:
        request = SearchRequest(
            category=answers.category,
            symptoms=answers.symptoms,
            severity=severity,
            location=answers.location if track == "regional" else None,
            resource_type=track,
        )
        outcome = run_cascade(build_query(request), self.catalog, logger=self.logger)
        # Relaxed levels drop the org-type filter, so keep only this track's bucket.
        in_track = [s for s in outcome.results if bucket_of(s.resource) == track][: self.per_track * 2]
        recs = [to_recommendation(s, track, i, outcome.degraded) for i, s in enumerate(in_track)]
        return recs, outcome.degraded

    def _catalog_candidates(self, severity: Severity, answers: TriageAnswers) -> tuple[list[Recommendation], bool]:
        if self.catalog is None:
            return [], True
        recs: list[Recommendation] = []
        degraded = False
        try:
            for track in TRACKS:
                track_recs, track_degraded = self._track_candidates(track, severity, answers)
                recs.extend(track_recs)
                degraded = degraded or track_degraded
        except CatalogError as e:
            self.logger.log_catalog_error(operation="recommend", error=str(e))
            return [], True
        return recs, degraded

    def recommend(
        self,
        severity: Severity,
        answers: TriageAnswers,
        *,
        seed: str | None = None,
        suggested: list[Recommendation] | None = None,
    ) -> RecommendationOutcome:
        catalog_recs, degraded = self._catalog_candidates(severity, answers)

        if severity == "crisis":
            pinned = crisis_recommendations()
            extra = _dedupe([*pinned.all(), *catalog_recs])[len(pinned.all()) :]
            for track in TRACKS:
                pinned.track(track).extend([r for r in extra if r.track == track][: self.per_track])
            return RecommendationOutcome(pinned, degraded)

        combined = _dedupe([*(suggested or []), *catalog_recs])
        # Without a seed the scored order is kept.
        composed = compose(
            combined,
            seed,
            symptoms=answers.symptoms,
            timestamp_ms=embedded_timestamp(seed) if seed else 0,
            targets=tuple(BucketTarget(t, minimum=self.per_track) for t in ("grassroots", "institutional", "regional")),
            key=lambda rec: rec.track,
        )

        result = RecommendationSet()
        for track in TRACKS:
            in_track = [r for r in composed if r.track == track][: self.per_track]
            if not in_track:
                in_track = STATIC_RECOMMENDATIONS.model_copy(deep=True).track(track)[: self.per_track]
            in_track.sort(key=lambda r: _PRIORITY_ORDER.get(r.priority, 1))
            result.track(track).extend(in_track)
        return RecommendationOutcome(result, degraded)
