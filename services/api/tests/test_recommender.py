"""
Three-track recommender: crisis pinning, catalog matches per track, static fallbacks.
"""

from vetmatch.matching.catalog import CatalogError, InMemoryCatalog
from vetmatch.matching.recommender import STATIC_RECOMMENDATIONS, Recommender
from vetmatch.matching.search import search_resources
from vetmatch.models import TRACKS, Recommendation, SearchRequest, TriageAnswers
from vetmatch.safety import is_crisis_line
from conftest import make_resource, sample_resources


class BrokenCatalog:
    def find(self, predicate, **kwargs):
        raise CatalogError("timeout")

    def count(self, predicate):
        raise CatalogError("timeout")


def _no_literal_ptsd_catalog():
    # Nothing mentions "ptsd"; Headstrong is tagged "Trauma".
    return InMemoryCatalog([r for r in sample_resources() if r.id != "va-mh"])


def test_ptsd_crisis_scenario():
    catalog = _no_literal_ptsd_catalog()
    search = search_resources(SearchRequest(symptoms=["ptsd"], severity="crisis"), catalog)
    assert [r.id for r in search.data] == ["headstrong"]
    assert not search.degraded

    outcome = Recommender(catalog).recommend("crisis", TriageAnswers(symptoms=["ptsd"]))
    recs = outcome.recommendations
    assert is_crisis_line(recs.institutional[0])
    assert "Headstrong Project" in [r.title for r in recs.grassroots]
    assert recs.grassroots[0].title == "Crisis Text Line"


def test_moderate_recommendations_from_catalog(catalog):
    outcome = Recommender(catalog).recommend("moderate", TriageAnswers(category="mental", symptoms=["anxiety"]))
    recs = outcome.recommendations
    assert [r.resource_id for r in recs.institutional] == ["va-mh"]
    assert [r.resource_id for r in recs.grassroots] == ["give-an-hour"]
    assert recs.regional
    for track in TRACKS:
        assert 1 <= len(recs.track(track)) <= 3
        assert all(r.track == track for r in recs.track(track))
        assert all(r.note for r in recs.track(track))
    assert recs.institutional[0].priority == "high"
    assert recs.institutional[0].url == "https://www.va.gov/mental-health/"


def test_recommendations_are_deterministic(catalog):
    recommender = Recommender(catalog)
    answers = TriageAnswers(category="mental")
    first = recommender.recommend("low", answers, seed="abc123").recommendations
    second = recommender.recommend("low", answers, seed="abc123").recommendations
    assert first == second
    assert recommender.recommend("low", answers).recommendations == recommender.recommend("low", answers).recommendations


def test_without_seed_each_track_keeps_top_scored_matches():
    strong = "Help with anxiety, depression and ptsd."
    weak = "Help with anxiety."
    resources = [
        make_resource(f"inst{i}", description=strong if i < 3 else weak, org_type="institutional", rating=4.0 - i * 0.1)
        for i in range(3)
    ] + [
        make_resource(f"inst{i}", description=weak, org_type="institutional", rating=4.9)
        for i in range(3, 6)
    ]
    recommender = Recommender(InMemoryCatalog(resources))
    answers = TriageAnswers(symptoms=["anxiety", "depression", "ptsd"])
    for severity in ("low", "moderate", "high"):
        recs = recommender.recommend(severity, answers).recommendations
        assert [r.resource_id for r in recs.institutional] == ["inst0", "inst1", "inst2"]


def test_regional_track_uses_location(catalog):
    outcome = Recommender(catalog).recommend("moderate", TriageAnswers(location="TX"))
    assert outcome.recommendations.regional[0].resource_id == "tx-vets"


def test_suggested_entries_are_merged_and_deduplicated(catalog):
    suggested = [
        Recommendation(track="grassroots", title="Give An Hour", url="https://giveanhour.org/", priority="medium"),
        Recommendation(track="regional", title="Texas Veterans Hotline", priority="high"),
    ]
    outcome = Recommender(catalog).recommend(
        "moderate", TriageAnswers(category="mental", symptoms=["anxiety"]), suggested=suggested
    )
    grassroots = [r.title for r in outcome.recommendations.grassroots]
    assert grassroots.count("Give An Hour") == 1
    assert [r.title for r in outcome.recommendations.regional] == ["Texas Veterans Hotline"]


def test_catalog_failure_falls_back_to_static(logger):
    outcome = Recommender(BrokenCatalog(), logger=logger).recommend("moderate", TriageAnswers(symptoms=["sleep"]))
    assert outcome.degraded
    assert [r.title for r in outcome.recommendations.institutional] == [
        r.title for r in STATIC_RECOMMENDATIONS.institutional
    ]
    assert "catalog_error" in logger.event_names()


def test_no_catalog_still_recommends():
    outcome = Recommender(None).recommend("high", TriageAnswers())
    assert all(outcome.recommendations.track(t) for t in TRACKS)


def test_crisis_without_catalog_is_the_static_bundle():
    recs = Recommender(None).recommend("crisis", TriageAnswers()).recommendations
    assert recs.institutional[0].title == "Veterans Crisis Line"
    assert [r.title for r in recs.regional] == ["911 Emergency Services", "Local Crisis Centers"]
