"""
Query builder: predicate shape, symptom expansion, lenient request parsing.
"""

from vetmatch.matching.predicates import And, FieldMatch, Or, RangeMatch
from vetmatch.matching.query_builder import (
    build_query,
    preferred_org_type,
    resolve_org_type,
    severity_tier,
    split_terms,
)
from vetmatch.models import SearchRequest


def test_empty_request_has_no_predicate():
    built = build_query(SearchRequest())
    assert built.predicate is None
    assert built.category_predicate is None
    assert built.page == 1
    assert built.page_size == 30


def test_free_text_terms_are_anded_each_over_text_fields():
    built = build_query(SearchRequest(query="Crisis  LINE"))
    assert built.terms == ("crisis", "line")
    assert isinstance(built.predicate, And)
    first = built.predicate.clauses[0]
    assert isinstance(first, Or)
    assert {c.field for c in first.clauses} == {"title", "description", "tags", "organization"}
    assert all(c.mode == "contains" and c.value == "crisis" for c in first.clauses)


def test_symptoms_expand_through_taxonomy():
    built = build_query(SearchRequest(symptoms=["ptsd"]))
    assert "trauma" in built.symptom_terms
    fields = {c.field for group in built.predicate.clauses for c in group.clauses}
    assert "categories" in fields


def test_unknown_symptom_is_a_literal_term():
    built = build_query(SearchRequest(symptoms=["Ringing Ears"]))
    assert built.symptom_terms == ("ringing ears",)
    assert isinstance(built.predicate, Or)


def test_category_predicate_matches_labels_and_key():
    built = build_query(SearchRequest(category="mental"))
    assert built.has_category
    assert "Mental Health" in built.category_labels
    modes = {(c.field, c.mode) for c in built.category_predicate.clauses}
    assert ("categories", "in") in modes
    assert ("tags", "contains") in modes


def test_category_all_is_no_filter():
    assert build_query(SearchRequest(category="all")).predicate is None


def test_national_location_matches_national_or_empty():
    built = build_query(SearchRequest(location="national"))
    assert built.predicate == Or(
        (FieldMatch("location", "national", "exact"), FieldMatch("location", None, "exact"))
    )


def test_region_location_is_exact():
    built = build_query(SearchRequest(location="TX"))
    assert built.predicate == FieldMatch("location", "TX", "exact")


def test_resource_type_alias_filters_and_sets_preference():
    built = build_query(SearchRequest(resource_type="NGO", severity="crisis"))
    assert built.predicate == FieldMatch("org_type", "grassroots", "exact")
    assert built.preferred_org_type == "grassroots"


def test_unknown_resource_type_is_dropped():
    assert build_query(SearchRequest(resource_type="spaceship")).predicate is None


def test_min_rating_is_a_range():
    built = build_query(SearchRequest(min_rating=4.5))
    assert built.predicate == RangeMatch("rating", gte=4.5)


def test_severity_helpers():
    assert severity_tier("Severe") == "high"
    assert severity_tier("5") == "crisis"
    assert severity_tier("whatever") is None
    assert preferred_org_type("crisis") == "institutional"
    assert preferred_org_type("low") == "grassroots"
    assert preferred_org_type(None) is None
    assert resolve_org_type("federal") == "institutional"
    assert resolve_org_type("all") is None


def test_split_terms_dedupes():
    assert split_terms("sleep Sleep  help") == ("sleep", "help")
    assert split_terms(None) == ()


def test_from_raw_never_raises_on_bad_input():
    request = SearchRequest.from_raw(
        {"page": "abc", "pageSize": 1000, "symptoms": "ptsd, sleep", "minRating": "x", "query": 42}
    )
    assert request.page == 1
    assert request.page_size == 100
    assert request.symptoms == ["ptsd", "sleep"]
    assert request.min_rating is None
    assert request.query == "42"


def test_from_raw_non_dict_is_empty_request():
    request = SearchRequest.from_raw(["not", "a", "dict"])
    assert request == SearchRequest()
    assert SearchRequest.from_raw({"pageSize": 0, "page": -3}).page_size == 30
