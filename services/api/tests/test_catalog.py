"""
Catalog adapters: the in-memory interpreter and the SQL compiler must agree on every predicate.
SQL side runs on in-memory SQLite.
"""

import pytest
from sqlalchemy.orm import sessionmaker

from db import create_db_engine, init_db
from repo import SqlCatalog, add_resources, seed_if_empty
from vetmatch.matching.catalog import RECENT_FIRST, CatalogError, InMemoryCatalog, matches
from vetmatch.matching.predicates import FieldMatch, RangeMatch, all_of, any_of, text_search
from vetmatch.matching.query_builder import SYMPTOM_FIELDS
from vetmatch.matching.scorer import PREFETCH_ORDER
from vetmatch.matching.seed_data import STATIC_RESOURCES
from conftest import make_resource, sample_resources

PREDICATES = [
    text_search("ptsd", SYMPTOM_FIELDS),
    FieldMatch("tags", ("trauma",), "in"),
    FieldMatch("categories", "mental", "contains"),
    any_of(FieldMatch("location", "national", "exact"), FieldMatch("location", None, "exact")),
    RangeMatch("rating", gte=4.6),
    FieldMatch("is_featured", True, "exact"),
    all_of(FieldMatch("org_type", "grassroots", "exact"), FieldMatch("categories", ("Mental Health",), "in")),
    FieldMatch("title", "100%_sure", "contains"),
    FieldMatch("tags", 'ptsd", "depression', "contains"),
    FieldMatch("tags", ",", "contains"),
    FieldMatch("categories", "[", "contains"),
]


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def sql_catalog(session_factory):
    add_resources(sample_resources(), session_factory)
    return SqlCatalog(session_factory)


def _ids(resources):
    return sorted(r.id for r in resources)


@pytest.mark.parametrize("predicate", PREDICATES)
def test_sql_and_memory_adapters_agree(predicate, catalog, sql_catalog):
    assert _ids(sql_catalog.find(predicate)) == _ids(catalog.find(predicate))
    assert sql_catalog.count(predicate) == catalog.count(predicate)


def test_memory_expectations(catalog):
    assert _ids(catalog.find(FieldMatch("tags", ("trauma",), "in"))) == ["headstrong"]
    national_or_empty = PREDICATES[3]
    assert "untagged-clinic" in _ids(catalog.find(national_or_empty))
    assert "tx-vets" not in _ids(catalog.find(national_or_empty))
    assert catalog.count(None) == len(catalog)


def test_prefetch_order_matches(catalog, sql_catalog):
    memory = [r.id for r in catalog.find(None, sort=PREFETCH_ORDER)]
    sql = [r.id for r in sql_catalog.find(None, sort=PREFETCH_ORDER)]
    assert memory == sql
    assert memory[0] == "vcl"


def test_recent_first_and_paging(catalog, sql_catalog):
    assert catalog.find(None, sort=RECENT_FIRST, limit=1)[0].id == "untagged-clinic"
    assert sql_catalog.find(None, sort=RECENT_FIRST, limit=1)[0].id == "untagged-clinic"
    page = sql_catalog.find(None, sort=PREFETCH_ORDER, skip=2, limit=2)
    assert [r.id for r in page] == [r.id for r in catalog.find(None, sort=PREFETCH_ORDER, skip=2, limit=2)]


def test_sql_round_trip_keeps_lists_and_contact(sql_catalog):
    vcl = sql_catalog.find(FieldMatch("id", "vcl", "exact"))[0]
    assert vcl.categories == ["Crisis Services", "Mental Health"]
    assert vcl.contact.phone == "988"
    assert vcl.org_type == "institutional"
    assert vcl.is_featured is True


def test_sql_store_failure_raises_catalog_error():
    engine = create_db_engine("sqlite://")  # no tables created
    catalog = SqlCatalog(sessionmaker(bind=engine))
    with pytest.raises(CatalogError):
        catalog.find(None)
    with pytest.raises(CatalogError):
        catalog.count(None)


def test_seed_if_empty_only_seeds_once(session_factory):
    assert seed_if_empty(session_factory) == len(STATIC_RESOURCES)
    assert seed_if_empty(session_factory) == 0
    assert SqlCatalog(session_factory).count(None) == len(STATIC_RESOURCES)


def test_matches_none_and_missing_values():
    resource = make_resource("bare", title="", description="")
    assert matches(None, resource)
    assert not matches(FieldMatch("tags", "anything", "contains"), resource)
    assert matches(FieldMatch("location", None, "exact"), resource)
    assert not matches(FieldMatch("org_type", ("grassroots",), "in"), resource)


def test_list_punctuation_matches_element_text_only(session_factory):
    resources = [
        make_resource("quoted", tags=['Say "hello"', "Family, Friends"]),
        make_resource("plain", tags=["Family", "Friends"]),
    ]
    add_resources(resources, session_factory)
    sql_catalog = SqlCatalog(session_factory)
    memory = InMemoryCatalog(resources)
    cases = {
        "family, friends": ["quoted"],
        '"hello"': ["quoted"],
        'family", "friends': [],
        ", ": [],
    }
    for needle, expected in cases.items():
        predicate = FieldMatch("tags", needle, "contains")
        assert _ids(memory.find(predicate)) == expected, needle
        assert _ids(sql_catalog.find(predicate)) == expected, needle


def test_text_search_drops_bare_punctuation():
    assert text_search(",", SYMPTOM_FIELDS) is None
    assert text_search(" [] ", SYMPTOM_FIELDS) is None
    assert text_search("ptsd,", SYMPTOM_FIELDS) is not None
