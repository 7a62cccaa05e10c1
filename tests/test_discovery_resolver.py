"""Tests for partial (prefix / class code / name) discovery."""

import pytest
from sqlalchemy.exc import OperationalError

from conftest import FakeReferenceStore, run
from src.nsn_search.exceptions import CriticalStorageError
from src.nsn_search.models import PREFIX_TABLES, ReferenceTable
from src.nsn_search.schemas.search import SearchFilters
from src.nsn_search.services.discovery_resolver import PartialDiscoveryResolver
from src.nsn_search.services.normalizer import normalize_query


def _resolver(store, **kwargs):
    kwargs.setdefault("timeout_s", 0.5)
    return PartialDiscoveryResolver(store, **kwargs)


def _bulk_store(count, start=15000000):
    """count niins spread over three discovery tables with overlap."""
    niins = [f"{start + i:09d}" for i in range(count)]
    return niins, FakeReferenceStore({
        ReferenceTable.STOCK: [{"niin": n, "fsc": "5965", "item_name": f"PART {n}"} for n in niins[::2]],
        ReferenceTable.NAMES: [{"niin": n, "fsc": "5965", "item_name": f"PART {n}"} for n in niins[::3]],
        ReferenceTable.PRICES: [{"niin": n, "unit_price": "1.00"} for n in niins[1::2]],
    })


def test_prefix_queries_three_tables_concurrently(store):
    outcome = run(_resolver(store).resolve(normalize_query("0157263"), filters=None, page=1, page_size=10))

    assert sorted(store.tables_called("discover_niins")) == sorted(PREFIX_TABLES)
    assert store.peak_in_flight >= len(PREFIX_TABLES)
    assert [r.niin for r in outcome.results] == ["015726371", "015726372", "015726380", "015726399"]
    assert outcome.total == 4
    assert outcome.truncated is False


def test_enrichment_only_for_page_identifiers(store):
    run(_resolver(store).resolve(normalize_query("0157263"), filters=None, page=2, page_size=3))

    enriched = {tuple(kw["niins"]) for (m, _, kw) in store.calls if m == "fetch_by_niins"}
    assert enriched == {("015726399",)}


def test_four_digit_code_also_matches_fsc(store):
    outcome = run(_resolver(store).resolve(normalize_query("5340"), filters=None, page=1, page_size=10))

    assert [r.niin for r in outcome.results] == ["012345678"]
    fsc_calls = [kw for (m, t, kw) in store.calls if m == "discover_niins" and kw["fsc"] == "5340"]
    assert len(fsc_calls) == 2


def test_free_text_substring_matches_names(store):
    outcome = run(_resolver(store).resolve(normalize_query("headset"), filters=None, page=1, page_size=10))
    assert [r.niin for r in outcome.results] == ["015726371", "015726399"]


def test_free_text_prefix_mode(store):
    resolver = _resolver(store, free_text_mode="prefix")
    outcome = run(resolver.resolve(normalize_query("set"), filters=None, page=1, page_size=10))
    assert outcome.total == 0


def test_free_text_off_does_not_query_storage(store):
    outcome = run(_resolver(store, free_text_mode="off").resolve(
        normalize_query("headset"), filters=None, page=1, page_size=10,
    ))
    assert outcome.total == 0
    assert store.calls == []


def test_fsc_filter_is_pushed_down(store):
    outcome = run(_resolver(store).resolve(
        normalize_query("0157263"), filters=SearchFilters(fsc="5965"), page=1, page_size=10,
    ))

    discovered = store.tables_called("discover_niins")
    assert ReferenceTable.PRICES not in discovered
    assert all(kw["fsc"] == "5965" for (m, _, kw) in store.calls if m == "discover_niins")
    # 015726380 есть только в prices/fscs -> не кандидат
    assert [r.niin for r in outcome.results] == ["015726371", "015726372", "015726399"]


def test_total_is_counted_before_post_filters(store):
    outcome = run(_resolver(store).resolve(
        normalize_query("0157263"), filters=SearchFilters(class_ix=True), page=1, page_size=10,
    ))

    assert outcome.total == 4
    assert [r.niin for r in outcome.results] == ["015726371", "015726399"]


def test_price_filter_excludes_missing_and_malformed(store):
    outcome = run(_resolver(store).resolve(
        normalize_query("0157263"), filters=SearchFilters(min_price="10"), page=1, page_size=10,
    ))
    assert [r.niin for r in outcome.results] == ["015726371", "015726380"]


def test_no_candidates_short_circuits(store):
    outcome = run(_resolver(store).resolve(normalize_query("777"), filters=None, page=1, page_size=10))

    assert outcome.total == 0
    assert outcome.results == []
    assert store.tables_called("fetch_by_niins") == []


def test_partial_discovery_failure_is_tolerated(store):
    store.failures[ReferenceTable.PRICES] = OperationalError("select", {}, Exception("db down"))
    outcome = run(_resolver(store).resolve(normalize_query("0157263"), filters=None, page=1, page_size=10))
    assert [r.niin for r in outcome.results] == ["015726371", "015726372", "015726399"]


def test_all_discovery_failures_are_critical(store):
    for table in PREFIX_TABLES:
        store.failures[table] = OperationalError("select", {}, Exception("db down"))
    with pytest.raises(CriticalStorageError):
        run(_resolver(store).resolve(normalize_query("0157263"), filters=None, page=1, page_size=10))


def test_enrichment_failure_leaves_fragment_empty(store):
    store.failures[ReferenceTable.AACS] = OperationalError("select", {}, Exception("db down"))
    outcome = run(_resolver(store).resolve(normalize_query("0157263"), filters=None, page=1, page_size=10))
    assert outcome.total == 4
    assert all(r.aac == "" and r.class_ix is False for r in outcome.results)


def test_optional_fragments_can_be_skipped(store):
    resolver = _resolver(store, enrich_optional_fragments=False)
    outcome = run(resolver.resolve(normalize_query("0157263"), filters=None, page=1, page_size=10))

    enriched = set(store.tables_called("fetch_by_niins"))
    assert ReferenceTable.WEIGHTS not in enriched
    assert ReferenceTable.DESCRIPTIONS not in enriched
    assert outcome.results[0].weight is None
    assert outcome.results[0].unit_price == "125.50"


def test_discovery_limit_truncates_to_exact_prefix_of_union():
    niins, store = _bulk_store(50)
    resolver = _resolver(store, discovery_page_multiple=2)

    outcome = run(resolver.resolve(normalize_query("015"), filters=None, page=1, page_size=10))

    assert resolver.discovery_limit(10) == 20
    assert outcome.total == 20
    assert outcome.truncated is True
    assert [r.niin for r in outcome.results] == niins[:10]


def test_discovery_limit_respects_max_rows():
    resolver = _resolver(FakeReferenceStore(), discovery_page_multiple=100, discovery_max_rows=300)
    assert resolver.discovery_limit(50) == 300
    assert resolver.discovery_limit(1) == 100


def test_pages_concatenate_to_sorted_candidate_set():
    niins, store = _bulk_store(47)
    resolver = _resolver(store)
    page_size = 10

    first = run(resolver.resolve(normalize_query("015"), filters=None, page=1, page_size=page_size))
    total_pages = -(-first.total // page_size)

    collected = []
    for page in range(1, total_pages + 1):
        outcome = run(resolver.resolve(normalize_query("015"), filters=None, page=page, page_size=page_size))
        collected.extend(r.niin for r in outcome.results)

    assert first.total == 47
    assert total_pages == 5
    assert collected == sorted(niins)
    assert len(set(collected)) == len(collected)
