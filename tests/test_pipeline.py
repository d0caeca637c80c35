"""
Integration tests for the ingestion pass.

Sources are in-memory JobSource subclasses; the store is a temporary SQLite
file and the registries are the tiny fixtures from conftest.
"""

from datetime import datetime, timezone

import pytest

from jobboard.ai_scorer import AIUnavailable
from jobboard.pipeline import (
    PassInProgressError,
    RegistryCache,
    dedupe,
    enrich,
    pass_lock,
    process_source,
    run_pass,
)
from jobboard.registry import RegistrySnapshot
from jobboard.relevance import RelevancePolicy
from jobboard.sources.base import JobSource


class ListSource(JobSource):
    name = "Fake"
    key = "fake"

    def __init__(self, postings, name="Fake"):
        super().__init__(sleep=lambda _s: None)
        self.postings = postings
        self.name = name

    def _fetch(self, _query):
        return list(self.postings)


class BrokenSource(JobSource):
    name = "Broken"
    key = "broken"

    def _fetch(self, _query):
        raise AssertionError("unreachable")

    def fetch(self):
        raise RuntimeError("boom")


@pytest.fixture
def lock_path(tmp_path):
    return tmp_path / "ingest.lock"


@pytest.fixture
def good_postings(make_raw):
    return [
        make_raw(native_id="1", salary="£50,000"),
        make_raw(native_id="2", title="ESG Analyst", company="Unknown Co"),
        # Irrelevant: removed by the pre-filter, not counted as a gate drop.
        make_raw(native_id="3", title="Warehouse Operative", description="Pick and pack orders", company="Depot"),
        # Relevant by a weak title term but scores below the quality gate.
        make_raw(native_id="4", title="Charity Shop Assistant", description="Serve customers.",
                 company="Local Shop", location="Leeds"),
    ]


def test_enrich_sets_registry_flags(registries, make_raw):
    enriched = enrich(make_raw(), registries)
    assert enriched.verified_sponsor is True
    assert enriched.sponsor_rating == "A"
    assert enriched.is_bcorp is True
    assert enriched.is_golden
    assert enriched.role_priority == 100


def test_enrich_unknown_company(registries, make_raw):
    enriched = enrich(make_raw(company="Nobody Ltd"), registries)
    assert not enriched.verified_sponsor
    assert enriched.sponsor_rating is None
    assert not enriched.is_bcorp


def test_dedupe_keeps_first(make_raw):
    a, b = make_raw(native_id="1", title="First"), make_raw(native_id="1", title="Second")
    assert [p.title for p in dedupe([a, b, make_raw(native_id="2")])] == ["First", "Sustainability Consultant"]


def test_process_source_filters_and_gates(registries, good_postings):
    kept, dropped = process_source(ListSource(good_postings), good_postings, registries, profile={})
    assert [p.id for p in kept] == ["reed-1", "reed-2"]
    assert dropped == 1


def test_quality_gate_follows_profile(registries, good_postings):
    kept, dropped = process_source(
        ListSource(good_postings), good_postings, registries, profile={"quality": {"min_score": 1000}},
    )
    assert kept == []
    assert dropped == 3


def test_strict_source_policy_applies(registries, make_raw):
    source = ListSource([])
    source.policy = RelevancePolicy.STRICT
    charity = [make_raw(title="Charity Fundraiser", description="Raise money")]
    kept, dropped = process_source(source, charity, registries, profile={})
    assert kept == [] and dropped == 0


def test_run_pass_stores_and_logs(store, registries, good_postings, lock_path):
    result = run_pass([ListSource(good_postings)], registries, store, lock_path=lock_path)
    assert result.total == 2
    assert result.per_source == {"Fake": 2}
    assert result.dropped == 1
    assert result.verified == 1
    assert result.errors == {}

    stats = store.stats()
    assert stats["total"] == 2
    assert stats["last_fetch"]["status"] == "success"
    assert stats["last_fetch"]["job_count"] == 2


def test_failing_source_is_isolated(store, registries, good_postings, lock_path):
    sources = [ListSource(good_postings), BrokenSource()]
    result = run_pass(sources, registries, store, lock_path=lock_path)
    assert result.per_source == {"Fake": 2, "Broken": 0}
    assert result.errors == {"Broken": "boom"}
    assert store.stats()["total"] == 2
    assert store.stats()["last_fetch"]["status"] == "error: boom"


def test_repeat_pass_keeps_user_status(store, registries, good_postings, lock_path):
    run_pass([ListSource(good_postings)], registries, store, lock_path=lock_path)
    store.update_status("reed-1", "applied")
    run_pass([ListSource(good_postings)], registries, store, lock_path=lock_path)
    assert store.get("reed-1").status == "applied"
    assert store.stats()["total"] == 2


def test_concurrent_pass_is_refused(store, registries, lock_path):
    with pass_lock(lock_path):
        with pytest.raises(PassInProgressError):
            run_pass([ListSource([])], registries, store, lock_path=lock_path)
    # Released afterwards.
    assert run_pass([ListSource([])], registries, store, lock_path=lock_path).total == 0


class CountingLoader:
    def __init__(self, loaded_at=None):
        self.calls = 0
        self.loaded_at = loaded_at

    def __call__(self):
        self.calls += 1
        kwargs = {"loaded_at": self.loaded_at} if self.loaded_at else {}
        return RegistrySnapshot("test", {"acme": {}}, **kwargs)


def test_registry_cache_loads_once_while_fresh():
    sponsors, bcorps = CountingLoader(), CountingLoader()
    cache = RegistryCache(sponsors, bcorps)
    first = cache.current()
    second = cache.current()
    assert sponsors.calls == 1 and bcorps.calls == 1
    assert first.sponsors is second.sponsors


def test_registry_cache_reloads_stale_snapshot():
    sponsors = CountingLoader(loaded_at=datetime(2000, 1, 1, tzinfo=timezone.utc))
    bcorps = CountingLoader()
    cache = RegistryCache(sponsors, bcorps)
    cache.current()
    cache.current()
    assert sponsors.calls == 2
    assert bcorps.calls == 1


class DownSource(JobSource):
    name = "Down"
    key = "down"

    def queries(self):
        return ["esg", "climate"]

    def _fetch(self, _query):
        raise ConnectionError("service unavailable")


def test_source_with_every_query_failing_is_logged_as_error(store, registries, lock_path):
    result = run_pass([DownSource(sleep=lambda _s: None)], registries, store, lock_path=lock_path)
    assert result.errors == {"Down": "service unavailable"}
    assert store.stats()["last_fetch"]["status"] == "error: service unavailable"


class SelectiveAIScorer:
    """Blows up on one title and is unavailable for the rest."""

    def __init__(self, bad_title):
        self.bad_title = bad_title

    def score(self, prompt, title=""):
        if title == self.bad_title:
            raise OverflowError("cannot convert float infinity to integer")
        return AIUnavailable("no key")


def test_scoring_failure_skips_one_posting_not_the_pass(store, registries, good_postings, make_raw, lock_path):
    other = [make_raw(key="adzuna", native_id="9", title="Climate Risk Analyst", location="London")]
    sources = [ListSource(good_postings), ListSource(other, name="Other")]

    result = run_pass(sources, registries, store, ai_scorer=SelectiveAIScorer("ESG Analyst"), lock_path=lock_path)

    assert result.per_source == {"Fake": 1, "Other": 1}
    assert result.errors == {}
    assert store.get("reed-1") is not None
    assert store.get("reed-2") is None
    assert store.get("adzuna-9") is not None
