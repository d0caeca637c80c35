"""Unit tests for the SQLite job store."""

import logging
import sqlite3
from datetime import datetime, timezone

import pytest

from jobboard.models import VALID_STATUSES, VisaConfidence
from jobboard.store import MIGRATIONS, InvalidStatusError, JobQuery, JobStore


def test_initialize_is_idempotent(store):
    store.initialize()
    assert store.stats()["total"] == 0


def test_upsert_and_get_round_trip(store, make_scored):
    posting = make_scored(native_id="7", remote=True)
    assert store.upsert_many([posting]) == 1

    stored = store.get("reed-7")
    assert stored.title == "Sustainability Consultant"
    assert stored.remote is True
    assert stored.verified_sponsor is True
    assert stored.visa_confidence is VisaConfidence.GREEN
    assert stored.reasons == posting.reasons
    assert stored.salary_annual_gbp == 50_000
    assert stored.status == "new"
    assert stored.saved is False
    assert stored.notes == ""


def test_get_unknown_id(store):
    assert store.get("nope-1") is None


def test_reingest_refreshes_derived_fields_but_keeps_user_edits(store, make_scored):
    store.upsert_many([make_scored(match_score=40)])
    store.update_status("reed-1", "applied")
    store.update_notes("reed-1", "Spoke to recruiter")
    store.toggle_saved("reed-1")

    store.upsert_many([make_scored(match_score=81, visa_confidence=VisaConfidence.YELLOW)])

    stored = store.get("reed-1")
    assert stored.match_score == 81
    assert stored.visa_confidence is VisaConfidence.YELLOW
    assert stored.status == "applied"
    assert stored.notes == "Spoke to recruiter"
    assert stored.saved is True


def test_invalid_status_is_rejected(store, make_scored):
    store.upsert_many([make_scored()])
    with pytest.raises(InvalidStatusError, match="Must be one of: new, to_apply, applied"):
        store.update_status("reed-1", "ghosted")
    assert store.get("reed-1").status == "new"


def test_invalid_status_is_a_value_error():
    assert issubclass(InvalidStatusError, ValueError)
    assert all(s in str(InvalidStatusError("x")) for s in VALID_STATUSES)


def test_user_edits_on_unknown_id_return_none(store):
    assert store.update_status("nope-1", "applied") is None
    assert store.update_notes("nope-1", "hi") is None
    assert store.toggle_saved("nope-1") is None


def test_toggle_saved_flips(store, make_scored):
    store.upsert_many([make_scored()])
    assert store.toggle_saved("reed-1") is True
    assert store.toggle_saved("reed-1") is False


@pytest.fixture
def populated(store, make_scored):
    store.upsert_many([
        make_scored(native_id="1", title="ESG Analyst", match_score=60,
                    visa_confidence=VisaConfidence.YELLOW, posted_at="2026-03-01T09:00:00Z"),
        make_scored(native_id="2", title="Climate Consultant", company="Beta Energy", match_score=90,
                    verified_sponsor=False, visa_confidence=VisaConfidence.RED, remote=True,
                    posted_at="2026-03-03T09:00:00Z"),
        make_scored(native_id="3", key="muse", source="The Muse", title="Sustainability Manager",
                    match_score=75, is_bcorp=True, posted_at="2026-03-02T09:00:00Z"),
    ])
    return store


def _ids(page):
    return [j.id for j in page.jobs]


def test_default_sort_is_score(populated):
    assert _ids(populated.query()) == ["reed-2", "muse-3", "reed-1"]


def test_visa_sort_orders_green_yellow_red(populated):
    assert _ids(populated.query(JobQuery(sort="visa"))) == ["muse-3", "reed-1", "reed-2"]


def test_date_sort(populated):
    assert _ids(populated.query(JobQuery(sort="date"))) == ["reed-2", "muse-3", "reed-1"]


def test_unknown_sort_falls_back_to_score(populated):
    assert _ids(populated.query(JobQuery(sort="salary; DROP TABLE jobs"))) == ["reed-2", "muse-3", "reed-1"]


@pytest.mark.parametrize(
    "query, expected",
    [
        (JobQuery(search="climate"), ["reed-2"]),
        (JobQuery(search="beta"), ["reed-2"]),
        (JobQuery(source="The Muse"), ["muse-3"]),
        (JobQuery(remote=True), ["reed-2"]),
        (JobQuery(sponsor_only=True), ["muse-3", "reed-1"]),
        (JobQuery(bcorp_only=True), ["muse-3"]),
        (JobQuery(visa_confidence="yellow"), ["reed-1"]),
        (JobQuery(saved=True), []),
    ],
)
def test_query_filters(populated, query, expected):
    assert _ids(populated.query(query)) == expected


def test_status_filter(populated):
    populated.update_status("reed-1", "interviewing")
    assert _ids(populated.query(JobQuery(status="interviewing"))) == ["reed-1"]


def test_pagination(populated):
    page = populated.query(JobQuery(page=2, limit=2))
    assert page.total == 3
    assert page.pages == 2
    assert _ids(page) == ["reed-1"]


def test_top_new_window(store, make_scored):
    store.upsert_many([
        make_scored(native_id="1", match_score=50, fetched_at="2026-01-02T06:00:00Z"),
        make_scored(native_id="2", match_score=90, fetched_at="2025-12-30T06:00:00Z"),
        make_scored(native_id="3", match_score=70, fetched_at="2026-01-02T05:00:00Z"),
    ])
    now = datetime(2026, 1, 2, 12, 0, tzinfo=timezone.utc)
    assert [p.id for p in store.top_new(5, 24, now=now)] == ["reed-3", "reed-1"]
    assert [p.id for p in store.top_new(1, 24, now=now)] == ["reed-3"]


def test_stats(populated):
    populated.log_fetch("Reed", 2, "success", fetched_at="2026-03-03T06:00:00Z")
    populated.log_fetch("The Muse", 0, "error: timeout", fetched_at="2026-03-03T06:01:00Z")
    stats = populated.stats()
    assert stats["total"] == 3
    assert stats["sources"] == {"Reed": 2, "The Muse": 1}
    assert stats["verified_count"] == 2
    assert stats["avg_score"] == 75
    assert stats["visa_counts"] == {"green": 1, "yellow": 1, "red": 1}
    assert stats["status_counts"] == {"new": 3}
    assert stats["bcorp_count"] == 1
    assert stats["golden_count"] == 1
    assert stats["last_fetch"]["status"] == "error: timeout"


FIRST_RELEASE_SCHEMA = """
CREATE TABLE jobs (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    company TEXT NOT NULL,
    location TEXT NOT NULL,
    description TEXT,
    url TEXT NOT NULL,
    source TEXT NOT NULL,
    tags TEXT,
    job_type TEXT,
    remote INTEGER DEFAULT 0,
    visa_sponsorship INTEGER DEFAULT 0,
    salary TEXT,
    company_logo TEXT,
    posted_at TEXT,
    fetched_at TEXT NOT NULL,
    saved INTEGER DEFAULT 0,
    verified_sponsor INTEGER DEFAULT 0,
    sponsor_rating TEXT,
    match_score INTEGER DEFAULT 0,
    ai_summary TEXT,
    role_priority INTEGER DEFAULT 0
);
"""


def test_fresh_database_needs_no_migrations(tmp_path, caplog):
    with caplog.at_level(logging.INFO, logger="jobboard.store"):
        JobStore(tmp_path / "fresh.db").initialize()
    assert "Migrated" not in caplog.text
    with sqlite3.connect(tmp_path / "fresh.db") as conn:
        columns = {r[1] for r in conn.execute("PRAGMA table_info(jobs)")}
    conn.close()
    assert {column for column, _ in MIGRATIONS} <= columns


def test_migrates_old_database(tmp_path, caplog):
    db = tmp_path / "old.db"
    with sqlite3.connect(db) as conn:
        conn.executescript(FIRST_RELEASE_SCHEMA)
        conn.execute(
            "INSERT INTO jobs (id, title, company, location, url, source, fetched_at, match_score) "
            "VALUES ('reed-9', 'ESG Analyst', 'Acme', 'London', 'https://x', 'Reed', '2026-01-01T00:00:00Z', 55)"
        )
    conn.close()

    store = JobStore(db)
    with caplog.at_level(logging.INFO, logger="jobboard.store"):
        store.initialize()
    assert "Migrated: added column 'native_id'" in caplog.text
    stored = store.get("reed-9")
    assert stored.match_score == 55
    assert stored.status == "new"
    assert stored.visa_confidence is VisaConfidence.UNKNOWN
    assert stored.reasons == []
    assert stored.notes == ""
