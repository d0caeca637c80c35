"""SQLite job store: idempotent upsert, board queries and user edits.

Re-ingesting a posting refreshes everything the pipeline derives, while
``saved``, ``status`` and ``notes`` belong to the user and are written only
when the row is first created.
"""
from __future__ import annotations

import json
import sqlite3
from contextlib import closing, contextmanager
from dataclasses import MISSING, dataclass, fields
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterator

from jobboard.config import DB_PATH
from jobboard.log import get_logger
from jobboard.models import (
    TIMESTAMP_FORMAT,
    VALID_STATUSES,
    ScoredPosting,
    Status,
    StoredPosting,
    VisaConfidence,
    utc_now_iso,
)

log = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS jobs (
    id TEXT PRIMARY KEY,
    native_id TEXT,
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
    role_priority INTEGER DEFAULT 0,
    search_query TEXT,
    status TEXT DEFAULT 'new',
    notes TEXT,
    occupation_code TEXT,
    occupation_label TEXT,
    salary_annual_gbp INTEGER,
    visa_confidence TEXT DEFAULT 'unknown',
    visa_reason TEXT,
    success_probability INTEGER DEFAULT 0,
    reasons TEXT,
    is_bcorp INTEGER DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_jobs_posted ON jobs(posted_at DESC);
CREATE INDEX IF NOT EXISTS idx_jobs_source ON jobs(source);
CREATE INDEX IF NOT EXISTS idx_jobs_saved ON jobs(saved);
CREATE INDEX IF NOT EXISTS idx_jobs_score ON jobs(match_score DESC);

CREATE TABLE IF NOT EXISTS fetch_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    source TEXT NOT NULL,
    fetched_at TEXT NOT NULL,
    job_count INTEGER NOT NULL,
    status TEXT NOT NULL
);
"""

# Columns missing from databases created before they joined SCHEMA; applied in order.
MIGRATIONS: list[tuple[str, str]] = [
    ("native_id", "TEXT"),
    ("search_query", "TEXT"),
    ("status", "TEXT DEFAULT 'new'"),
    ("notes", "TEXT"),
    ("occupation_code", "TEXT"),
    ("occupation_label", "TEXT"),
    ("salary_annual_gbp", "INTEGER"),
    ("visa_confidence", "TEXT DEFAULT 'unknown'"),
    ("visa_reason", "TEXT"),
    ("success_probability", "INTEGER DEFAULT 0"),
    ("reasons", "TEXT"),
    ("is_bcorp", "INTEGER DEFAULT 0"),
]

USER_COLUMNS = ("saved", "status", "notes")
BOOL_COLUMNS = ("remote", "visa_sponsorship", "saved", "verified_sponsor", "is_bcorp")

SORTS: dict[str, str] = {
    "score": "match_score DESC, posted_at DESC",
    "date": "posted_at DESC",
    "company": "company ASC",
    "title": "title ASC",
    "visa": (
        "CASE visa_confidence WHEN 'green' THEN 0 WHEN 'yellow' THEN 1 "
        "WHEN 'red' THEN 2 ELSE 3 END, match_score DESC"
    ),
    "probability": "success_probability DESC, match_score DESC",
}
DEFAULT_SORT = "score"


class InvalidStatusError(ValueError):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Invalid status: {status}. Must be one of: {', '.join(VALID_STATUSES)}")


@dataclass
class JobQuery:
    search: str = ""
    source: str = "all"
    remote: bool = False
    saved: bool = False
    sponsor_only: bool = False
    bcorp_only: bool = False
    status: str = "all"
    visa_confidence: str = "all"
    sort: str = DEFAULT_SORT
    page: int = 1
    limit: int = 20


@dataclass
class JobPage:
    jobs: list[StoredPosting]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return max(1, -(-self.total // self.limit))


_STORED_FIELDS = [f.name for f in fields(StoredPosting)]
_WRITE_COLUMNS = [name for name in _STORED_FIELDS if name not in USER_COLUMNS]
_DEFAULTS: dict[str, Any] = {
    f.name: f.default for f in fields(StoredPosting) if f.default is not MISSING
}


def _to_row(posting: ScoredPosting) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for name in _WRITE_COLUMNS:
        value = getattr(posting, name)
        if name in BOOL_COLUMNS:
            value = int(bool(value))
        elif name == "visa_confidence":
            value = VisaConfidence(value).value
        elif name == "reasons":
            value = json.dumps(value or [])
        row[name] = value
    row["saved"] = int(bool(getattr(posting, "saved", False)))
    row["status"] = getattr(posting, "status", Status.NEW.value)
    row["notes"] = getattr(posting, "notes", "")
    return row


def _from_row(row: sqlite3.Row) -> StoredPosting:
    data = dict(row)
    kwargs: dict[str, Any] = {}
    for name in _STORED_FIELDS:
        value = data.get(name)
        if name in BOOL_COLUMNS:
            value = bool(value)
        elif name == "visa_confidence":
            try:
                value = VisaConfidence(value or VisaConfidence.UNKNOWN.value)
            except ValueError:
                value = VisaConfidence.UNKNOWN
        elif name == "reasons":
            value = json.loads(value) if value else []
        elif value is None:
            # Columns added by migration are NULL on older rows.
            value = _DEFAULTS.get(name, "")
        kwargs[name] = value
    return StoredPosting(**kwargs)


class JobStore:
    def __init__(self, db_path: Path | str = DB_PATH) -> None:
        self.db_path = Path(db_path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode = WAL")
            with conn:
                yield conn

    def initialize(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA)
            existing = {r["name"] for r in conn.execute("PRAGMA table_info(jobs)")}
            for column, decl in MIGRATIONS:
                if column not in existing:
                    conn.execute(f"ALTER TABLE jobs ADD COLUMN {column} {decl}")
                    log.info("Migrated: added column %r", column)

    def upsert_many(self, postings: list[ScoredPosting]) -> int:
        if not postings:
            return 0
        columns = _WRITE_COLUMNS + list(USER_COLUMNS)
        updates = ", ".join(f"{c} = excluded.{c}" for c in _WRITE_COLUMNS if c != "id")
        sql = (
            f"INSERT INTO jobs ({', '.join(columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates}"
        )
        with self._connect() as conn:
            conn.executemany(sql, [_to_row(p) for p in postings])
        log.debug("Upserted %d postings", len(postings))
        return len(postings)

    def get(self, job_id: str) -> StoredPosting | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM jobs WHERE id = ?", (job_id,)).fetchone()
        return _from_row(row) if row else None

    def query(self, q: JobQuery | None = None) -> JobPage:
        q = q or JobQuery()
        conditions: list[str] = []
        params: dict[str, Any] = {}

        if q.search:
            conditions.append(
                "(title LIKE :search OR company LIKE :search "
                "OR description LIKE :search OR tags LIKE :search)"
            )
            params["search"] = f"%{q.search}%"
        if q.source and q.source != "all":
            conditions.append("source = :source")
            params["source"] = q.source
        if q.remote:
            conditions.append("remote = 1")
        if q.saved:
            conditions.append("saved = 1")
        if q.sponsor_only:
            conditions.append("verified_sponsor = 1")
        if q.bcorp_only:
            conditions.append("is_bcorp = 1")
        if q.status and q.status != "all":
            conditions.append("status = :status")
            params["status"] = q.status
        if q.visa_confidence and q.visa_confidence != "all":
            conditions.append("visa_confidence = :visa_confidence")
            params["visa_confidence"] = q.visa_confidence

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        order_by = SORTS.get(q.sort, SORTS[DEFAULT_SORT])
        page = max(q.page or 1, 1)
        limit = max(q.limit or 20, 1)

        with self._connect() as conn:
            total = conn.execute(f"SELECT COUNT(*) FROM jobs {where}", params).fetchone()[0]
            rows = conn.execute(
                f"SELECT * FROM jobs {where} ORDER BY {order_by} LIMIT :limit OFFSET :offset",
                {**params, "limit": limit, "offset": (page - 1) * limit},
            ).fetchall()
        return JobPage(jobs=[_from_row(r) for r in rows], total=total, page=page, limit=limit)

    def toggle_saved(self, job_id: str) -> bool | None:
        """Flip the saved flag; returns the new value, or None for an unknown id."""
        with self._connect() as conn:
            conn.execute(
                "UPDATE jobs SET saved = CASE WHEN saved = 1 THEN 0 ELSE 1 END WHERE id = ?",
                (job_id,),
            )
            row = conn.execute("SELECT saved FROM jobs WHERE id = ?", (job_id,)).fetchone()
        return bool(row["saved"]) if row else None

    def update_status(self, job_id: str, status: str) -> str | None:
        if status not in VALID_STATUSES:
            raise InvalidStatusError(status)
        with self._connect() as conn:
            conn.execute("UPDATE jobs SET status = ? WHERE id = ?", (status, job_id))
            row = conn.execute("SELECT status FROM jobs WHERE id = ?", (job_id,)).fetchone()
        if row:
            log.debug("Updated %s → %s", job_id, status)
        return row["status"] if row else None

    def update_notes(self, job_id: str, notes: str) -> str | None:
        with self._connect() as conn:
            conn.execute("UPDATE jobs SET notes = ? WHERE id = ?", (notes, job_id))
            row = conn.execute("SELECT notes FROM jobs WHERE id = ?", (job_id,)).fetchone()
        return row["notes"] if row else None

    def top_new(self, n: int = 5, window_hours: int = 24, now: datetime | None = None) -> list[StoredPosting]:
        """Best-scoring postings fetched within the window, for the digest."""
        now = now or datetime.now(timezone.utc)
        cutoff = (now - timedelta(hours=window_hours)).strftime(TIMESTAMP_FORMAT)
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM jobs WHERE fetched_at >= ? "
                "ORDER BY match_score DESC, posted_at DESC LIMIT ?",
                (cutoff, n),
            ).fetchall()
        return [_from_row(r) for r in rows]

    def log_fetch(self, source: str, job_count: int, status: str, fetched_at: str | None = None) -> None:
        fetched_at = fetched_at or utc_now_iso()
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO fetch_log (source, fetched_at, job_count, status) VALUES (?, ?, ?, ?)",
                (source, fetched_at, job_count, status),
            )

    def stats(self) -> dict[str, Any]:
        with self._connect() as conn:
            def scalar(sql: str) -> Any:
                return conn.execute(sql).fetchone()[0]

            last = conn.execute("SELECT * FROM fetch_log ORDER BY id DESC LIMIT 1").fetchone()
            return {
                "total": scalar("SELECT COUNT(*) FROM jobs"),
                "sources": {
                    r["source"]: r["c"]
                    for r in conn.execute("SELECT source, COUNT(*) AS c FROM jobs GROUP BY source")
                },
                "last_fetch": dict(last) if last else None,
                "verified_count": scalar("SELECT COUNT(*) FROM jobs WHERE verified_sponsor = 1"),
                "avg_score": int(scalar("SELECT ROUND(AVG(match_score)) FROM jobs WHERE match_score > 0") or 0),
                "status_counts": {
                    r["status"]: r["c"]
                    for r in conn.execute("SELECT status, COUNT(*) AS c FROM jobs GROUP BY status")
                },
                "visa_counts": {
                    r["visa_confidence"]: r["c"]
                    for r in conn.execute(
                        "SELECT visa_confidence, COUNT(*) AS c FROM jobs GROUP BY visa_confidence"
                    )
                },
                "bcorp_count": scalar("SELECT COUNT(*) FROM jobs WHERE is_bcorp = 1"),
                "golden_count": scalar("SELECT COUNT(*) FROM jobs WHERE is_bcorp = 1 AND verified_sponsor = 1"),
            }
