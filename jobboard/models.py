"""Data models for postings as they move through a pass."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class VisaConfidence(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    UNKNOWN = "unknown"


class Status(str, Enum):
    NEW = "new"
    TO_APPLY = "to_apply"
    APPLIED = "applied"
    INTERVIEWING = "interviewing"
    OFFER = "offer"
    REJECTED = "rejected"
    ARCHIVED = "archived"


VALID_STATUSES: tuple[str, ...] = tuple(s.value for s in Status)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def stable_id(source_key: str, native_id: str) -> str:
    return f"{source_key}-{native_id}"


@dataclass
class RawPosting:
    """A posting as a source fetcher hands it over; not mutated afterwards."""

    id: str
    native_id: str
    title: str
    company: str
    location: str
    description: str
    url: str
    source: str
    tags: str = ""
    job_type: str = ""
    remote: bool = False
    salary: str | None = None
    posted_at: str | None = None
    fetched_at: str = ""
    company_logo: str | None = None
    visa_sponsorship: bool = False
    search_query: str = ""


@dataclass
class EnrichedPosting(RawPosting):
    verified_sponsor: bool = False
    sponsor_rating: str | None = None
    is_bcorp: bool = False
    role_priority: int = 0

    @property
    def is_golden(self) -> bool:
        return self.is_bcorp and self.verified_sponsor


@dataclass
class ScoredPosting(EnrichedPosting):
    occupation_code: str | None = None
    occupation_label: str | None = None
    salary_annual_gbp: int | None = None
    visa_confidence: VisaConfidence = VisaConfidence.UNKNOWN
    visa_reason: str = ""
    match_score: int = 0
    ai_summary: str = ""
    success_probability: int = 0
    reasons: list[str] = field(default_factory=list)


@dataclass
class StoredPosting(ScoredPosting):
    saved: bool = False
    status: str = Status.NEW.value
    notes: str = ""


def utc_now_iso() -> str:
    """UTC timestamp in the one format stored and compared as text."""
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)
