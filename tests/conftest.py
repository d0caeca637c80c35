"""
Shared fixtures for the board tests.

Network is never touched: HTTP calls are monkeypatched with FakeResponse,
retry/backoff sleeps are disabled, and registries are tiny in-memory
snapshots.
"""

from __future__ import annotations

import pytest
import requests

from jobboard.models import RawPosting, ScoredPosting, VisaConfidence, stable_id, utc_now_iso
from jobboard.pipeline import Registries
from jobboard.registry import RegistrySnapshot
from jobboard.store import JobStore

CREDENTIAL_ENV = (
    "GROQ_API_KEY", "GROQ_LLM_MODEL", "REED_API_KEY", "ADZUNA_APP_ID", "ADZUNA_APP_KEY",
    "JOOBLE_API_KEY", "MUSE_API_KEY", "SMTP_HOST", "SMTP_PORT", "SMTP_USER",
    "SMTP_PASSWORD", "FROM_EMAIL", "TO_EMAIL",
)


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, text: str = "", status_code: int = 200):
        self._payload = payload
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status_code
        self.encoding = "utf-8"

    def json(self):
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Backoff and rate-limit sleeps return immediately."""
    monkeypatch.setattr("jobboard.retry.time.sleep", lambda _s: None)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Credentials from a developer's .env must not leak into tests."""
    for key in CREDENTIAL_ENV:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def make_raw():
    def _make(**overrides) -> RawPosting:
        native = str(overrides.pop("native_id", "1"))
        key = overrides.pop("key", "reed")
        fields = dict(
            id=stable_id(key, native),
            native_id=native,
            title="Sustainability Consultant",
            company="Acme Consulting Ltd",
            location="London",
            description="Help clients shape their strategy.",
            url=f"https://example.com/jobs/{native}",
            source="Reed",
            fetched_at=utc_now_iso(),
        )
        fields.update(overrides)
        return RawPosting(**fields)

    return _make


@pytest.fixture
def make_scored(make_raw):
    def _make(**overrides) -> ScoredPosting:
        raw_fields = {k: overrides.pop(k) for k in list(overrides) if k in RawPosting.__dataclass_fields__ or k == "key"}
        raw = make_raw(**raw_fields)
        fields = dict(
            raw.__dict__,
            verified_sponsor=True,
            sponsor_rating="A",
            role_priority=100,
            occupation_code="2431",
            occupation_label="Management consultants",
            salary_annual_gbp=50_000,
            visa_confidence=VisaConfidence.GREEN,
            visa_reason="Verified sponsor + salary £50,000 meets SOC 2431 (Management consultants) minimum of £41,700",
            match_score=73,
            ai_summary="A strong match.",
            success_probability=84,
            reasons=['Title matches "Sustainability Consultant"', "Verified UK visa sponsor"],
        )
        fields.update(overrides)
        return ScoredPosting(**fields)

    return _make


@pytest.fixture
def registries() -> Registries:
    sponsors = RegistrySnapshot("sponsor_register", {
        "acme consulting": {"name": "Acme Consulting Ltd", "city": "London", "rating": "A", "routes": ["Skilled Worker"]},
        "ernst & young": {"name": "Ernst & Young LLP", "city": "London", "rating": "A", "routes": ["Skilled Worker"]},
    })
    bcorps = RegistrySnapshot.from_names("bcorp_directory", ["Acme Consulting", "Futerra"])
    return Registries(sponsors=sponsors, bcorps=bcorps)


@pytest.fixture
def store(tmp_path) -> JobStore:
    s = JobStore(tmp_path / "jobs.db")
    s.initialize()
    return s
