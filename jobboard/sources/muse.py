"""The Muse — professional and consulting roles with strong brand coverage.

Free API, no key required (500 req/hr); an optional key raises that to 3600.
The Muse has no ESG category, so broad categories are fetched and the strict
relevance policy weeds out the noise.
"""
from __future__ import annotations

import requests

from jobboard.models import RawPosting, stable_id, utc_now_iso
from jobboard.relevance import RelevancePolicy
from jobboard.retry import retry
from jobboard.sources.base import TIMEOUT, JobSource

API_URL = "https://www.themuse.com/api/public/jobs"
LONDON = "London, United Kingdom"
REMOTE = "Flexible / Remote"

LONDON_CATEGORIES: tuple[str, ...] = (
    "Business Operations",
    "Science and Engineering",
    "Data and Analytics",
    "Management",
    "Corporate",
    "Project Management",
    "Communications",
    "Marketing and PR",
)
REMOTE_CATEGORIES: tuple[str, ...] = (
    "Business Operations",
    "Science and Engineering",
    "Management",
    "Communications",
)


def _names(items: list[dict] | None) -> str:
    return ", ".join(i.get("name", "") for i in items or [])


class MuseSource(JobSource):
    name = "The Muse"
    key = "muse"
    policy = RelevancePolicy.STRICT
    pause = 1.2

    def __init__(self, env_getter=None, **kwargs) -> None:
        super().__init__(env_getter, **kwargs)
        self.api_key: str = env_getter("MUSE_API_KEY") if env_getter else ""

    def queries(self) -> list[tuple[str, str]]:
        return [(c, LONDON) for c in LONDON_CATEGORIES] + [(c, REMOTE) for c in REMOTE_CATEGORIES]

    @retry(max_attempts=2, base_delay=1.5)
    def _fetch(self, search: tuple[str, str]) -> list[RawPosting]:
        category, location = search
        params = {"page": 0, "location": location, "category": category}
        if self.api_key:
            params["api_key"] = self.api_key
        r = requests.get(API_URL, params=params, timeout=TIMEOUT)
        r.raise_for_status()

        postings: list[RawPosting] = []
        for hit in r.json().get("results", []):
            locations = _names(hit.get("locations"))
            native = str(hit.get("id"))
            postings.append(
                RawPosting(
                    id=stable_id(self.key, native),
                    native_id=native,
                    title=hit.get("name") or "",
                    company=(hit.get("company") or {}).get("name") or "Unknown",
                    location=locations or ("Remote" if location == REMOTE else LONDON),
                    description=hit.get("contents") or "",
                    url=(hit.get("refs") or {}).get("landing_page") or "",
                    source=self.name,
                    tags=_names(hit.get("categories")),
                    job_type=_names(hit.get("levels")),
                    remote=location == REMOTE or "remote" in locations.lower(),
                    posted_at=hit.get("publication_date") or utc_now_iso(),
                    fetched_at=utc_now_iso(),
                )
            )
        return postings
