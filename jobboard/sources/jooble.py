"""Jooble — aggregator indexing LinkedIn, Indeed, Glassdoor and 70+ boards.

Requires a free API key from https://jooble.org/api/about
"""
from __future__ import annotations

import requests

from jobboard.models import RawPosting, stable_id, utc_now_iso
from jobboard.relevance import RelevancePolicy
from jobboard.retry import retry
from jobboard.sources.base import TIMEOUT, JobSource, is_uk, short_hash
from jobboard.text import strip_html

API_URL = "https://jooble.org/api/{key}"

SEARCHES: tuple[tuple[str, str], ...] = (
    ("sustainability consultant", "London"),
    ("ESG analyst", "London"),
    ("ESG consultant", "London"),
    ("sustainability analyst", "London"),
    ("climate consulting", "London"),
    ("environmental consultant", "London"),
    ("sustainability communications", "London"),
    ("ESG communications", "London"),
    ("sustainability reporting", "London"),
    ("sustainability manager", "United Kingdom"),
    ("ESG advisory", "United Kingdom"),
    ("CSR communications", "United Kingdom"),
)


class JoobleSource(JobSource):
    name = "Jooble"
    key = "jooble"
    policy = RelevancePolicy.SEARCH
    pause = 1.5

    def __init__(self, env_getter, **kwargs) -> None:
        super().__init__(env_getter, **kwargs)
        self.api_key: str = env_getter("JOOBLE_API_KEY")

    def queries(self) -> tuple[tuple[str, str], ...]:
        return SEARCHES

    @retry(max_attempts=2, base_delay=2.0)
    def _fetch(self, search: tuple[str, str]) -> list[RawPosting]:
        keywords, location = search
        body = {"keywords": keywords, "location": location, "page": 1, "ResultOnPage": 50}
        r = requests.post(API_URL.format(key=self.api_key), json=body, timeout=TIMEOUT)
        r.raise_for_status()

        postings: list[RawPosting] = []
        for hit in r.json().get("jobs", []):
            loc = hit.get("location") or ""
            remote = "remote" in loc.lower()
            # Jooble aggregates worldwide; keep UK and remote only.
            if not (is_uk(loc) or remote):
                continue
            native = str(hit.get("id") or short_hash(hit.get("link") or f"{hit.get('title')}{hit.get('company')}"))
            postings.append(
                RawPosting(
                    id=stable_id(self.key, native),
                    native_id=native,
                    title=strip_html(hit.get("title")),
                    company=hit.get("company") or "See listing",
                    location=loc or location,
                    description=strip_html(hit.get("snippet")),
                    url=hit.get("link") or "",
                    source=self.name,
                    job_type=hit.get("type") or "",
                    remote=remote,
                    salary=hit.get("salary") or None,
                    posted_at=hit.get("updated") or utc_now_iso(),
                    fetched_at=utc_now_iso(),
                    search_query=keywords,
                )
            )
        return postings
