"""Remotive — free API for remote jobs (no API key required).

Rate limit: 2 requests per minute. Docs: https://remotive.com/api/remote-jobs
"""
from __future__ import annotations

import requests

from jobboard.models import RawPosting, stable_id, utc_now_iso
from jobboard.retry import retry
from jobboard.sources.base import TIMEOUT, JobSource

API_URL = "https://remotive.com/api/remote-jobs"

# ESG-specific first, then broader.
SEARCHES: tuple[str, ...] = (
    "sustainability consultant",
    "esg analyst",
    "esg",
    "sustainability",
    "climate",
    "consulting",
)

_REACHABLE = ("uk", "united kingdom", "europe", "london", "emea")
_GLOBAL = ("worldwide", "anywhere")


def reachable_from_uk(location: str) -> bool:
    loc = location.lower()
    return not loc or any(m in loc for m in _GLOBAL + _REACHABLE)


class RemotiveSource(JobSource):
    name = "Remotive"
    key = "remotive"
    pause = 31.0

    def queries(self) -> tuple[str, ...]:
        return SEARCHES

    @retry(max_attempts=2, base_delay=1.5)
    def _fetch(self, query: str) -> list[RawPosting]:
        r = requests.get(API_URL, params={"search": query, "limit": 50}, timeout=TIMEOUT)
        r.raise_for_status()

        postings: list[RawPosting] = []
        for hit in r.json().get("jobs", []):
            loc = hit.get("candidate_required_location") or ""
            if not reachable_from_uk(loc):
                continue
            native = str(hit.get("id"))
            postings.append(
                RawPosting(
                    id=stable_id(self.key, native),
                    native_id=native,
                    title=hit.get("title", ""),
                    company=hit.get("company_name", ""),
                    location=loc or "Remote - Worldwide",
                    description=hit.get("description") or "",
                    url=hit.get("url", ""),
                    source=self.name,
                    tags=hit.get("category") or "",
                    job_type=hit.get("job_type") or "",
                    remote=True,
                    salary=hit.get("salary") or None,
                    posted_at=hit.get("publication_date") or utc_now_iso(),
                    fetched_at=utc_now_iso(),
                    company_logo=hit.get("company_logo") or None,
                    search_query=query,
                )
            )
        return postings
