"""Reed.co.uk job search API (free key: https://www.reed.co.uk/developers)."""
from __future__ import annotations

import requests

from jobboard.models import RawPosting, stable_id, utc_now_iso
from jobboard.relevance import RelevancePolicy
from jobboard.retry import retry
from jobboard.sources.base import TIMEOUT, JobSource

API_URL = "https://www.reed.co.uk/api/1.0/search"

SEARCHES: tuple[str, ...] = (
    "sustainability consultant", "esg analyst",
    "esg consultant", "sustainability analyst",
    "climate consulting", "environmental consultant",
    "esg advisory", "sustainability manager",
    "sustainability communications", "ESG communications",
    "sustainability reporting", "CSR communications",
    "carbon consultant", "net zero consultant",
)


def format_range(lo: float | None, hi: float | None) -> str | None:
    if not lo:
        return None
    if not hi:
        return f"£{round(lo):,}"
    return f"£{round(lo):,} - £{round(hi):,}"


class ReedSource(JobSource):
    name = "Reed"
    key = "reed"
    policy = RelevancePolicy.SEARCH
    pause = 2.0

    def __init__(self, env_getter, **kwargs) -> None:
        super().__init__(env_getter, **kwargs)
        self.api_key: str = env_getter("REED_API_KEY")

    def queries(self) -> tuple[str, ...]:
        return SEARCHES

    @retry(max_attempts=2, base_delay=2.0)
    def _fetch(self, query: str) -> list[RawPosting]:
        params = {"keywords": query, "locationName": "London", "distancefromlocation": 15}
        # Reed uses the key as the Basic-auth username with an empty password.
        r = requests.get(API_URL, params=params, auth=(self.api_key, ""), timeout=TIMEOUT)
        r.raise_for_status()

        postings: list[RawPosting] = []
        for hit in r.json().get("results", []):
            native = str(hit.get("jobId"))
            postings.append(
                RawPosting(
                    id=stable_id(self.key, native),
                    native_id=native,
                    title=hit.get("jobTitle") or "",
                    company=hit.get("employerName") or "",
                    location=hit.get("locationName") or "London",
                    description=hit.get("jobDescription") or "",
                    url=hit.get("jobUrl") or "",
                    source=self.name,
                    job_type=hit.get("contractType") or "",
                    salary=format_range(hit.get("minimumSalary"), hit.get("maximumSalary")),
                    posted_at=hit.get("date") or utc_now_iso(),
                    fetched_at=utc_now_iso(),
                    search_query=query,
                )
            )
        return postings
