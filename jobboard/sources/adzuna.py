"""Adzuna job search, UK endpoint.

Free tier: 250 requests/day.  Sign up at https://developer.adzuna.com/
"""
from __future__ import annotations

import requests

from jobboard.models import RawPosting, stable_id, utc_now_iso
from jobboard.relevance import RelevancePolicy
from jobboard.retry import retry
from jobboard.sources.base import TIMEOUT, JobSource
from jobboard.sources.reed import format_range

COUNTRY = "gb"
BASE_URL = f"https://api.adzuna.com/v1/api/jobs/{COUNTRY}/search/1"

SEARCHES: tuple[str, ...] = (
    "sustainability consultant", "esg analyst",
    "esg consultant", "sustainability analyst",
    "esg", "climate consulting", "environmental consultant",
    "sustainability communications", "ESG communications",
    "sustainability reporting", "carbon consultant",
    "CSR consultant", "net zero",
)


class AdzunaSource(JobSource):
    name = "Adzuna"
    key = "adzuna"
    policy = RelevancePolicy.SEARCH
    pause = 1.5

    def __init__(self, env_getter, **kwargs) -> None:
        super().__init__(env_getter, **kwargs)
        self.app_id: str = env_getter("ADZUNA_APP_ID")
        self.app_key: str = env_getter("ADZUNA_APP_KEY")

    def queries(self) -> tuple[str, ...]:
        return SEARCHES

    @retry(max_attempts=3, base_delay=2.0)
    def _fetch(self, query: str) -> list[RawPosting]:
        params: dict = {
            "app_id": self.app_id,
            "app_key": self.app_key,
            "results_per_page": 50,
            "what": query,
            "where": "london",
            "content-type": "application/json",
        }
        r = requests.get(BASE_URL, params=params, timeout=TIMEOUT)
        r.raise_for_status()

        postings: list[RawPosting] = []
        for hit in r.json().get("results", []):
            native = str(hit.get("id"))
            postings.append(
                RawPosting(
                    id=stable_id(self.key, native),
                    native_id=native,
                    title=hit.get("title") or "",
                    company=(hit.get("company") or {}).get("display_name") or "Unknown",
                    location=(hit.get("location") or {}).get("display_name") or "London",
                    description=hit.get("description") or "",
                    url=hit.get("redirect_url") or "",
                    source=self.name,
                    tags=(hit.get("category") or {}).get("label") or "",
                    job_type=hit.get("contract_time") or "",
                    salary=format_range(hit.get("salary_min"), hit.get("salary_max")),
                    posted_at=hit.get("created") or utc_now_iso(),
                    fetched_at=utc_now_iso(),
                    search_query=query,
                )
            )
        return postings
