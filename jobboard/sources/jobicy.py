"""Jobicy — free remote-jobs API with UK coverage, no key required."""
from __future__ import annotations

from typing import Any

import requests

from jobboard.models import RawPosting, stable_id, utc_now_iso
from jobboard.retry import retry
from jobboard.sources.base import TIMEOUT, JobSource
from jobboard.text import decode_entities

API_URL = "https://jobicy.com/api/v2/remote-jobs"
GEOS: tuple[str, ...] = ("uk", "anywhere")


def format_salary(hit: dict[str, Any]) -> str | None:
    lo, hi = hit.get("annualSalaryMin"), hit.get("annualSalaryMax")
    if not (lo and hi):
        return None
    cur = hit.get("salaryCurrency") or "USD"
    return f"{cur} {int(float(lo)):,} - {int(float(hi)):,}"


class JobicySource(JobSource):
    name = "Jobicy"
    key = "jobicy"
    pause = 2.0

    def queries(self) -> tuple[str, ...]:
        return GEOS

    @retry(max_attempts=2, base_delay=1.5)
    def _fetch(self, geo: str) -> list[RawPosting]:
        r = requests.get(API_URL, params={"count": 50, "geo": geo}, timeout=TIMEOUT)
        r.raise_for_status()

        postings: list[RawPosting] = []
        for hit in r.json().get("jobs", []):
            native = str(hit.get("id"))
            postings.append(
                RawPosting(
                    id=stable_id(self.key, native),
                    native_id=native,
                    title=decode_entities(hit.get("jobTitle")),
                    company=decode_entities(hit.get("companyName")),
                    location=hit.get("jobGeo") or "Remote",
                    description=hit.get("jobDescription") or "",
                    url=hit.get("url") or "",
                    source=self.name,
                    tags=", ".join(hit.get("jobIndustry") or []),
                    job_type=", ".join(hit.get("jobType") or []),
                    remote=True,
                    salary=format_salary(hit),
                    posted_at=hit.get("pubDate") or utc_now_iso(),
                    fetched_at=utc_now_iso(),
                    company_logo=hit.get("companyLogo") or None,
                )
            )
        return postings
