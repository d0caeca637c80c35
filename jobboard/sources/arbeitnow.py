"""Arbeitnow — job board API filtered to visa-sponsoring employers."""
from __future__ import annotations

from datetime import datetime, timezone

import requests

from jobboard.log import get_logger
from jobboard.models import TIMESTAMP_FORMAT, RawPosting, stable_id, utc_now_iso
from jobboard.retry import retry
from jobboard.sources.base import TIMEOUT, JobSource, is_uk

log = get_logger(__name__)

API_URL = "https://www.arbeitnow.com/api/job-board-api"
MAX_PAGES = 10


class ArbeitnowSource(JobSource):
    name = "Arbeitnow"
    key = "arbeitnow"
    pause = 1.0

    @retry(max_attempts=2, base_delay=1.5)
    def _fetch_page(self, page: int) -> list[dict]:
        r = requests.get(API_URL, params={"visa_sponsorship": "true", "page": page}, timeout=TIMEOUT)
        r.raise_for_status()
        return r.json().get("data") or []

    def _postings(self, hits: list[dict]) -> list[RawPosting]:
        postings: list[RawPosting] = []
        for hit in hits:
            remote = hit.get("remote") is True
            loc = hit.get("location") or ""
            if not (is_uk(loc) or remote):
                continue
            created = hit.get("created_at")
            posted = (
                datetime.fromtimestamp(created, timezone.utc).strftime(TIMESTAMP_FORMAT)
                if isinstance(created, (int, float)) else utc_now_iso()
            )
            native = str(hit.get("slug"))
            postings.append(
                RawPosting(
                    id=stable_id(self.key, native),
                    native_id=native,
                    title=hit.get("title", ""),
                    company=hit.get("company_name", ""),
                    location=loc or ("Remote" if remote else "Unknown"),
                    description=hit.get("description") or "",
                    url=hit.get("url", ""),
                    source=self.name,
                    tags=", ".join(hit.get("tags") or []),
                    job_type=", ".join(hit.get("job_types") or []),
                    remote=remote,
                    posted_at=posted,
                    fetched_at=utc_now_iso(),
                    visa_sponsorship=True,
                )
            )
        return postings

    def fetch(self) -> list[RawPosting]:
        """Page through until an empty page, an error or MAX_PAGES; a failed first page raises."""
        postings: list[RawPosting] = []
        for page in range(1, MAX_PAGES + 1):
            if page > 1:
                self._sleep(self.pause)
            try:
                hits = self._fetch_page(page)
            except Exception as exc:
                log.warning("[%s] page %d error: %s", self.name, page, exc)
                if page == 1:
                    raise
                break
            if not hits:
                break
            postings.extend(self._postings(hits))
        return postings

    def _fetch(self, page: int) -> list[RawPosting]:
        return self._postings(self._fetch_page(page))
