"""GreenJobs.co.uk RSS feed — environmental and sustainability roles in the UK."""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from email.utils import parsedate_to_datetime

import requests

from jobboard.models import TIMESTAMP_FORMAT, RawPosting, stable_id, utc_now_iso
from jobboard.retry import retry
from jobboard.sources.base import TIMEOUT, USER_AGENT, JobSource, short_hash
from jobboard.text import strip_html

FEED_URL = "https://www.greenjobs.co.uk/jobboard/xmlfeeds/jobfeed.asp?type=RSS"
FEED_TAGS = "ESG, Sustainability, Environment"
UNKNOWN_COMPANY = "See listing"

_COMPANY_RE = re.compile(r"(?:at|with|for|by)\s+([A-Z][A-Za-z\s&.]+?)(?:\s+in\s|\s*[,.]|\s+is\s)")


def extract_company(description: str) -> str:
    """Employer named in feed prose such as "... at Acme Energy in London"."""
    m = _COMPANY_RE.search(description or "")
    return m.group(1).strip() if m else UNKNOWN_COMPANY


def _rfc822_to_iso(value: str | None) -> str:
    if not value:
        return utc_now_iso()
    try:
        return parsedate_to_datetime(value).strftime(TIMESTAMP_FORMAT)
    except (TypeError, ValueError):
        return utc_now_iso()


def parse_feed(xml_text: str, source: str = "GreenJobs", key: str = "greenjobs") -> list[RawPosting]:
    root = ET.fromstring(xml_text)
    postings: list[RawPosting] = []
    for item in root.iter("item"):
        title = (item.findtext("title") or "").strip()
        link = (item.findtext("link") or "").strip()
        content = item.findtext("description") or ""
        desc = strip_html(content)
        where = f"{desc} {title}".lower()
        london, remote = "london" in where, "remote" in where
        native = short_hash(link or title)
        postings.append(
            RawPosting(
                id=stable_id(key, native),
                native_id=native,
                title=title,
                company=extract_company(desc),
                location="London" if london else "Remote" if remote else "United Kingdom",
                description=content or desc,
                url=link,
                source=source,
                tags=FEED_TAGS,
                remote=remote,
                posted_at=_rfc822_to_iso(item.findtext("pubDate")),
                fetched_at=utc_now_iso(),
            )
        )
    return postings


class GreenJobsSource(JobSource):
    name = "GreenJobs"
    key = "greenjobs"

    @retry(max_attempts=2, base_delay=2.0)
    def _fetch(self, _query: None) -> list[RawPosting]:
        r = requests.get(FEED_URL, headers={"User-Agent": USER_AGENT}, timeout=TIMEOUT)
        r.raise_for_status()
        return parse_feed(r.text, self.name, self.key)
