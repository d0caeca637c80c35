"""UK Register of Licensed Sponsors (Workers and Temporary Workers).

Downloads the GOV.UK CSV, keeps one record per normalized organisation
(merging routes across rows) and caches the result as JSON for a day.
"""
from __future__ import annotations

import csv
import io
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import requests

from jobboard.config import SPONSOR_CACHE_PATH
from jobboard.log import get_logger
from jobboard.registry import RegistrySnapshot, cache_age, read_cache, write_cache
from jobboard.retry import NETWORK_ERRORS, retry
from jobboard.text import normalize_company

log = get_logger(__name__)

NAME = "sponsor_register"
MAX_AGE = timedelta(hours=24)
# Asset URL from the GOV.UK "Register of licensed sponsors: workers" page; it
# changes whenever the register is republished.
REGISTER_CSV_URL = (
    "https://assets.publishing.service.gov.uk/media/6998222ba58a315dbe72c06e/"
    "2026-02-20_-_Worker_and_Temporary_Worker.csv"
)
USER_AGENT = "Mozilla/5.0 (compatible; ESGJobBoard/1.0)"
DOWNLOAD_TIMEOUT = 60


def _rating(type_and_rating: str) -> str:
    if "A rating" in type_and_rating:
        return "A"
    if "B rating" in type_and_rating:
        return "B"
    return "Unknown"


def parse_register(raw: str) -> dict[str, dict[str, Any]]:
    """CSV columns: organisation, town/city, county, type & rating, route."""
    entries: dict[str, dict[str, Any]] = {}
    reader = csv.reader(io.StringIO(raw))
    next(reader, None)
    for row in reader:
        if not row:
            continue
        fields = [f.strip() for f in row] + [""] * 5
        org, city, _county, rating, route = fields[:5]
        key = normalize_company(org)
        if not key:
            continue
        existing = entries.get(key)
        if existing is None:
            entries[key] = {
                "name": org,
                "city": city,
                "rating": _rating(rating),
                "routes": [route],
            }
        elif route not in existing["routes"]:
            existing["routes"].append(route)
    return entries


@retry(max_attempts=3, base_delay=5.0)
def download_register(url: str = REGISTER_CSV_URL) -> str:
    log.info("Downloading UK Sponsor Register...")
    r = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=DOWNLOAD_TIMEOUT)
    r.raise_for_status()
    r.encoding = r.encoding or "utf-8"
    log.info("Downloaded %.1f MB", len(r.content) / 1024 / 1024)
    return r.text


def _snapshot_from_cache(data: dict[str, Any], path: Path) -> RegistrySnapshot | None:
    pairs = data.get("entries")
    if not isinstance(pairs, list):
        return None
    try:
        loaded_at = datetime.fromisoformat(data["updated_at"])
    except (KeyError, TypeError, ValueError):
        loaded_at = datetime.fromtimestamp(path.stat().st_mtime, timezone.utc)
    return RegistrySnapshot(NAME, {k: v for k, v in pairs}, loaded_at=loaded_at)


def load_sponsor_register(
    cache_path: Path = SPONSOR_CACHE_PATH,
    url: str = REGISTER_CSV_URL,
) -> RegistrySnapshot:
    """Fresh cache, else a download, else the stale cache, else an empty register."""
    age = cache_age(cache_path)
    cached = read_cache(cache_path) if age is not None else None
    stale: RegistrySnapshot | None = None
    if cached:
        stale = _snapshot_from_cache(cached, cache_path)
        if stale is not None and age < MAX_AGE:
            log.info("Loaded %d sponsors from cache", len(stale))
            return stale

    try:
        entries = parse_register(download_register(url))
    except NETWORK_ERRORS as exc:
        log.error("Sponsor register download failed: %s", exc)
        entries = {}

    if entries:
        snapshot = RegistrySnapshot(NAME, entries)
        write_cache(cache_path, {
            "entries": list(snapshot.entries.items()),
            "updated_at": snapshot.loaded_at.isoformat(),
        })
        log.info("Cached %d sponsors to disk", len(snapshot))
        return snapshot

    if stale is not None:
        log.warning("Using stale sponsor cache (%d sponsors)", len(stale))
        return stale
    log.warning("No sponsor register available; no company will verify this pass")
    return RegistrySnapshot.empty(NAME)
