"""Point-in-time registries and fuzzy organisation matching.

A :class:`RegistrySnapshot` maps normalized organisation names to whatever
metadata the publisher provides (sponsor rating and routes, or the B Corp's
display name). Snapshots are read-only and are handed to the matcher
explicitly, so a classification pass never sees a half-loaded register.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from jobboard.log import get_logger
from jobboard.text import normalize_company

log = get_logger(__name__)

SPONSOR_RATIO = 0.5
BCORP_RATIO = 0.6
MIN_KEY_LEN = 3
MIN_FUZZY_LEN = 5

# Placeholders some boards put in the company field (e.g. Adzuna "Unknown").
PLACEHOLDER_NAMES: frozenset[str] = frozenset({
    "unknown", "see listing", "confidential", "not disclosed",
    "anonymous", "various", "multiple", "tbc", "tba",
    "not specified", "undisclosed", "company", "employer",
    "hiring company", "top company", "leading company",
})

# Shorthand -> registered name; the target is normalized at lookup time.
ALIASES: dict[str, str] = {
    "pwc": "PricewaterhouseCoopers LLP",
    "ey": "Ernst & Young LLP",
    "bain": "Bain & Company",
    "wsp": "WSP Group Limited",
    "arup": "Ove Arup & Partners International Limited",
    "mott macdonald": "Mott MacDonald Limited",
    "mckinsey": "McKinsey & Company Inc. United Kingdom",
    "bcg": "The Boston Consulting Group UK LLP",
}


@dataclass(frozen=True)
class RegistrySnapshot(Mapping[str, Any]):
    name: str
    entries: Mapping[str, Any]
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        # Copy so later changes to the caller's dict can't leak into a pass.
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __getitem__(self, key: str) -> Any:
        return self.entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def is_stale(self, max_age: timedelta, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - self.loaded_at >= max_age

    @classmethod
    def empty(cls, name: str) -> "RegistrySnapshot":
        return cls(name=name, entries={})

    @classmethod
    def from_names(cls, name: str, names: list[str], **kwargs: Any) -> "RegistrySnapshot":
        entries: dict[str, Any] = {}
        for raw in names:
            key = normalize_company(raw)
            if key and key not in entries:
                entries[key] = {"name": raw}
        return cls(name=name, entries=entries, **kwargs)


@dataclass(frozen=True)
class MatchResult:
    matched: bool
    record: Any = None
    fuzzy: bool = False
    key: str = ""


NO_MATCH = MatchResult(matched=False)


def lookup_key(raw_name: str | None) -> str:
    """Normalized key after placeholder rejection and alias expansion; "" if unusable."""
    key = normalize_company(raw_name)
    if key in PLACEHOLDER_NAMES:
        return ""
    # Aliases first so two-letter shorthand like "ey" still resolves.
    if key in ALIASES:
        key = normalize_company(ALIASES[key])
    if len(key) < MIN_KEY_LEN:
        return ""
    return key


def match(registry: Mapping[str, Any], raw_name: str | None, ratio_threshold: float) -> MatchResult:
    """Exact normalized lookup, then a substring match with a length-ratio floor.

    The fuzzy scan returns the first qualifying entry in registry order,
    not the closest one.
    """
    key = lookup_key(raw_name)
    if not key:
        return NO_MATCH

    if key in registry:
        return MatchResult(matched=True, record=registry[key], key=key)

    if len(key) < MIN_FUZZY_LEN:
        return NO_MATCH

    for candidate, record in registry.items():
        if len(candidate) < MIN_FUZZY_LEN:
            continue
        if len(key) <= len(candidate):
            shorter, longer = key, candidate
        else:
            shorter, longer = candidate, key
        if len(shorter) / len(longer) >= ratio_threshold and shorter in longer:
            return MatchResult(matched=True, record=record, fuzzy=True, key=candidate)

    return NO_MATCH


def check_sponsor(registry: Mapping[str, Any], company: str | None) -> MatchResult:
    return match(registry, company, SPONSOR_RATIO)


def check_bcorp(registry: Mapping[str, Any], company: str | None) -> MatchResult:
    # Stricter ratio: a false B Corp hit shows up as a "Golden Opportunity" badge.
    return match(registry, company, BCORP_RATIO)


def cache_age(path: Path, now: datetime | None = None) -> timedelta | None:
    """Age of a cache file by mtime, or None when it does not exist."""
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return None
    now = now or datetime.now(timezone.utc)
    return now - datetime.fromtimestamp(mtime, timezone.utc)


def read_cache(path: Path) -> dict[str, Any] | None:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        log.warning("Cache read error for %s: %s", path.name, exc)
        return None
    return data if isinstance(data, dict) else None


def write_cache(path: Path, data: dict[str, Any]) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f)
        tmp.replace(path)
    except OSError as exc:
        log.error("Cache write error for %s: %s", path.name, exc)
