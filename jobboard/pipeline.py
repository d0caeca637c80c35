"""
Ingestion pass.

Runs: fetch (per source, sequential) → dedupe → relevance pre-filter →
enrich (sponsor + B Corp + role priority) → score → quality gate → upsert.
"""
from __future__ import annotations

import fcntl
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Sequence

from jobboard import bcorp, sponsor_register
from jobboard.ai_scorer import AIScorer
from jobboard.config import DEFAULT_PROFILE, LOCK_PATH, ensure_dirs, get_env, load_profile
from jobboard.log import get_logger
from jobboard.models import EnrichedPosting, RawPosting, ScoredPosting
from jobboard.registry import RegistrySnapshot, check_bcorp, check_sponsor
from jobboard.relevance import is_relevant, role_priority
from jobboard.scorer import score_postings
from jobboard.sources import JobSource, get_sources
from jobboard.store import JobStore

log = get_logger(__name__)


class PassInProgressError(RuntimeError):
    """Another ingestion pass holds the lock."""


@dataclass(frozen=True)
class Registries:
    sponsors: Mapping[str, Any]
    bcorps: Mapping[str, Any]


class RegistryCache:
    """Process-wide registry snapshots, loaded lazily and swapped only between passes."""

    def __init__(
        self,
        sponsor_loader: Callable[[], RegistrySnapshot] = sponsor_register.load_sponsor_register,
        bcorp_loader: Callable[[], RegistrySnapshot] = bcorp.load_bcorp_directory,
    ) -> None:
        self._sponsor_loader = sponsor_loader
        self._bcorp_loader = bcorp_loader
        self._sponsors: RegistrySnapshot | None = None
        self._bcorps: RegistrySnapshot | None = None
        self._lock = threading.Lock()

    def current(self) -> Registries:
        with self._lock:
            if self._sponsors is None or self._sponsors.is_stale(sponsor_register.MAX_AGE):
                self._sponsors = self._sponsor_loader()
            if self._bcorps is None or self._bcorps.is_stale(bcorp.MAX_AGE):
                self._bcorps = self._bcorp_loader()
            return Registries(sponsors=self._sponsors, bcorps=self._bcorps)


@dataclass
class PassResult:
    total: int = 0
    per_source: dict[str, int] = field(default_factory=dict)
    dropped: int = 0
    verified: int = 0
    errors: dict[str, str] = field(default_factory=dict)


def enrich(raw: RawPosting, registries: Registries) -> EnrichedPosting:
    sponsor = check_sponsor(registries.sponsors, raw.company)
    rating = sponsor.record.get("rating") if sponsor.matched and isinstance(sponsor.record, dict) else None
    return EnrichedPosting(
        **asdict(raw),
        verified_sponsor=sponsor.matched,
        sponsor_rating=rating,
        is_bcorp=check_bcorp(registries.bcorps, raw.company).matched,
        role_priority=role_priority(raw.title),
    )


def dedupe(postings: Sequence[RawPosting]) -> list[RawPosting]:
    seen: set[str] = set()
    unique: list[RawPosting] = []
    for p in postings:
        if p.id not in seen:
            seen.add(p.id)
            unique.append(p)
    return unique


def process_source(
    source: JobSource,
    raw: Sequence[RawPosting],
    registries: Registries,
    *,
    profile: dict[str, Any],
    ai_scorer: AIScorer | None = None,
) -> tuple[list[ScoredPosting], int]:
    """Classify, enrich and score one source's postings; returns (kept, dropped by quality gate)."""
    relevant = [
        p for p in dedupe(raw)
        if is_relevant(p.title, p.description, p.tags, source.policy, p.search_query)
    ]
    scored = score_postings([enrich(p, registries) for p in relevant], profile, ai_scorer)
    min_score = (profile.get("quality") or {}).get("min_score", DEFAULT_PROFILE["quality"]["min_score"])
    kept = [s for s in scored if s.match_score >= min_score]
    return kept, len(scored) - len(kept)


_pass_lock = threading.Lock()


@contextmanager
def pass_lock(lock_path: Path = LOCK_PATH) -> Iterator[None]:
    """One pass at a time: in-process lock plus an advisory file lock for other processes."""
    if not _pass_lock.acquire(blocking=False):
        raise PassInProgressError("an ingestion pass is already running in this process")
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        with open(lock_path, "w") as f:
            try:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError as exc:
                raise PassInProgressError(f"an ingestion pass holds {lock_path.name}") from exc
            try:
                yield
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    finally:
        _pass_lock.release()


def run_pass(
    sources: Sequence[JobSource],
    registries: Registries,
    store: JobStore,
    *,
    ai_scorer: AIScorer | None = None,
    profile: dict[str, Any] | None = None,
    lock_path: Path = LOCK_PATH,
) -> PassResult:
    profile = profile or DEFAULT_PROFILE
    result = PassResult()

    with pass_lock(lock_path):
        store.initialize()
        log.info(
            "Starting pass over %d source(s) (%d sponsors, %d B Corps)",
            len(sources), len(registries.sponsors), len(registries.bcorps),
        )

        for source in sources:
            try:
                raw = source.fetch()
            except Exception as exc:
                log.error("[%s] FAILED: %s", source.name, exc)
                result.per_source[source.name] = 0
                result.errors[source.name] = str(exc)
                store.log_fetch(source.name, 0, f"error: {exc}")
                continue

            kept, dropped = process_source(source, raw, registries, profile=profile, ai_scorer=ai_scorer)
            store.upsert_many(kept)
            store.log_fetch(source.name, len(kept), "success")

            verified = sum(1 for s in kept if s.verified_sponsor)
            log.info(
                "[%s] fetched=%d kept=%d (%d verified sponsors)",
                source.name, len(raw), len(kept), verified,
            )
            if dropped:
                log.info("[%s] quality gate dropped %d low-scoring postings", source.name, dropped)

            result.per_source[source.name] = len(kept)
            result.total += len(kept)
            result.dropped += dropped
            result.verified += verified

    log.info(
        "Pass complete — total=%d verified=%d dropped=%d errors=%d",
        result.total, result.verified, result.dropped, len(result.errors),
    )
    return result


_registry_cache = RegistryCache()


def refresh(profile: dict[str, Any] | None = None, store: JobStore | None = None) -> PassResult:
    """Full pass with live sources, process registries and the env-configured AI scorer."""
    ensure_dirs()
    profile = profile or load_profile()
    store = store or JobStore()
    delay = (profile.get("ai") or {}).get("delay_seconds", DEFAULT_PROFILE["ai"]["delay_seconds"])
    ai_scorer = AIScorer.from_env(delay)
    log.info("Scoring mode: %s", "AI (Groq) with heuristic fallback" if ai_scorer else "heuristic")
    return run_pass(
        get_sources(get_env),
        _registry_cache.current(),
        store,
        ai_scorer=ai_scorer,
        profile=profile,
    )
