from __future__ import annotations

import hashlib
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable

from jobboard.log import get_logger
from jobboard.models import RawPosting
from jobboard.relevance import RelevancePolicy

log = get_logger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; ESGJobBoard/1.0)"
TIMEOUT = 20

# Location substrings a UK-based candidate can work from.
UK_MARKERS = ("london", "uk", "united kingdom", "england", "britain")


def short_hash(text: str) -> str:
    return hashlib.sha256(text.encode()).hexdigest()[:12]


def is_uk(location: str | None) -> bool:
    loc = (location or "").lower()
    return any(m in loc for m in UK_MARKERS)


class JobSource(ABC):
    """One job board. ``fetch`` walks ``queries`` with a pause between calls.

    A failing query is logged and skipped so one bad request does not cost
    the rest of the source. When every query fails the last error is raised,
    and the pipeline records the source as failed.
    """

    name: str = ""
    key: str = ""
    policy: RelevancePolicy = RelevancePolicy.GENERAL
    pause: float = 1.0

    def __init__(self, env_getter: Callable[..., str] | None = None, sleep: Callable[[float], None] = time.sleep) -> None:
        self.env_getter = env_getter
        self._sleep = sleep

    def queries(self) -> Iterable[Any]:
        return [None]

    @abstractmethod
    def _fetch(self, query: Any) -> list[RawPosting]:
        ...

    def fetch(self) -> list[RawPosting]:
        postings: list[RawPosting] = []
        seen: set[str] = set()
        last_error: Exception | None = None
        answered = 0
        for i, query in enumerate(self.queries()):
            if i:
                self._sleep(self.pause)
            try:
                batch = self._fetch(query)
            except Exception as exc:
                log.warning("[%s] query=%r error: %s", self.name, query, exc)
                last_error = exc
                continue
            answered += 1
            fresh = [p for p in batch if p.id not in seen]
            seen.update(p.id for p in fresh)
            postings.extend(fresh)
            log.debug("[%s] query=%r returned %d (%d new)", self.name, query, len(batch), len(fresh))
        if last_error is not None and not answered:
            raise last_error
        return postings
