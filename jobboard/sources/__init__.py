from .adzuna import AdzunaSource
from .arbeitnow import ArbeitnowSource
from .base import JobSource
from .greenjobs import GreenJobsSource
from .jobicy import JobicySource
from .jooble import JoobleSource
from .muse import MuseSource
from .reed import ReedSource
from .remotive import RemotiveSource

from jobboard.log import get_logger

log = get_logger(__name__)

__all__ = [
    "JobSource", "AdzunaSource", "ArbeitnowSource", "GreenJobsSource",
    "JobicySource", "JoobleSource", "MuseSource", "ReedSource", "RemotiveSource",
    "SOURCE_NAMES", "get_sources",
]

ALL_SOURCES: tuple[type[JobSource], ...] = (
    JobicySource, ArbeitnowSource, GreenJobsSource, JoobleSource,
    MuseSource, RemotiveSource, ReedSource, AdzunaSource,
)
SOURCE_NAMES: tuple[str, ...] = tuple(cls.name for cls in ALL_SOURCES)


def get_sources(env_getter) -> list[JobSource]:
    """Keyless boards always; keyed boards only when their credentials are set."""
    sources: list[JobSource] = [
        JobicySource(env_getter),
        ArbeitnowSource(env_getter),
        GreenJobsSource(env_getter),
    ]

    if env_getter("JOOBLE_API_KEY"):
        sources.append(JoobleSource(env_getter))
    else:
        log.info("Jooble skipped — no JOOBLE_API_KEY (free at jooble.org/api/about)")

    sources.append(MuseSource(env_getter))
    sources.append(RemotiveSource(env_getter))

    if env_getter("REED_API_KEY"):
        sources.append(ReedSource(env_getter))
    else:
        log.info("Reed skipped — no REED_API_KEY (free at reed.co.uk/developers)")

    if env_getter("ADZUNA_APP_ID") and env_getter("ADZUNA_APP_KEY"):
        sources.append(AdzunaSource(env_getter))
    else:
        log.info("Adzuna skipped — no ADZUNA_APP_ID/ADZUNA_APP_KEY (free at developer.adzuna.com)")

    log.info("Registered sources: %s", ", ".join(s.name for s in sources))
    return sources
