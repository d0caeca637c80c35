"""Load the career profile and env configuration."""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobboard.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"
REPORTS_DIR: Path = ROOT_DIR / "reports"
# DATA_DIR lets a host point the database and caches at a persistent disk.
DATA_DIR: Path = Path(os.environ.get("DATA_DIR") or ROOT_DIR / "data")
DB_PATH: Path = DATA_DIR / "jobs.db"
SPONSOR_CACHE_PATH: Path = DATA_DIR / "sponsor_cache.json"
BCORP_CACHE_PATH: Path = DATA_DIR / "bcorp_cache.json"
LOCK_PATH: Path = DATA_DIR / "ingest.lock"

DEFAULT_PROFILE: dict[str, Any] = {
    "candidate": {
        "name": "Alexis",
        "summary": (
            "US citizen with ESG consulting, sustainability communications and "
            "stakeholder engagement experience, relocating to London on a "
            "Skilled Worker visa."
        ),
    },
    "locations": {
        "city": "london",
        "region": ["uk", "united kingdom"],
    },
    "quality": {"min_score": 3},
    "digest": {"size": 5, "window_hours": 24},
    "ai": {"delay_seconds": 0.5},
    "schedule": {"hour": 6, "timezone": "Europe/London"},
}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_profile(path: Path | None = None) -> dict[str, Any]:
    """Profile YAML layered over DEFAULT_PROFILE; a missing file means defaults."""
    path = path or PROFILE_PATH
    if not path.exists():
        log.debug("No profile at %s — using defaults", path)
        return copy.deepcopy(DEFAULT_PROFILE)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return _merge(DEFAULT_PROFILE, data)


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def ensure_dirs() -> None:
    for d in (REPORTS_DIR, DATA_DIR):
        d.mkdir(parents=True, exist_ok=True)
