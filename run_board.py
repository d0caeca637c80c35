#!/usr/bin/env python3
"""Command-line entry point for the ESG job board.

  python run_board.py refresh   fetch, score and store postings from every source
  python run_board.py digest    email the top postings from the last 24 hours
  python run_board.py stats     print board totals
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobboard.config import ensure_dirs, load_profile
from jobboard.log import get_logger
from jobboard.store import JobStore

log = get_logger(__name__)


def cmd_refresh(store: JobStore, profile: dict) -> int:
    from jobboard.pipeline import PassInProgressError, refresh

    try:
        result = refresh(profile, store)
    except PassInProgressError as exc:
        log.warning("Refresh not started: %s", exc)
        return 1
    log.info("Refresh complete.")
    for name, count in result.per_source.items():
        err = result.errors.get(name)
        log.info("  %-12s %d%s", name, count, f"  (error: {err})" if err else "")
    log.info("  Total kept: %d", result.total)
    log.info("  Verified sponsors: %d", result.verified)
    log.info("  Dropped by quality gate: %d", result.dropped)
    return 0


def cmd_digest(store: JobStore, profile: dict) -> int:
    from jobboard.digest import send_daily_digest

    ok, msg = send_daily_digest(store, profile)
    log.info("Digest: %s", msg)
    return 0 if ok else 1


def cmd_stats(store: JobStore, profile: dict) -> int:
    stats = store.stats()
    log.info("Postings: %d (avg score %d)", stats["total"], stats["avg_score"])
    log.info("Verified sponsors: %d  B Corps: %d  Golden: %d",
             stats["verified_count"], stats["bcorp_count"], stats["golden_count"])
    for name, count in sorted(stats["sources"].items()):
        log.info("  %-12s %d", name, count)
    for label, counts in (("Visa", stats["visa_counts"]), ("Status", stats["status_counts"])):
        log.info("%s: %s", label, ", ".join(f"{k}={v}" for k, v in sorted(counts.items())) or "none")
    last = stats["last_fetch"]
    if last:
        log.info("Last fetch: %s at %s (%s)", last["source"], last["fetched_at"], last["status"])
    return 0


COMMANDS = {"refresh": cmd_refresh, "digest": cmd_digest, "stats": cmd_stats}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="ESG job board")
    parser.add_argument("command", choices=sorted(COMMANDS))
    args = parser.parse_args()

    ensure_dirs()
    store = JobStore()
    store.initialize()
    sys.exit(COMMANDS[args.command](store, load_profile()))
