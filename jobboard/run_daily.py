"""
Refresh the board daily at 06:00 UK time, then email the digest.

Usage:
  - Cron (recommended): install with ``python setup_cron.py``, which runs
      0 6 * * * TZ=Europe/London cd /path/to/project && .venv/bin/python -m jobboard.run_daily --once
  - Or keep this process running: ``python -m jobboard.run_daily``
"""
from __future__ import annotations

import argparse
import time
from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from jobboard.config import DEFAULT_PROFILE, load_profile
from jobboard.digest import send_daily_digest
from jobboard.log import get_logger
from jobboard.pipeline import PassInProgressError, PassResult, refresh
from jobboard.store import JobStore

log = get_logger(__name__)

TARGET_MINUTE = 0


def _schedule(profile: dict[str, Any]) -> tuple[int, ZoneInfo]:
    sched = {**DEFAULT_PROFILE["schedule"], **(profile.get("schedule") or {})}
    return int(sched["hour"]), ZoneInfo(sched["timezone"])


def run_once_and_email(profile: dict[str, Any] | None = None) -> PassResult | None:
    profile = profile or load_profile()
    store = JobStore()
    try:
        result = refresh(profile, store)
    except PassInProgressError as exc:
        log.warning("Skipping scheduled pass: %s", exc)
        return None
    ok, msg = send_daily_digest(store, profile)
    if not ok:
        log.info("Digest not sent: %s", msg)
    return result


def next_run(now: datetime, hour: int) -> datetime:
    target = now.replace(hour=hour, minute=TARGET_MINUTE, second=0, microsecond=0)
    if now >= target:
        target = target + timedelta(days=1)
    return target


def main() -> None:
    profile = load_profile()
    hour, tz = _schedule(profile)
    log.info("Scheduler: run daily at %d:%02d %s", hour, TARGET_MINUTE, tz.key)
    while True:
        now = datetime.now(tz)
        target = next_run(now, hour)
        wait_secs = (target - now).total_seconds()
        log.info("Next run at %s (in %.1f hours)", target, wait_secs / 3600)
        time.sleep(min(wait_secs, 86400))
        now = datetime.now(tz)
        if now.hour == hour and now.minute < 30:
            log.info("Running daily pass...")
            run_once_and_email(profile)
            log.info("Done. Next run tomorrow.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--once", action="store_true", help="run one pass + digest and exit")
    args = parser.parse_args()
    if args.once:
        run_once_and_email()
    else:
        main()
