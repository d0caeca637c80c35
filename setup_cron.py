#!/usr/bin/env python3
"""
Install the cron job that refreshes the board and mails the digest daily.
Hour and timezone come from config/profile.yaml (default 06:00 Europe/London).
Run once: python setup_cron.py
"""
from __future__ import annotations

import subprocess
from pathlib import Path

from jobboard.config import DEFAULT_PROFILE, load_profile

ROOT = Path(__file__).resolve().parent
venv_python = ROOT / ".venv" / "bin" / "python"
CRONTAB_FILE = ROOT / "crontab.txt"
MARKER = "-m jobboard.run_daily"


def cron_entry(hour: int, tz: str) -> str:
    return f"0 {hour} * * * TZ={tz} cd {ROOT} && {venv_python} {MARKER} --once"


def merge_crontab(existing: str, entry: str) -> str:
    """Existing crontab with any earlier board line swapped for ``entry``."""
    kept = [line for line in existing.splitlines() if line.strip() and MARKER not in line]
    return "\n".join(kept + [entry])


def _current_crontab() -> str:
    out = subprocess.run(["crontab", "-l"], capture_output=True, text=True, timeout=5)
    return (out.stdout or "").strip() if out.returncode == 0 else ""


def _write_crontab_file(content: str) -> None:
    CRONTAB_FILE.write_text(content + "\n", encoding="utf-8")
    print(f"Wrote {CRONTAB_FILE}. Install it with: crontab {CRONTAB_FILE}")


def main() -> int:
    sched = {**DEFAULT_PROFILE["schedule"], **(load_profile().get("schedule") or {})}
    hour, tz = int(sched["hour"]), sched["timezone"]
    entry = cron_entry(hour, tz)

    if not venv_python.exists():
        print("Error: .venv not found. Run: python -m venv .venv && .venv/bin/pip install -e .")
        return 1
    try:
        existing = _current_crontab()
        if entry in existing.splitlines():
            print("Cron entry already present. No change.")
            return 0
        new_crontab = merge_crontab(existing, entry)
        proc = subprocess.run(["crontab", "-"], input=new_crontab + "\n", capture_output=True, text=True, timeout=5)
    except FileNotFoundError:
        print("crontab not found. On Windows use Task Scheduler; on Mac/Linux ensure cron is available.")
        _write_crontab_file(entry)
        return 1
    except subprocess.TimeoutExpired:
        print("crontab timed out.")
        _write_crontab_file(entry)
        return 1

    if proc.returncode != 0:
        print(f"Could not install crontab automatically: {proc.stderr.strip()}")
        _write_crontab_file(new_crontab)
        return 1
    print(f"Cron installed: daily at {hour}:00 {tz}")
    print(f"  Entry: {entry}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
