"""Logging setup for the board: console plus one file per day."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_ROOT = Path(__file__).resolve().parent.parent
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log every HTTP request at INFO.
_CHATTY = ("httpx", "httpcore", "openai", "urllib3")

_configured = False


def log_dir() -> Path:
    """``logs/`` beside the data directory, so hosted runs keep them on the same disk."""
    data_dir = os.environ.get("DATA_DIR")
    return Path(data_dir) / "logs" if data_dir else _ROOT / "logs"


def get_logger(name: str) -> logging.Logger:
    global _configured
    if not _configured:
        _configure(os.environ.get("LOG_LEVEL", "INFO"))
        _configured = True
    return logging.getLogger(name)


def _configure(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    for name in _CHATTY:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if root.handlers:
        return

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    directory = log_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(directory / f"board_{datetime.now():%Y-%m-%d}.log", encoding="utf-8")
    except OSError:
        root.warning("Log directory %s not writable; console logging only", directory)
        return
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)
    root.addHandler(fh)
