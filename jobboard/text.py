"""Company-name normalization and description clean-up."""
from __future__ import annotations

import re

from bs4 import BeautifulSoup

_QUOTES_RE = re.compile("[\"'“”‘’]")
_LEGAL_SUFFIX_RE = re.compile(
    r"\b(ltd|limited|llp|plc|inc|corp|corporation|gmbh|ag|group|holdings|uk)\b",
    re.IGNORECASE,
)
_DISALLOWED_RE = re.compile(r"[^a-z0-9\s&]")
_SPACE_RE = re.compile(r"\s+")


def normalize_company(name: str | None) -> str:
    """Canonical lookup key for an organisation name.

    Idempotent and total: ``normalize_company(normalize_company(x)) ==
    normalize_company(x)`` and empty or junk input gives ``""``.
    """
    if not name:
        return ""
    key = name.lower()
    key = _QUOTES_RE.sub("", key)
    key = _LEGAL_SUFFIX_RE.sub("", key)
    key = _DISALLOWED_RE.sub("", key)
    key = _SPACE_RE.sub(" ", key).strip()
    # Stripping punctuation can expose a suffix word ("ltd." -> "ltd"), so
    # repeat until stable.
    again = _SPACE_RE.sub(" ", _LEGAL_SUFFIX_RE.sub("", key)).strip()
    while again != key:
        key = again
        again = _SPACE_RE.sub(" ", _LEGAL_SUFFIX_RE.sub("", key)).strip()
    return key


def strip_html(text: str | None) -> str:
    """Plain text with entities decoded and whitespace collapsed."""
    if not text:
        return ""
    plain = BeautifulSoup(text, "html.parser").get_text(" ")
    return _SPACE_RE.sub(" ", plain).strip()


def decode_entities(text: str | None) -> str:
    """Decode HTML entities in a short field such as a title or company."""
    if not text:
        return ""
    if "&" not in text and "<" not in text:
        return text.strip()
    return strip_html(text)
