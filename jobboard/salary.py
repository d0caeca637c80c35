"""Free-text salary -> single annual GBP figure.

Deliberately lossy: a range collapses to its midpoint, foreign currencies
use fixed conversion rates, and "45k" style shorthand is recognised by the
value being too small to be an annual salary.
"""
from __future__ import annotations

import re

USD_TO_GBP = 0.79
EUR_TO_GBP = 0.85
THOUSANDS_BELOW = 500
BARE_MIN = 15_000
BARE_MAX = 300_000

_NUM = r"(\d+(?:\.\d+)?)\s*k?\b"
_CURRENCY_PATTERNS: list[tuple[re.Pattern, float]] = [
    (re.compile(r"(?:£|gbp\s*)" + _NUM), 1.0),
    (re.compile(r"(?:usd\s*|\$\s*)" + _NUM), USD_TO_GBP),
    (re.compile(r"(?:eur\s*|€\s*)" + _NUM), EUR_TO_GBP),
]
_BARE_RE = re.compile(r"\d{4,6}")


def _round(value: float) -> int:
    # Halves round up, unlike round().
    return int(value + 0.5)


def _currency_figure(text: str, pattern: re.Pattern, rate: float) -> int | None:
    nums: list[float] = []
    for m in pattern.finditer(text):
        val = float(m.group(1))
        if val < THOUSANDS_BELOW:
            val *= 1000
        if val > 0:
            nums.append(val * rate)
    if len(nums) >= 2:
        return _round((nums[0] + nums[1]) / 2)
    if nums:
        return _round(nums[0])
    return None


def parse_salary(text: str | None) -> int | None:
    """Annual GBP salary from strings like "£40,000 - £50,000", "$60k", "€55000".

    GBP markers win over USD, USD over EUR; otherwise bare 4-6 digit figures
    in a plausible annual range are used. Returns ``None`` when nothing fits.
    """
    if not text:
        return None
    cleaned = text.replace(",", "").lower()

    for pattern, rate in _CURRENCY_PATTERNS:
        figure = _currency_figure(cleaned, pattern, rate)
        if figure is not None:
            return figure

    bare = [int(n) for n in _BARE_RE.findall(cleaned)]
    bare = [n for n in bare if BARE_MIN <= n <= BARE_MAX]
    if len(bare) >= 2:
        return _round((bare[0] + bare[-1]) / 2)
    if bare:
        return bare[0]
    return None
