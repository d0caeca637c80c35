"""Ordered (pattern, weight, label) rule tables and the reducers over them.

The occupation mapper, role priority and the scorer's title tiers all walk
an ordered list of regex rules; they share these two reducers.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True)
class Rule:
    pattern: str
    weight: int = 0
    label: str = ""
    code: str | None = None
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern, re.IGNORECASE))

    def matches(self, text: str | None) -> bool:
        return bool(text) and self.regex.search(text) is not None


def first_match(rules: Iterable[Rule], text: str | None) -> Rule | None:
    """First rule in list order whose pattern matches."""
    if not text:
        return None
    for rule in rules:
        if rule.matches(text):
            return rule
    return None


def best_match(rules: Iterable[Rule], text: str | None) -> Rule | None:
    """Highest-weight matching rule; earlier rules win ties."""
    if not text:
        return None
    best: Rule | None = None
    for rule in rules:
        if rule.matches(text) and (best is None or rule.weight > best.weight):
            best = rule
    return best
