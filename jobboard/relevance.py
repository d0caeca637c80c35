"""Keyword pre-filter: does a posting belong on an ESG board at all?

Two keyword tiers drive every variant:

* STRONG terms are ESG-specific; one hit is enough evidence.
* WEAK terms also turn up in unrelated copy ("responsible for", "business
  impact"), so they only count in a title or when three or more co-occur.

Sources differ in how much noise they return, so each is assigned a
:class:`RelevancePolicy`. The policies are configuration over the same two
lists rather than separate keyword copies.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from jobboard.rules import Rule, first_match

ESG_STRONG: tuple[str, ...] = (
    "esg", "sustainability", "sustainable development", "climate change",
    "carbon", "net zero", "net-zero", "decarbonisation", "decarbonization",
    "energy transition", "circular economy", "cleantech", "ghg", "emissions",
    "sdg", "tcfd", "sfdr", "csrd", "gri reporting", "gri standards",
    "scope 1", "scope 2", "scope 3", "double materiality", "taxonomy regulation",
    "green bond", "green finance", "sustainable finance",
    "climate risk", "climate consulting", "climate adaptation", "climate mitigation",
    "esg consulting", "esg advisory", "esg analyst", "esg reporting",
    "esg communications", "sustainability communications",
    "sustainability consultant", "sustainability reporting",
    "sustainability disclosure", "non-financial reporting", "integrated reporting",
    "responsible investment", "impact investing",
    "biodiversity", "nature-based", "just transition",
    "csr", "corporate social responsibility",
    "social impact", "impact assessment",
    "b corp", "science-based targets", "sbti",
)

ESG_WEAK: tuple[str, ...] = (
    "impact", "responsible", "governance", "environmental",
    "stewardship", "ethical", "purpose-driven", "stakeholder engagement",
    "renewable", "dei", "diversity equity inclusion",
    "corporate governance", "responsible business",
    "non-profit", "nonprofit", "ngo", "charity", "social enterprise",
    "ethical investment",
)

# Title shapes that plausibly belong on the board when the search itself was ESG-targeted.
ROLE_SHAPE_RE = re.compile(
    r"consultant|consult|advisor|advisory|analyst|communicat|report|strateg|"
    r"sustainab|esg|climate|carbon|environment|csr|planner|engagement",
    re.IGNORECASE,
)

WEAK_CORROBORATION = 3


class RelevancePolicy(str, Enum):
    GENERAL = "general"
    STRICT = "strict"
    SEARCH = "search"


@dataclass(frozen=True)
class _PolicyConfig:
    weak_tier: bool
    strong_in_title_or_tags: bool
    strong_desc_min: int
    trust_search_query: bool


_POLICIES: dict[RelevancePolicy, _PolicyConfig] = {
    # Strong anywhere, weak in title, or 3+ weak anywhere.
    RelevancePolicy.GENERAL: _PolicyConfig(
        weak_tier=True, strong_in_title_or_tags=False, strong_desc_min=1, trust_search_query=False,
    ),
    # Broad-category feeds: strong in title/tags, or 2+ distinct strong in description.
    RelevancePolicy.STRICT: _PolicyConfig(
        weak_tier=False, strong_in_title_or_tags=True, strong_desc_min=2, trust_search_query=False,
    ),
    # Keyword-search APIs with truncated snippets: GENERAL, or trust an ESG query + role-shaped title.
    RelevancePolicy.SEARCH: _PolicyConfig(
        weak_tier=True, strong_in_title_or_tags=False, strong_desc_min=1, trust_search_query=True,
    ),
}


def _hits(terms: tuple[str, ...], text: str) -> list[str]:
    return [kw for kw in terms if kw in text]


def _general(title: str, all_text: str) -> bool:
    if _hits(ESG_STRONG, all_text):
        return True
    if _hits(ESG_WEAK, title):
        return True
    return len(_hits(ESG_WEAK, all_text)) >= WEAK_CORROBORATION


def is_relevant(
    title: str | None,
    description: str | None,
    tags: str | None,
    policy: RelevancePolicy = RelevancePolicy.GENERAL,
    search_query: str | None = "",
) -> bool:
    title_l = (title or "").lower()
    desc_l = (description or "").lower()
    tags_l = (tags or "").lower()
    cfg = _POLICIES[policy]

    if cfg.strong_in_title_or_tags:
        if _hits(ESG_STRONG, title_l) or _hits(ESG_STRONG, tags_l):
            return True
        return len(_hits(ESG_STRONG, desc_l)) >= cfg.strong_desc_min

    if _general(title_l, f"{title_l} {desc_l} {tags_l}"):
        return True

    if cfg.trust_search_query:
        query_l = (search_query or "").lower()
        return bool(_hits(ESG_STRONG, query_l)) and bool(ROLE_SHAPE_RE.search(title_l))

    return False


ROLE_PRIORITY_RULES: tuple[Rule, ...] = (
    Rule(r"sustainability\s+consultant", 100),
    Rule(r"esg\s+analyst", 95),
    Rule(r"esg\s+consult", 90),
    Rule(r"sustainability\s+analyst", 88),
    Rule(r"climate\s+consult", 85),
    Rule(r"sustainability\s+manager", 80),
    Rule(r"esg\s+manager", 78),
    Rule(r"esg\s+advisor", 75),
    Rule(r"sustainability\s+director", 72),
    Rule(r"sustainability\s+lead", 70),
    Rule(r"climate\s+risk", 68),
    Rule(r"esg", 50),
    Rule(r"sustainability", 48),
    Rule(r"climate", 40),
    Rule(r"environment", 35),
    Rule(r"consult", 20),
    Rule(r"advisory", 20),
    Rule(r"impact", 15),
)


def role_priority(title: str | None) -> int:
    """Board ordering hint: how close the title is to the target role."""
    rule = first_match(ROLE_PRIORITY_RULES, title)
    return rule.weight if rule else 0
