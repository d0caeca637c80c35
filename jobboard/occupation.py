"""Job title -> SOC 2020 occupation code and Skilled Worker going rates.

Rates follow Appendix Skilled Worker (Feb 2026). Only the first matching
title rule counts, so specific phrases sit above the one-word catch-alls.
"""
from __future__ import annotations

from dataclasses import dataclass

from jobboard.rules import Rule, first_match

GENERAL_THRESHOLD = 41_700


@dataclass(frozen=True)
class GoingRate:
    title: str
    standard: int
    new_entrant: int


SOC_GOING_RATES: dict[str, GoingRate] = {
    "2431": GoingRate("Management consultants", 50_200, 36_000),
    "2152": GoingRate("Environment professionals", 37_200, 31_400),
    "2151": GoingRate("Conservation professionals", 36_000, 29_800),
    "3545": GoingRate("Data analysts", 34_900, 28_600),
    "2425": GoingRate("Actuaries, economists, statisticians", 43_600, 33_400),
    "2424": GoingRate("Business & financial project mgmt", 41_700, 33_100),
    "2423": GoingRate("Management consultants & analysts", 41_700, 33_100),
    "2136": GoingRate("Programmers & software developers", 45_100, 34_200),
    "2463": GoingRate("Environmental health professionals", 35_400, 29_000),
}

_CONSULTANTS = "Management consultants"
_ANALYSTS = "Data analysts"
_ENVIRONMENT = "Environment professionals"
_CONSERVATION = "Conservation professionals"

SOC_TITLE_RULES: tuple[Rule, ...] = (
    Rule(r"sustainability\s+consultant", code="2431", label=_CONSULTANTS),
    Rule(r"esg\s+consultant", code="2431", label=_CONSULTANTS),
    Rule(r"climate\s+consultant", code="2431", label=_CONSULTANTS),
    Rule(r"management\s+consultant", code="2431", label=_CONSULTANTS),
    Rule(r"esg\s+analyst", code="3545", label=_ANALYSTS),
    Rule(r"sustainability\s+analyst", code="3545", label=_ANALYSTS),
    Rule(r"data\s+analyst", code="3545", label=_ANALYSTS),
    Rule(r"climate\s+analyst", code="3545", label=_ANALYSTS),
    Rule(r"environment(al)?\s+(professional|officer|manager|specialist|advisor)", code="2152", label=_ENVIRONMENT),
    Rule(r"sustainability\s+(manager|director|lead|officer|head)", code="2152", label=_ENVIRONMENT),
    Rule(r"esg\s+(manager|director|lead|officer|head)", code="2152", label=_ENVIRONMENT),
    Rule(r"conservation", code="2151", label=_CONSERVATION),
    Rule(r"biodiversity", code="2151", label=_CONSERVATION),
    Rule(r"ecolog", code="2151", label=_CONSERVATION),
    Rule(r"environmental\s+health", code="2463", label="Environmental health professionals"),
    Rule(r"esg\s+advisor", code="2431", label=_CONSULTANTS),
    Rule(r"climate\s+risk", code="2425", label="Actuaries, economists, statisticians"),
    Rule(r"sustainability\s+report", code="2431", label=_CONSULTANTS),
    Rule(r"sustainability\s+communicat", code="2431", label=_CONSULTANTS),
    Rule(r"esg\s+communicat", code="2431", label=_CONSULTANTS),
    Rule(r"csr\s+communicat", code="2431", label=_CONSULTANTS),
    Rule(r"project\s+manager", code="2424", label="Business & financial project mgmt"),
    Rule(r"consult", code="2431", label=_CONSULTANTS),
    Rule(r"advisory", code="2431", label=_CONSULTANTS),
)


@dataclass(frozen=True)
class Occupation:
    code: str | None
    label: str | None


UNMAPPED = Occupation(code=None, label=None)


def infer_code(title: str | None) -> Occupation:
    rule = first_match(SOC_TITLE_RULES, title)
    if rule is None:
        return UNMAPPED
    return Occupation(code=rule.code, label=rule.label)


def going_rate(code: str | None) -> GoingRate | None:
    if not code:
        return None
    return SOC_GOING_RATES.get(code)
