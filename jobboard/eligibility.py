"""Traffic-light estimate of Skilled Worker visa eligibility.

green   verified sponsor and salary at or above the applicable threshold
yellow  verified sponsor, but salary undisclosed or below the threshold
red     employer not on the Register of Licensed Sponsors
"""
from __future__ import annotations

from dataclasses import dataclass

from jobboard.models import VisaConfidence
from jobboard.occupation import GENERAL_THRESHOLD, going_rate


@dataclass(frozen=True)
class VisaVerdict:
    confidence: VisaConfidence
    reason: str


def _gbp(amount: int) -> str:
    return f"£{amount:,}"


def salary_threshold(occupation_code: str | None) -> int:
    """Higher of the occupation's new-entrant rate and the general threshold."""
    rate = going_rate(occupation_code)
    if rate is None:
        return GENERAL_THRESHOLD
    return max(rate.new_entrant, GENERAL_THRESHOLD)


def evaluate(sponsor_matched: bool, occupation_code: str | None, salary: int | None) -> VisaVerdict:
    if not sponsor_matched:
        return VisaVerdict(
            VisaConfidence.RED,
            "Company not found on Home Office Register of Licensed Sponsors",
        )

    rate = going_rate(occupation_code)
    threshold = salary_threshold(occupation_code)

    if not salary:
        return VisaVerdict(
            VisaConfidence.YELLOW,
            f"Verified sponsor but salary undisclosed — confirm ≥ {_gbp(threshold)} threshold",
        )

    if salary >= threshold:
        label = f"SOC {occupation_code} ({rate.title})" if rate else "general threshold"
        return VisaVerdict(
            VisaConfidence.GREEN,
            f"Verified sponsor + salary {_gbp(salary)} meets {label} minimum of {_gbp(threshold)}",
        )

    shortfall = threshold - salary
    lower = _gbp(rate.new_entrant) if rate else "varies"
    return VisaVerdict(
        VisaConfidence.YELLOW,
        f"Verified sponsor but salary {_gbp(salary)} is {_gbp(shortfall)} below the "
        f"{_gbp(threshold)} threshold — may qualify as new entrant (lower rate: {lower})",
    )
