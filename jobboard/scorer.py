"""Score postings against the ESG consulting / communications profile.

Heuristic point model (capped at 100):

  title tier                       0-30   best single rule, no stacking
  ESG depth terms in text          3 each, max 25
  consulting / comms title bonus   +8 / +6, only with ESG context
  verified sponsor                 20 with ESG context, else 5
  source says it sponsors          10 with ESG context, else 3
  visa phrases in text             3 each, max 10
  location                         city 10 > region 7 > remote 5
  salary disclosed                 +5
  no ESG signal at all             -15 (floor 0)

``score_posting`` ties the engine together: occupation code, salary,
visa verdict, AI-or-heuristic score and success probability.
"""
from __future__ import annotations

import re
from dataclasses import asdict
from typing import Any

from jobboard.ai_scorer import AIScore, AIScorer, build_prompt
from jobboard.config import DEFAULT_PROFILE
from jobboard.eligibility import evaluate
from jobboard.log import get_logger
from jobboard.models import EnrichedPosting, ScoredPosting
from jobboard.occupation import infer_code
from jobboard.ranking import success_probability
from jobboard.rules import Rule, best_match
from jobboard.salary import parse_salary
from jobboard.text import strip_html

log = get_logger(__name__)

# Weight-0 rules mark generic roles that only earn points once ESG context exists.
TITLE_TIERS: tuple[Rule, ...] = (
    Rule(r"sustainability\s+consult", 30, "Sustainability Consultant"),
    Rule(r"esg\s+consult", 28, "ESG Consulting"),
    Rule(r"sustainability\s+communicat", 27, "Sustainability Communications"),
    Rule(r"esg\s+communicat", 26, "ESG Communications"),
    Rule(r"esg\s+analyst", 25, "ESG Analyst"),
    Rule(r"sustainability\s+analyst", 25, "Sustainability Analyst"),
    Rule(r"climate\s+consult", 25, "Climate Consulting"),
    Rule(r"sustainability\s+report", 24, "Sustainability Reporting"),
    Rule(r"esg\s+report", 23, "ESG Reporting"),
    Rule(r"csr\s+communicat", 22, "CSR Communications"),
    Rule(r"sustainability\s+manager", 21, "Sustainability Manager"),
    Rule(r"esg\s+manager", 20, "ESG Manager"),
    Rule(r"esg\s+advisor", 20, "ESG Advisory"),
    Rule(r"sustainability\s+director", 19, "Sustainability Director"),
    Rule(r"sustainability\s+lead", 19, "Sustainability Lead"),
    Rule(r"climate\s+risk", 18, "Climate Risk"),
    Rule(r"stakeholder\s+engagement", 18, "Stakeholder Engagement"),
    Rule(r"sustainability", 15, "Sustainability"),
    Rule(r"\besg\b", 15, "ESG"),
    Rule(r"climate", 12, "Climate"),
    Rule(r"carbon", 12, "Carbon"),
    Rule(r"net.zero", 12, "Net Zero"),
    Rule(r"\bcsr\b", 12, "CSR"),
    Rule(r"environment", 10, "Environment"),
    Rule(r"consult", 0, "_consulting"),
    Rule(r"advisory", 0, "_advisory"),
    Rule(r"communicat", 0, "_communications"),
)

ESG_DEEP_TERMS: tuple[str, ...] = (
    "tcfd", "sfdr", "csrd", "gri", "scope 1", "scope 2", "scope 3",
    "double materiality", "taxonomy", "sdg", "green bond",
    "decarbonisation", "decarbonization", "circular economy",
    "energy transition", "biodiversity", "stakeholder engagement",
    "responsible investment", "impact investing",
    "sustainability report", "non-financial reporting", "integrated reporting",
    "esg disclosure", "sustainability disclosure", "materiality assessment",
    "corporate communications", "sustainability communications",
    "science-based targets", "sbti", "net zero commitment",
    "just transition", "climate adaptation", "nature-based",
)

VISA_SIGNAL_TERMS: tuple[str, ...] = (
    "visa sponsor", "sponsorship", "skilled worker visa",
    "right to work", "will sponsor", "visa support",
    "relocation support", "relocation package", "international candidates",
    "work permit",
)

DEPTH_POINTS, DEPTH_CAP = 3, 25
VISA_POINTS, VISA_CAP = 3, 10
CONSULTING_BONUS, COMMS_BONUS = 8, 6
SPONSOR_BONUS = (20, 5)
LISTED_SPONSOR_BONUS = (10, 3)
CITY_BONUS, REGION_BONUS, REMOTE_BONUS = 10, 7, 5
SALARY_BONUS = 5
NOISE_PENALTY = 15
CONTEXT_TIER_MIN = 10

_CONSULTING_RE = re.compile(r"consult|advisory|advisor", re.IGNORECASE)
_COMMS_RE = re.compile(r"communicat|report|disclosure", re.IGNORECASE)

VERIFIED_SPONSOR_REASON = "Verified UK visa sponsor"


def _profile_value(profile: dict[str, Any] | None, section: str, key: str) -> Any:
    profile = profile or DEFAULT_PROFILE
    return (profile.get(section) or {}).get(key, DEFAULT_PROFILE[section][key])


def heuristic_score(posting: EnrichedPosting, profile: dict[str, Any] | None = None) -> tuple[int, list[str]]:
    """Deterministic 0-100 score plus the reasons that produced it, in order."""
    score = 0
    reasons: list[str] = []

    title = posting.title or ""
    all_text = f"{title.lower()} {strip_html(posting.description).lower()}"

    # 1. Title tier
    tier = best_match(TITLE_TIERS, title)
    role_pts = tier.weight if tier else 0
    role_label = tier.label if tier else ""
    score += role_pts
    if role_label and not role_label.startswith("_"):
        reasons.append(f'Title matches "{role_label}"')

    # 2. ESG depth
    esg_hits = [term.upper() for term in ESG_DEEP_TERMS if term in all_text]
    score += min(DEPTH_POINTS * len(esg_hits), DEPTH_CAP)
    has_context = bool(esg_hits) or role_pts >= CONTEXT_TIER_MIN
    if esg_hits:
        reasons.append(f"References {', '.join(esg_hits[:3])}")

    # 3. Consulting / communications, only once the role is ESG
    generic_role = role_label.startswith("_")
    if has_context:
        if _CONSULTING_RE.search(title):
            score += CONSULTING_BONUS
            if generic_role:
                reasons.append("Consulting/advisory role with ESG context")
        if _COMMS_RE.search(title):
            score += COMMS_BONUS
            if generic_role:
                reasons.append("Communications/reporting role with ESG context")

    # 4. Sponsor
    if posting.verified_sponsor:
        score += SPONSOR_BONUS[0] if has_context else SPONSOR_BONUS[1]
        reasons.append(VERIFIED_SPONSOR_REASON)
    elif posting.visa_sponsorship:
        score += LISTED_SPONSOR_BONUS[0] if has_context else LISTED_SPONSOR_BONUS[1]
        reasons.append("Listed as visa-sponsoring")

    # 5. Visa phrases
    visa_pts = min(VISA_POINTS * sum(1 for t in VISA_SIGNAL_TERMS if t in all_text), VISA_CAP)
    score += visa_pts
    if visa_pts and not any("visa" in r for r in reasons):
        reasons.append("Description mentions visa/sponsorship support")

    # 6. Location
    city = str(_profile_value(profile, "locations", "city")).lower()
    region = [r.lower() for r in _profile_value(profile, "locations", "region")]
    loc = (posting.location or "").lower()
    if city and city in loc:
        score += CITY_BONUS
        reasons.append(f"Based in {city.title()}")
    elif any(r in loc for r in region):
        score += REGION_BONUS
        reasons.append("Based in UK")
    elif posting.remote:
        score += REMOTE_BONUS
        reasons.append("Remote-friendly")

    # 7. Salary transparency
    if posting.salary:
        score += SALARY_BONUS
        reasons.append("Salary disclosed")

    # 8. Noise rejection
    if not has_context and role_pts == 0:
        score = max(score - NOISE_PENALTY, 0)
        reasons.append("No clear ESG relevance in title or description")

    return min(score, 100), reasons


def summarize(
    posting: EnrichedPosting,
    score: int,
    reasons: list[str],
    profile: dict[str, Any] | None = None,
) -> str:
    """Two sentences: ESG fit, then visa likelihood."""
    name = _profile_value(profile, "candidate", "name")
    title = posting.title or "this role"
    company = posting.company or "this company"

    if score >= 70:
        first = f"This {title} role at {company} is a strong match for {name}'s ESG consulting and communications career goals"
    elif score >= 40:
        first = f"This {title} position at {company} aligns with {name}'s interest in ESG, sustainability, and stakeholder communications"
    else:
        first = f"This {title} role at {company} has some relevance to {name}'s ESG consulting and communications path"

    esg_reasons = [r for r in reasons if r.startswith("References") or r.startswith("Title matches")]
    if esg_reasons:
        first += f", with {esg_reasons[0].lower()}"
    first += "."

    if VERIFIED_SPONSOR_REASON in reasons:
        second = f"{company} is a verified UK visa sponsor on the Home Office register, making visa support highly likely."
    elif any("visa" in r.lower() or "sponsor" in r.lower() for r in reasons):
        second = "The listing signals visa sponsorship availability, which is encouraging for US citizens seeking London relocation."
    elif posting.remote:
        second = "As a remote role, it may not require visa sponsorship initially, though relocation could be explored later."
    else:
        second = f"Visa sponsorship status is not explicitly stated — {name} should confirm this directly with the employer."

    return f"{first} {second}"


def score_posting(
    posting: EnrichedPosting,
    profile: dict[str, Any] | None = None,
    ai_scorer: AIScorer | None = None,
) -> ScoredPosting:
    occupation = infer_code(posting.title)
    salary = parse_salary(posting.salary)
    verdict = evaluate(posting.verified_sponsor, occupation.code, salary)

    score, reasons = heuristic_score(posting, profile)
    summary = ""
    if ai_scorer is not None:
        prompt = build_prompt(
            posting,
            candidate=_profile_value(profile, "candidate", "name"),
            occupation_code=occupation.code,
            salary=salary,
            visa_confidence=verdict.confidence.value,
        )
        outcome = ai_scorer.score(prompt, title=posting.title)
        if isinstance(outcome, AIScore):
            score, summary = outcome.score, outcome.summary
    if not summary:
        summary = summarize(posting, score, reasons, profile)

    return ScoredPosting(
        **asdict(posting),
        occupation_code=occupation.code,
        occupation_label=occupation.label,
        salary_annual_gbp=salary,
        visa_confidence=verdict.confidence,
        visa_reason=verdict.reason,
        match_score=score,
        ai_summary=summary,
        success_probability=success_probability(score, verdict.confidence),
        reasons=reasons,
    )


def score_postings(
    postings: list[EnrichedPosting],
    profile: dict[str, Any] | None = None,
    ai_scorer: AIScorer | None = None,
) -> list[ScoredPosting]:
    scored: list[ScoredPosting] = []
    for p in postings:
        try:
            scored.append(score_posting(p, profile, ai_scorer))
        except Exception as exc:
            log.error("Skipping %r @ %s: scoring failed (%s)", p.title, p.company, exc)
    log.info("Scored %d postings (%s)", len(scored), "AI + heuristic fallback" if ai_scorer else "heuristic")
    return scored
