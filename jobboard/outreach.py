"""Outreach kit: a LinkedIn note and three tailored résumé bullets, via Groq or template."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from openai import APIConnectionError, OpenAI, RateLimitError

from jobboard.ai_scorer import DEFAULT_MODEL, GROQ_BASE_URL
from jobboard.config import DEFAULT_PROFILE, get_env
from jobboard.log import get_logger
from jobboard.models import RawPosting
from jobboard.retry import retry
from jobboard.text import strip_html

log = get_logger(__name__)

_JSON_RE = re.compile(r"\{.*\}", re.DOTALL)


@dataclass
class OutreachKit:
    linkedin_message: str
    resume_bullets: list[str] = field(default_factory=list)
    generated_by: str = "template"


def _candidate_name(profile: dict[str, Any] | None) -> str:
    return ((profile or {}).get("candidate") or {}).get("name") or DEFAULT_PROFILE["candidate"]["name"]


@retry(max_attempts=2, base_delay=2.0, retryable=(APIConnectionError, RateLimitError))
def _call_groq(api_key: str, model: str, prompt: str) -> str:
    client = OpenAI(api_key=api_key, base_url=GROQ_BASE_URL)
    r = client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=512,
    )
    return (r.choices[0].message.content or "").strip()


def build_prompt(posting: RawPosting, name: str) -> str:
    themes = strip_html(posting.description)[:500]
    return f"""Generate an outreach kit for {name}, a US citizen with ESG consulting and sustainability communications experience relocating to London, applying for:

Job Title: {posting.title}
Company: {posting.company}
Key ESG themes from listing: {themes}

Produce EXACTLY this JSON (no other text):
{{
  "linkedin_message": "<a 3-4 sentence personalised LinkedIn connection message to the hiring manager, mentioning the specific role and 1-2 ESG themes from the listing>",
  "resume_bullets": [
    "<achievement-oriented bullet using metrics, tailored to this role's ESG focus>",
    "<achievement-oriented bullet highlighting relevant consulting/analytical skills>",
    "<achievement-oriented bullet showing cross-cultural or international experience>"
  ]
}}"""


def parse_kit(text: str) -> OutreachKit:
    """Raises ValueError when the reply is not a usable kit."""
    m = _JSON_RE.search(text or "")
    if not m:
        raise ValueError("no JSON object in reply")
    data = json.loads(m.group(0))
    message = data.get("linkedin_message") if isinstance(data, dict) else None
    bullets = data.get("resume_bullets") if isinstance(data, dict) else None
    if not message or not isinstance(bullets, list):
        raise ValueError("reply missing linkedin_message or resume_bullets")
    return OutreachKit(str(message).strip(), [str(b).strip() for b in bullets], generated_by="ai")


def template_kit(posting: RawPosting, profile: dict[str, Any] | None = None) -> OutreachKit:
    name = _candidate_name(profile)
    title = posting.title or "open"
    company = posting.company or "your company"
    return OutreachKit(
        linkedin_message=(
            f"Hi, I'm {name} — a US-based ESG consultant and sustainability communications "
            f"specialist exploring opportunities in London. I was excited to see the {title} role "
            f"at {company} and would love to learn more about the team's sustainability priorities. "
            "I bring hands-on experience in ESG strategy, stakeholder communications, and reporting "
            "frameworks like GRI and TCFD. Would you be open to a brief chat?"
        ),
        resume_bullets=[
            "Led ESG materiality assessments and stakeholder engagement programs for Fortune 500 "
            "clients, translating complex sustainability data into compelling narratives for "
            "investors and regulators.",
            "Developed sustainability communications strategies and reporting frameworks aligned "
            "with GRI, TCFD, and CSRD, reducing client disclosure preparation time by 40%.",
            "Coordinated cross-border ESG consulting projects spanning US and European markets, "
            "crafting stakeholder-facing content that supported $200M+ in sustainable investment "
            "decisions.",
        ],
    )


def generate_outreach_kit(posting: RawPosting, profile: dict[str, Any] | None = None) -> OutreachKit:
    api_key = get_env("GROQ_API_KEY")
    if not api_key:
        log.debug("No GROQ_API_KEY — using template outreach kit")
        return template_kit(posting, profile)

    model = get_env("GROQ_LLM_MODEL", DEFAULT_MODEL) or DEFAULT_MODEL
    try:
        kit = parse_kit(_call_groq(api_key, model, build_prompt(posting, _candidate_name(profile))))
        log.info("Outreach kit generated for %s @ %s", posting.title, posting.company)
        return kit
    except Exception as exc:
        log.warning("Outreach kit generation failed for %r (%s), using template", posting.title, exc)
        return template_kit(posting, profile)
