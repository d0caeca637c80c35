"""Optional LLM scoring via Groq's OpenAI-compatible API.

Every failure (HTTP error, timeout, non-JSON reply, missing fields) comes
back as :class:`AIUnavailable` so the caller falls through to the
deterministic heuristic. Nothing here raises into the pipeline.
"""
from __future__ import annotations

import json
import re
import threading
import time
from dataclasses import dataclass
from typing import Any, Union

from openai import APIConnectionError, OpenAI, RateLimitError

from jobboard.config import get_env
from jobboard.eligibility import salary_threshold
from jobboard.log import get_logger
from jobboard.models import EnrichedPosting
from jobboard.occupation import going_rate
from jobboard.retry import retry
from jobboard.text import strip_html

log = get_logger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
_JSON_RE = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True)
class AIScore:
    score: int
    summary: str


@dataclass(frozen=True)
class AIUnavailable:
    reason: str


AIOutcome = Union[AIScore, AIUnavailable]


def build_prompt(
    posting: EnrichedPosting,
    *,
    candidate: str,
    occupation_code: str | None,
    salary: int | None,
    visa_confidence: str,
) -> str:
    plain_desc = strip_html(posting.description)[:3000]
    rate = going_rate(occupation_code)
    if salary:
        salary_info = f"£{salary:,} (threshold: £{salary_threshold(occupation_code):,})"
    else:
        salary_info = "Not disclosed"
    soc_info = f"{occupation_code} ({rate.title})" if rate else (occupation_code or "Not mapped")

    return f"""You are scoring a job listing for {candidate}, a US citizen with experience in ESG consulting, sustainability communications, and stakeholder engagement who wants to relocate to London on a Skilled Worker visa.

Job Title: {posting.title}
Company: {posting.company}
Location: {posting.location}
Remote: {"Yes" if posting.remote else "No"}
Verified UK Visa Sponsor: {"Yes" if posting.verified_sponsor else "No"}
Visa Confidence: {visa_confidence}
Source: {posting.source}
Salary: {salary_info}
SOC Code: {soc_info}

Description excerpt:
{plain_desc}

Score this job 1-100 based on:
- Role relevance to ESG consulting, sustainability communications, or reporting work (40%)
- Likelihood of visa sponsorship for a US citizen (30%)
- London-based or UK-accessible location (15%)
- Career growth & impact potential (15%)

IMPORTANT: Score 1-20 if the role has no clear ESG/sustainability/climate theme. Score 40+ only if the role clearly involves ESG, sustainability, climate, or related consulting/communications work.

Then write EXACTLY 2 sentences:
Sentence 1: Why this role fits {candidate}'s ESG consulting and communications career goals (mention specific ESG themes from the description).
Sentence 2: The likelihood of visa support based on the text and sponsor verification status.

Respond in this exact JSON format only, no other text:
{{"score": <number>, "summary": "<two sentences>"}}"""


def parse_reply(text: str) -> AIOutcome:
    match = _JSON_RE.search(text or "")
    if not match:
        return AIUnavailable("no JSON object in reply")
    try:
        data: Any = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        return AIUnavailable(f"malformed JSON: {exc}")
    if not isinstance(data, dict) or "score" not in data or not data.get("summary"):
        return AIUnavailable("reply missing score or summary")
    try:
        score = int(float(data["score"]))
    except (TypeError, ValueError, OverflowError):
        return AIUnavailable(f"non-numeric score {data['score']!r}")
    return AIScore(score=max(1, min(100, score)), summary=str(data["summary"]).strip())


class AIScorer:
    """Serialized, rate-limited LLM scorer. One call at a time, ``delay`` seconds apart."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        delay: float = 0.5,
        client: Any = None,
    ) -> None:
        self.model = model
        self.delay = delay
        self._client = client or OpenAI(api_key=api_key, base_url=GROQ_BASE_URL)
        self._lock = threading.Lock()
        self._last_call = 0.0

    @classmethod
    def from_env(cls, delay: float = 0.5) -> "AIScorer | None":
        api_key = get_env("GROQ_API_KEY")
        if not api_key:
            return None
        model = get_env("GROQ_LLM_MODEL", DEFAULT_MODEL) or DEFAULT_MODEL
        return cls(api_key, model=model, delay=delay)

    @retry(max_attempts=2, base_delay=2.0, retryable=(APIConnectionError, RateLimitError))
    def _complete(self, prompt: str) -> str:
        r = self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=256,
            temperature=0.2,
        )
        return (r.choices[0].message.content or "").strip()

    def _wait_turn(self) -> None:
        elapsed = time.monotonic() - self._last_call
        if self._last_call and elapsed < self.delay:
            time.sleep(self.delay - elapsed)

    def score(self, prompt: str, title: str = "") -> AIOutcome:
        with self._lock:
            self._wait_turn()
            try:
                outcome: AIOutcome = parse_reply(self._complete(prompt))
            except Exception as exc:
                outcome = AIUnavailable(f"API error: {exc}")
            finally:
                self._last_call = time.monotonic()

        if isinstance(outcome, AIUnavailable):
            log.warning("AI scoring unavailable for %r (%s) — using heuristic", title, outcome.reason)
        return outcome
