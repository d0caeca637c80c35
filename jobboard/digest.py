"""Daily digest of the best new postings, as markdown."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jobboard.config import DEFAULT_PROFILE, REPORTS_DIR
from jobboard.log import get_logger
from jobboard.mailer import send_email
from jobboard.models import StoredPosting, VisaConfidence
from jobboard.store import JobStore

log = get_logger(__name__)

_VISA_BADGE: dict[VisaConfidence, str] = {
    VisaConfidence.GREEN: "\U0001f7e2 Likely eligible",
    VisaConfidence.YELLOW: "\U0001f7e1 Check salary",
    VisaConfidence.RED: "\U0001f534 Not a licensed sponsor",
    VisaConfidence.UNKNOWN: "⚪ Unknown",
}


def _badges(p: StoredPosting) -> str:
    badges = []
    if p.is_golden:
        badges.append("⭐ Golden Opportunity")
    if p.verified_sponsor:
        badges.append("Verified Sponsor")
    elif p.visa_sponsorship:
        badges.append("Visa Sponsor")
    if p.remote:
        badges.append("Remote")
    return " · ".join(badges)


def build_digest(
    postings: list[StoredPosting],
    profile: dict[str, Any] | None = None,
    today: datetime | None = None,
) -> str:
    profile = profile or DEFAULT_PROFILE
    name = (profile.get("candidate") or {}).get("name") or DEFAULT_PROFILE["candidate"]["name"]
    today = today or datetime.now(timezone.utc)
    lines: list[str] = [f"# Daily ESG Job Digest — {today.strftime('%A %d %B %Y')}", ""]
    lines.append(
        f"Hi {name}, here are today's top {len(postings)} ESG opportunities in London & remote:"
    )
    lines.append("")

    for p in postings:
        lines.append(f"### [{p.title}]({p.url}) @ {p.company}" if p.url else f"### {p.title} @ {p.company}")
        where = p.location + (f" · {p.salary}" if p.salary else "")
        lines.append(f"- **Match:** {p.match_score} — **Success probability:** {p.success_probability}%")
        lines.append(f"- **Location:** {where}")
        lines.append(f"- **Visa:** {_VISA_BADGE[VisaConfidence(p.visa_confidence)]} — {p.visa_reason}")
        badges = _badges(p)
        if badges:
            lines.append(f"- {badges}")
        if p.ai_summary:
            lines.append(f"- _{p.ai_summary}_")
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("| # | Role | Company | Score | Visa |")
    lines.append("|--:|------|---------|------:|------|")
    for i, p in enumerate(postings, 1):
        title = p.title[:40] + ("…" if len(p.title) > 40 else "")
        company = p.company[:22] + ("…" if len(p.company) > 22 else "")
        lines.append(f"| {i} | {title} | {company} | {p.match_score} | {VisaConfidence(p.visa_confidence).value} |")
    lines.append("")

    log.info("Built digest: %d postings", len(postings))
    return "\n".join(lines)


def write_digest(content: str, today: datetime | None = None) -> Path:
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    date = (today or datetime.now(timezone.utc)).strftime("%Y-%m-%d")
    path = REPORTS_DIR / f"digest_{date}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Digest written → %s", path)
    return path


def send_daily_digest(store: JobStore, profile: dict[str, Any] | None = None) -> tuple[bool, str]:
    """Top postings from the last window, mailed; an empty window is a logged skip."""
    profile = profile or DEFAULT_PROFILE
    settings = {**DEFAULT_PROFILE["digest"], **(profile.get("digest") or {})}
    postings = store.top_new(settings["size"], settings["window_hours"])
    if not postings:
        log.info("No new postings in the last %dh, skipping digest", settings["window_hours"])
        return False, "No new postings"

    body = build_digest(postings, profile)
    write_digest(body)
    today = datetime.now(timezone.utc).strftime("%d %B %Y")
    return send_email(body, subject=f"ESG Daily Digest: {len(postings)} top roles — {today}")
