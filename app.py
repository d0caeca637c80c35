"""Streamlit UI for the ESG Job Board."""
from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from jobboard.config import REPORTS_DIR, ensure_dirs, load_profile
from jobboard.log import get_logger
from jobboard.models import VALID_STATUSES, StoredPosting, VisaConfidence
from jobboard.occupation import GENERAL_THRESHOLD, SOC_GOING_RATES
from jobboard.sources import SOURCE_NAMES
from jobboard.store import SORTS, InvalidStatusError, JobQuery, JobStore

log = get_logger(__name__)

# ── Constants ────────────────────────────────────────────────────────────

PAGE_SIZE = 20

SORT_LABELS: dict[str, str] = {
    "score": "Match score",
    "probability": "Success probability",
    "visa": "Visa confidence",
    "date": "Newest",
    "company": "Company (A–Z)",
    "title": "Title (A–Z)",
}

VISA_LABELS: dict[str, str] = {
    "all": "Any",
    VisaConfidence.GREEN.value: "🟢 Likely eligible",
    VisaConfidence.YELLOW.value: "🟡 Check salary",
    VisaConfidence.RED.value: "🔴 Not a licensed sponsor",
    VisaConfidence.UNKNOWN.value: "⚪ Unknown",
}

STATUS_LABELS: dict[str, str] = {
    "new": "New",
    "to_apply": "To apply",
    "applied": "Applied",
    "interviewing": "Interviewing",
    "offer": "Offer",
    "rejected": "Rejected",
    "archived": "Archived",
}

CREDENTIAL_KEYS: list[tuple[str, str, str]] = [
    ("GROQ_API_KEY", "Groq API Key", "AI scoring and outreach kits; heuristic scoring without it"),
    ("REED_API_KEY", "Reed API Key", "https://www.reed.co.uk/developers"),
    ("ADZUNA_APP_ID", "Adzuna App ID", "https://developer.adzuna.com"),
    ("ADZUNA_APP_KEY", "Adzuna App Key", "https://developer.adzuna.com"),
    ("JOOBLE_API_KEY", "Jooble API Key", "https://jooble.org/api/about"),
    ("MUSE_API_KEY", "The Muse API Key", "Optional; raises the rate limit"),
]

SMTP_KEYS: list[tuple[str, str]] = [
    ("SMTP_HOST", "SMTP Host"),
    ("SMTP_PORT", "SMTP Port"),
    ("SMTP_USER", "SMTP User"),
    ("SMTP_PASSWORD", "SMTP Password"),
    ("FROM_EMAIL", "From address"),
    ("TO_EMAIL", "Digest recipient"),
]

_BOARD_CSS = """
<style>
.block-container {
    padding-top: 2rem;
}
[data-testid="stMetric"] {
    background: rgba(255,255,255,0.6);
    padding: 0.75rem 1rem;
    border-radius: 12px;
    border: 1px solid rgba(8,122,102,0.15);
    box-shadow: 0 4px 16px rgba(0,0,0,0.06);
}
[data-testid="stExpander"] {
    background: rgba(255,255,255,0.5);
    border-radius: 12px;
    border: 1px solid rgba(8,122,102,0.15);
}
.stButton > button[kind="primary"] {
    border-radius: 8px;
    font-weight: 600;
}
h1, h2, h3 {
    color: #087A66;
}
.badge {
    display: inline-block;
    padding: 0.1rem 0.5rem;
    margin-right: 0.35rem;
    border-radius: 999px;
    font-size: 0.8rem;
    background: rgba(13,155,130,0.12);
    color: #087A66;
}
.badge-golden {
    background: rgba(241,196,15,0.2);
    color: #8a6d00;
}
</style>
"""

# ── Helpers ──────────────────────────────────────────────────────────────


def _store() -> JobStore:
    store = st.session_state.get("_store")
    if store is None:
        ensure_dirs()
        store = JobStore()
        store.initialize()
        st.session_state["_store"] = store
    return store


def _load_env() -> dict[str, str]:
    env_path = ROOT / ".env"
    values: dict[str, str] = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, _, v = line.partition("=")
                values[k.strip()] = v.strip()
    return values


def _save_env(values: dict[str, str]) -> None:
    env_path = ROOT / ".env"
    template_path = ROOT / ".env.example"

    lines: list[str] = []
    written: set[str] = set()

    if template_path.exists():
        for line in template_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                k, _, _ = stripped.partition("=")
                k = k.strip()
                lines.append(f"{k}={values.get(k, '')}")
                written.add(k)
            else:
                lines.append(line)

    for k, v in values.items():
        if k not in written:
            lines.append(f"{k}={v}")

    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _badges(job: StoredPosting) -> str:
    badges = []
    if job.is_golden:
        badges.append('<span class="badge badge-golden">⭐ Golden Opportunity</span>')
    if job.verified_sponsor:
        rating = f" ({job.sponsor_rating})" if job.sponsor_rating else ""
        badges.append(f'<span class="badge">Verified Sponsor{rating}</span>')
    elif job.visa_sponsorship:
        badges.append('<span class="badge">Visa Sponsor</span>')
    if job.is_bcorp:
        badges.append('<span class="badge">B Corp</span>')
    if job.remote:
        badges.append('<span class="badge">Remote</span>')
    return "".join(badges)


def _reset_page() -> None:
    st.session_state["board_page"] = 1


# ── Page: Board ──────────────────────────────────────────────────────────


def _filters() -> JobQuery:
    with st.sidebar:
        st.subheader("Filters")
        search = st.text_input("Search", placeholder="title, company, keyword", on_change=_reset_page)
        source = st.selectbox("Source", ["all", *SOURCE_NAMES], on_change=_reset_page)
        visa = st.selectbox(
            "Visa confidence", list(VISA_LABELS), format_func=VISA_LABELS.get, on_change=_reset_page,
        )
        status = st.selectbox(
            "Status", ["all", *VALID_STATUSES],
            format_func=lambda s: "Any" if s == "all" else STATUS_LABELS.get(s, s),
            on_change=_reset_page,
        )
        remote = st.checkbox("Remote only", on_change=_reset_page)
        sponsor_only = st.checkbox("Verified sponsors only", on_change=_reset_page)
        bcorp_only = st.checkbox("B Corps only", on_change=_reset_page)
        saved = st.checkbox("Saved only", on_change=_reset_page)
        sort = st.selectbox(
            "Sort by", [s for s in SORT_LABELS if s in SORTS], format_func=SORT_LABELS.get,
            on_change=_reset_page,
        )

    return JobQuery(
        search=search.strip(),
        source=source,
        remote=remote,
        saved=saved,
        sponsor_only=sponsor_only,
        bcorp_only=bcorp_only,
        status=status,
        visa_confidence=visa,
        sort=sort,
        page=st.session_state.get("board_page", 1),
        limit=PAGE_SIZE,
    )


def _stats_row(store: JobStore) -> None:
    stats = store.stats()
    visa = stats["visa_counts"]
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Postings", stats["total"])
    c2.metric("Verified Sponsors", stats["verified_count"])
    c3.metric("Likely Eligible", visa.get(VisaConfidence.GREEN.value, 0))
    c4.metric("Golden", stats["golden_count"])
    c5.metric("Avg Score", stats["avg_score"])

    last = stats["last_fetch"]
    if last:
        st.caption(f"Last fetch: {last['source']} at {last['fetched_at']} ({last['status']})")


def _refresh_button() -> None:
    if not st.button("Refresh Now", type="primary", use_container_width=True):
        return
    from jobboard.pipeline import PassInProgressError, refresh

    with st.status("Fetching and scoring postings…", expanded=True) as sw:
        try:
            result = refresh(load_profile(), _store())
        except PassInProgressError as exc:
            sw.update(label="A refresh is already running", state="error")
            st.warning(str(exc))
            return
        except Exception as exc:
            log.exception("Manual refresh failed")
            sw.update(label="Refresh failed", state="error")
            st.error(str(exc))
            return
        for name, count in result.per_source.items():
            err = result.errors.get(name)
            sw.write(f"**{name}**: {count}" + (f" (error: {err})" if err else ""))
        sw.update(
            label=f"Refresh complete: {result.total} kept, {result.verified} verified sponsors",
            state="complete",
        )


def _outreach(job: StoredPosting) -> None:
    key = f"kit_{job.id}"
    if st.button("Generate outreach kit", key=f"btn_{key}"):
        from jobboard.outreach import generate_outreach_kit

        with st.spinner("Drafting…"):
            st.session_state[key] = generate_outreach_kit(job, load_profile())

    kit = st.session_state.get(key)
    if kit:
        st.markdown("**LinkedIn message**")
        st.code(kit.linkedin_message, language=None)
        st.markdown("**Résumé bullets**")
        for bullet in kit.resume_bullets:
            st.markdown(f"- {bullet}")
        if kit.generated_by == "template":
            st.caption("Template kit (no Groq key or AI unavailable)")


def _job_card(store: JobStore, job: StoredPosting) -> None:
    visa = VisaConfidence(job.visa_confidence).value
    header = f"{job.match_score} · {job.title} @ {job.company} · {VISA_LABELS[visa]}"
    with st.expander(header):
        badges = _badges(job)
        if badges:
            st.markdown(badges, unsafe_allow_html=True)

        c1, c2, c3 = st.columns(3)
        c1.metric("Match", job.match_score)
        c2.metric("Success probability", f"{job.success_probability}%")
        c3.metric("Salary (GBP)", f"£{job.salary_annual_gbp:,}" if job.salary_annual_gbp else "n/a")

        st.markdown(f"**{job.location}** · {job.source}" + (f" · {job.salary}" if job.salary else ""))
        if job.occupation_code:
            st.markdown(f"SOC {job.occupation_code}: {job.occupation_label}")
        st.markdown(f"**Visa:** {job.visa_reason}")
        if job.ai_summary:
            st.info(job.ai_summary)
        if job.reasons:
            st.caption(" · ".join(job.reasons))
        if job.url:
            st.link_button("Open listing", job.url)

        st.divider()
        c1, c2 = st.columns([1, 2])
        with c1:
            label = "★ Saved" if job.saved else "☆ Save"
            if st.button(label, key=f"save_{job.id}"):
                store.toggle_saved(job.id)
                st.rerun()
            status = st.selectbox(
                "Status", VALID_STATUSES,
                index=VALID_STATUSES.index(job.status) if job.status in VALID_STATUSES else 0,
                format_func=lambda s: STATUS_LABELS.get(s, s),
                key=f"status_{job.id}",
            )
            if status != job.status:
                try:
                    store.update_status(job.id, status)
                except InvalidStatusError as exc:
                    st.error(str(exc))
                else:
                    st.rerun()
        with c2:
            notes = st.text_area("Notes", value=job.notes or "", key=f"notes_{job.id}")
            if st.button("Save notes", key=f"save_notes_{job.id}"):
                store.update_notes(job.id, notes)
                st.toast("Notes saved")

        _outreach(job)


def page_board() -> None:
    st.header("ESG Job Board")
    st.caption("London & remote ESG roles, checked against the UK Register of Licensed Sponsors")

    store = _store()
    query = _filters()
    _stats_row(store)
    _refresh_button()
    st.divider()

    page = store.query(query)
    if not page.jobs:
        st.info("No postings match. Adjust the filters or click **Refresh Now**.")
        return

    st.caption(f"{page.total} postings · page {page.page} of {page.pages}")
    for job in page.jobs:
        _job_card(store, job)

    c1, c2, c3 = st.columns([1, 2, 1])
    with c1:
        if st.button("← Previous", disabled=page.page <= 1, use_container_width=True):
            st.session_state["board_page"] = page.page - 1
            st.rerun()
    with c3:
        if st.button("Next →", disabled=page.page >= page.pages, use_container_width=True):
            st.session_state["board_page"] = page.page + 1
            st.rerun()


# ── Page: Visa Intelligence ──────────────────────────────────────────────


def page_visa() -> None:
    st.header("Visa Intelligence")
    st.markdown(
        f"Skilled Worker applicants must be paid the higher of the **general threshold "
        f"(£{GENERAL_THRESHOLD:,})** and the going rate for the role's SOC 2020 occupation. "
        "New entrants (under 26, recent graduates, switching from a Student visa) may qualify "
        "at the lower rate."
    )

    rows = [
        {
            "SOC": code,
            "Occupation": rate.title,
            "Standard rate": f"£{rate.standard:,}",
            "New entrant rate": f"£{rate.new_entrant:,}",
            "Applicable minimum": f"£{max(rate.new_entrant, GENERAL_THRESHOLD):,}",
        }
        for code, rate in SOC_GOING_RATES.items()
    ]
    import pandas as pd

    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    st.subheader("How postings are graded")
    st.markdown(
        "- 🟢 **Likely eligible**: verified sponsor and salary meets the minimum\n"
        "- 🟡 **Check salary**: verified sponsor, salary missing or below the minimum\n"
        "- 🔴 **Not a licensed sponsor**: employer not found on the register"
    )

    counts = _store().stats()["visa_counts"]
    if counts:
        c1, c2, c3 = st.columns(3)
        c1.metric("🟢 Green", counts.get(VisaConfidence.GREEN.value, 0))
        c2.metric("🟡 Yellow", counts.get(VisaConfidence.YELLOW.value, 0))
        c3.metric("🔴 Red", counts.get(VisaConfidence.RED.value, 0))


# ── Page: Digests ────────────────────────────────────────────────────────


def page_digests() -> None:
    st.header("Daily Digests")

    if st.button("Send Today's Digest", type="primary"):
        from jobboard.digest import send_daily_digest

        with st.spinner("Building digest…"):
            ok, msg = send_daily_digest(_store(), load_profile())
        (st.success if ok else st.warning)(msg)

    ensure_dirs()
    digests = sorted(REPORTS_DIR.glob("digest_*.md"), reverse=True)
    if not digests:
        st.info("No digests yet. They are written after each daily run.")
        return

    selected = st.selectbox(
        "Select digest",
        digests,
        format_func=lambda p: p.stem.replace("digest_", ""),
    )
    if selected:
        st.markdown(selected.read_text(encoding="utf-8"))


# ── Page: Settings ───────────────────────────────────────────────────────


def page_settings() -> None:
    st.header("Settings")
    env = _load_env()

    with st.form("all_creds"):
        st.subheader("Job Sources & AI")
        st.caption(
            "Jobicy, Arbeitnow, Green Jobs, The Muse and Remotive need no key. "
            "Keyed sources are skipped until their credentials are set."
        )
        values: dict[str, str] = {}
        c1, c2 = st.columns(2)
        for i, (key, label, help_text) in enumerate(CREDENTIAL_KEYS):
            with (c1 if i % 2 == 0 else c2):
                values[key] = st.text_input(label, value=env.get(key, ""), type="password", help=help_text)

        st.subheader("Digest Email")
        c1, c2 = st.columns(2)
        for i, (key, label) in enumerate(SMTP_KEYS):
            with (c1 if i % 2 == 0 else c2):
                secret = key == "SMTP_PASSWORD"
                values[key] = st.text_input(label, value=env.get(key, ""), type="password" if secret else "default")

        if st.form_submit_button("Save", type="primary", use_container_width=True):
            _save_env({**env, **{k: v.strip() for k, v in values.items()}})
            st.success("Saved to .env. Restart the app for new keys to take effect.")


# ── Main ─────────────────────────────────────────────────────────────────


def _inject_css() -> None:
    st.markdown(_BOARD_CSS, unsafe_allow_html=True)


def _sidebar_status() -> None:
    with st.sidebar:
        st.divider()
        env = _load_env()
        st.markdown("**Status**")
        st.markdown(("✅" if env.get("GROQ_API_KEY") else "⬜") + "  Groq API key")
        st.markdown(("✅" if env.get("SMTP_HOST") and env.get("TO_EMAIL") else "⬜") + "  Digest email")


def _wrap_board():
    _inject_css()
    page_board()
    _sidebar_status()


def _wrap_visa():
    _inject_css()
    _sidebar_status()
    page_visa()


def _wrap_digests():
    _inject_css()
    _sidebar_status()
    page_digests()


def _wrap_settings():
    _inject_css()
    _sidebar_status()
    page_settings()


st.set_page_config(page_title="ESG Job Board", page_icon="🌿", layout="wide")

pages = [
    st.Page(_wrap_board, title="Board", icon="🌿", url_path="board", default=True),
    st.Page(_wrap_visa, title="Visa Intelligence", icon="🛂", url_path="visa"),
    st.Page(_wrap_digests, title="Digests", icon="📬", url_path="digests"),
    st.Page(_wrap_settings, title="Settings", icon="⚙️", url_path="settings"),
]

nav = st.navigation(pages)
nav.run()
