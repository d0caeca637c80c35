"""Send the digest by email (HTML-formatted, plain-text alternative)."""
from __future__ import annotations

import html
import re
import smtplib
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from jobboard.config import get_env
from jobboard.log import get_logger
from jobboard.retry import retry

log = get_logger(__name__)

SENDER_NAME = "ESG Job Board"

_HEADINGS = {
    "### ": '<h3 style="margin:12px 0 4px;color:#191919">{}</h3>',
    "## ": '<h2 style="margin:18px 0 6px;color:#087A66">{}</h2>',
    "# ": '<h1 style="margin:0 0 8px;color:#0D9B82">{}</h1>',
}
_TABLE_OPEN = '<table style="border-collapse:collapse;width:100%;font-size:13px;margin:8px 0">'
_TH = '<th style="border:1px solid #ddd;padding:6px 8px;background:#F3F2EF;text-align:left">{}</th>'
_TD = '<td style="border:1px solid #ddd;padding:5px 8px{}">{}</td>'
# Visa column cells are tinted by confidence.
_VISA_TINT = {"green": "#E6F4EA", "yellow": "#FEF7E0", "red": "#FCE8E6"}


def _is_separator(cells: list[str]) -> bool:
    return all(set(c) <= {"-", " ", ":"} for c in cells)


def _td(cell: str) -> str:
    tint = _VISA_TINT.get(cell.lower())
    return _TD.format(f";background:{tint}" if tint else "", _inline(cell))


def md_to_html(md: str) -> str:
    """Render the digest's markdown subset: headings, rules, pipe tables, bullets, paragraphs."""
    out: list[str] = []
    in_table = False

    for line in md.split("\n"):
        stripped = line.strip()
        is_row = stripped.startswith("|") and stripped.endswith("|") and len(stripped) > 1
        if in_table and not is_row:
            out.append("</table>")
            in_table = False

        if not stripped:
            out.append("<br>")
        elif is_row:
            cells = [c.strip() for c in stripped.split("|")[1:-1]]
            if _is_separator(cells):
                continue
            if not in_table:
                out.append(_TABLE_OPEN)
                out.append("<tr>" + "".join(_TH.format(_inline(c)) for c in cells) + "</tr>")
                in_table = True
            else:
                out.append("<tr>" + "".join(_td(c) for c in cells) + "</tr>")
        elif stripped == "---":
            out.append('<hr style="border:none;border-top:1px solid #e0e0e0;margin:16px 0">')
        elif stripped.startswith("- "):
            out.append(f'<div style="margin:2px 0 2px 16px">• {_inline(stripped[2:])}</div>')
        else:
            prefix = next((p for p in _HEADINGS if stripped.startswith(p)), None)
            if prefix:
                out.append(_HEADINGS[prefix].format(_inline(stripped[len(prefix):])))
            else:
                out.append(f"<p style='margin:4px 0'>{_inline(stripped)}</p>")

    if in_table:
        out.append("</table>")
    return "\n".join(out)


def _inline(text: str) -> str:
    text = html.escape(text, quote=False)
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"(?<!\w)_(.+?)_(?!\w)", r"<em>\1</em>", text)
    return re.sub(r"\[([^\]]+)\]\(([^)]+)\)", r'<a href="\2" style="color:#087A66">\1</a>', text)


@retry(max_attempts=3, base_delay=3.0, retryable=(smtplib.SMTPException, OSError))
def _smtp_send(
    host: str, port: int, user: str, password: str,
    from_addr: str, to_addr: str, msg: MIMEMultipart,
) -> None:
    if port == 465:
        with smtplib.SMTP_SSL(host, port) as server:
            server.login(user, password)
            server.sendmail(from_addr, [to_addr], msg.as_string())
        return
    with smtplib.SMTP(host, port) as server:
        server.starttls()
        server.login(user, password)
        server.sendmail(from_addr, [to_addr], msg.as_string())


def send_email(
    body: str,
    subject: str | None = None,
    to_email: str | None = None,
) -> tuple[bool, str]:
    host = get_env("SMTP_HOST")
    port_str = get_env("SMTP_PORT", "587")
    user = get_env("SMTP_USER")
    password = get_env("SMTP_PASSWORD")
    from_addr = get_env("FROM_EMAIL") or user
    to_addr = (to_email or get_env("TO_EMAIL")).strip()

    if not all([host, user, password, to_addr]):
        log.info("SMTP not configured, skipping email")
        return False, "SMTP not configured (set SMTP_HOST, SMTP_USER, SMTP_PASSWORD, TO_EMAIL in .env)"

    try:
        port = int(port_str)
    except ValueError:
        port = 587

    if not subject:
        subject = f"ESG Daily Digest – {datetime.now(timezone.utc).strftime('%Y-%m-%d')}"

    html_body = f"""<div style="font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;max-width:600px;margin:0 auto;padding:16px;color:#333">
{md_to_html(body)}
<hr style="border:none;border-top:1px solid #e0e0e0;margin:20px 0 8px">
<p style="font-size:11px;color:#999">ESG Job Board · Updated daily at 6:00 AM UK time</p>
</div>"""

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f'"{SENDER_NAME}" <{from_addr}>'
    msg["To"] = to_addr
    msg.attach(MIMEText(body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))

    try:
        _smtp_send(host, port, user, password, from_addr, to_addr, msg)
        log.info("Email sent to %s", to_addr)
        return True, "Email sent"
    except (smtplib.SMTPException, OSError) as e:
        log.error("Email failed: %s", e)
        return False, str(e)[:150]
