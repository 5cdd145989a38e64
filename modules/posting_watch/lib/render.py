from __future__ import annotations

from collections.abc import Sequence

from . import utils
from .models import DIVISION_ORDER, Alert, ClassifiedJob, Division


def group_by_division(jobs: Sequence[ClassifiedJob]) -> list[tuple[Division, list[ClassifiedJob]]]:
    """Non-empty division groups in display order, job order preserved."""
    by_div: dict[Division, list[ClassifiedJob]] = {d: [] for d in DIVISION_ORDER}
    for job in jobs:
        by_div.setdefault(job.division or Division.UNCATEGORIZED, []).append(job)
    return [(d, by_div[d]) for d in DIVISION_ORDER if by_div[d]]


def build_sections(alerts: Sequence[Alert], *, group_cap: int = 25) -> str:
    """
    One section per client, then one list per division:

      <h3>{client}</h3> Careers: <a>...</a>
        <h4>Technology</h4>
        <ul><li><a href=url>title</a></li> ... <li>(and N more)</li></ul>
    """
    sections: list[str] = []
    for alert in alerts:
        parts: list[str] = [
            f"<h3>{utils.esc(alert.client_name)}</h3>",
            f'<p>Careers: <a href="{utils.esc(alert.client_url)}">{utils.esc(alert.client_url)}</a></p>',
        ]
        for division, jobs in group_by_division(alert.jobs):
            items: list[str] = []
            for job in jobs[:group_cap]:
                # Escape only the pieces, NOT the <a> wrapper
                label = job.title or job.url
                items.append(f'<li><a href="{utils.esc(job.url)}">{utils.esc(label)}</a></li>')
            if len(jobs) > group_cap:
                items.append(f"<li>(and {len(jobs) - group_cap} more)</li>")
            parts.append(f"<h4>{utils.esc(division.value)}</h4>")
            parts.append("<ul>" + "".join(items) + "</ul>")
        sections.append("\n".join(parts))
    return "\n".join(sections)


def wrap_document(content_html: str, *, heading: str | None = None, intro: str | None = None) -> str:
    parts: list[str] = ['<div style="font-family: Arial, sans-serif; font-size: 14px;">']
    if heading:
        parts.append(f"<h2>{utils.esc(heading)}</h2>")
    if intro:
        parts.append(f"<p>{utils.esc(intro)}</p>")
    parts.append(content_html)
    parts.append("</div>")
    return "\n".join(parts)


def build_digest(alerts: Sequence[Alert], *, group_cap: int = 25) -> str:
    total = sum(len(a.jobs) for a in alerts)
    intro = f"{total} new posting{'' if total == 1 else 's'}"
    if len(alerts) > 1:
        intro += f" across {len(alerts)} clients"
    return wrap_document(build_sections(alerts, group_cap=group_cap), heading="New job postings detected", intro=intro)


def build_subject(alerts: Sequence[Alert]) -> str:
    total = sum(len(a.jobs) for a in alerts)
    if len(alerts) == 1:
        return f"New job postings detected: {total} new at {alerts[0].client_name}"
    return f"New job postings detected: {total} new jobs ({len(alerts)} clients)"


def dry_run_preview(name: str, url: str, jobs: Sequence[ClassifiedJob], *, cap: int = 10) -> str:
    """Plain-text block printed per client in dry-run mode."""
    lines = [
        "========== DRY RUN ==========",
        f"Client: {name}",
        f"Careers: {url}",
        f"Detected jobs: {len(jobs)}",
    ]
    for idx, job in enumerate(jobs[:cap], start=1):
        division = (job.division or Division.UNCATEGORIZED).value
        lines.append(f"{idx}. [{division}] {job.title or '(no title)'} | {job.url}")
    if len(jobs) > cap:
        lines.append(f"... and {len(jobs) - cap} more")
    lines.append("========== END DRY RUN ==========")
    return "\n".join(lines)
