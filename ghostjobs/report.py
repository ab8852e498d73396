"""Markdown summary of a trigger run, written to reports/ for later review."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from ghostjobs.log import get_logger
from ghostjobs.models import utcnow

log = get_logger(__name__)


def _status(success: Any) -> str:
    return "OK" if success else "FAILED"


def _scrape_section(scrape: dict[str, Any]) -> list[str]:
    lines = [
        f"## Ingestion ({_status(scrape.get('success'))})",
        "",
        "| Scraped | Verified | Added | Skipped | Failed | Duration |",
        "|---|---|---|---|---|---|",
        f"| {scrape.get('scraped_count', 0)} | {scrape.get('verified_count', 0)} "
        f"| {scrape.get('added_count', 0)} | {scrape.get('skipped_count', 0)} "
        f"| {scrape.get('failed_count', 0)} | {scrape.get('duration_ms', 0) / 1000:.1f}s |",
        "",
    ]
    counts = scrape.get("source_counts") or {}
    if counts:
        lines += ["### Jobs per source", ""]
        for name, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
            lines.append(f"- {name}: {count}")
        lines.append("")
    return lines


def _reverify_section(reverify: dict[str, Any]) -> list[str]:
    return [
        f"## Re-verification ({_status(reverify.get('success'))})",
        "",
        f"- Checked: {reverify.get('checked', 0)}",
        f"- Expired (broken links): {reverify.get('expired', 0)}",
        "",
    ]


def build_run_report(payload: dict[str, Any], *, command: str = "scrape") -> str:
    """Render the dict returned by a trigger as markdown."""
    lines = [
        f"# Ghost job pipeline: {command}",
        "",
        f"- Run at: {payload.get('timestamp', '')}",
        f"- Status: {_status(payload.get('success'))}",
        "",
    ]
    if payload.get("error"):
        lines += ["## Fatal error", "", f"    {payload['error']}", ""]

    scrape = payload.get("scrape")
    reverify = payload.get("reverify") or payload.get("result")
    if scrape:
        lines += _scrape_section(scrape)
    if reverify:
        lines += _reverify_section(reverify)

    errors = [*(scrape or {}).get("errors", []), *(reverify or {}).get("errors", [])]
    if errors:
        lines += ["## Errors", ""]
        lines += [f"- {e}" for e in errors]
        lines.append("")
    return "\n".join(lines)


def write_run_report(content: str, reports_dir: Path, *, now: datetime | None = None) -> Path:
    reports_dir.mkdir(parents=True, exist_ok=True)
    path = reports_dir / f"run_{(now or utcnow()).strftime('%Y-%m-%d_%H%M%S')}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
