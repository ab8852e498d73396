#!/usr/bin/env python3
"""
Install the two scheduled runs in the user's crontab:
  - scrape (ingestion + re-verification) daily at 00:00 UTC
  - verify (re-verification only) every 12 hours
Run once: python setup_cron.py
"""
from __future__ import annotations

import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
LOG_FILE = ROOT / "logs" / "cron.log"

SCHEDULES: tuple[tuple[str, str], ...] = (
    ("0 0 * * *", "scrape"),
    ("0 */12 * * *", "verify"),
)


def _python() -> Path:
    venv_python = ROOT / ".venv" / "bin" / "python"
    return venv_python if venv_python.exists() else Path(sys.executable)


def build_entries(python: Path | None = None) -> list[str]:
    python = python or _python()
    return ["CRON_TZ=UTC"] + [
        f"{when} cd {ROOT} && {python} run_pipeline.py {command} >> {LOG_FILE} 2>&1"
        for when, command in SCHEDULES
    ]


def merge_crontab(existing: str, entries: list[str]) -> str | None:
    """Append entries not already present; ``None`` when nothing changes."""
    missing = [e for e in entries if e not in existing]
    if not missing:
        return None
    lines = [existing.strip()] if existing.strip() else []
    return "\n".join(lines + missing)


def main() -> int:
    entries = build_entries()
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    try:
        out = subprocess.run(["crontab", "-l"], capture_output=True, text=True, timeout=5)
        existing = (out.stdout or "").strip() if out.returncode == 0 else ""
        new_crontab = merge_crontab(existing, entries)
        if new_crontab is None:
            print("Cron entries already present. No change.")
            return 0
        proc = subprocess.run(["crontab", "-"], input=new_crontab + "\n", capture_output=True, text=True, timeout=5)
        if proc.returncode != 0:
            _write_crontab_file(new_crontab)
            print("Could not install crontab automatically. Run manually:")
            print(f"  crontab {ROOT / 'crontab.txt'}")
            return 1
        print("Cron installed:")
        for entry in entries:
            print(f"  {entry}")
        return 0
    except subprocess.TimeoutExpired:
        _write_crontab_file("\n".join(entries))
        print("Crontab timed out. To install manually, run:")
        print(f"  crontab {ROOT / 'crontab.txt'}")
        return 1
    except FileNotFoundError:
        print("crontab not found. On Windows use Task Scheduler; on Mac/Linux ensure cron is available.")
        _write_crontab_file("\n".join(entries))
        return 1


def _write_crontab_file(content: str) -> None:
    path = ROOT / "crontab.txt"
    path.write_text(content + "\n", encoding="utf-8")
    print(f"Wrote {path}")


if __name__ == "__main__":
    raise SystemExit(main())
