from __future__ import annotations

import json
from pathlib import Path

import run_pipeline
import setup_cron


def test_cli_prints_payload_and_exits_zero(monkeypatch, capsys, config):
    monkeypatch.setattr(run_pipeline, "get_config", lambda: config)
    monkeypatch.setitem(run_pipeline.COMMANDS, "verify", lambda: {"success": True, "timestamp": "t", "result": {}})

    code = run_pipeline.main(["verify", "--no-report"])

    assert code == 0
    out = capsys.readouterr().out
    assert json.loads(out[out.index("{"):out.rindex("}") + 1])["success"] is True


def test_cli_writes_report_and_fails_on_error(monkeypatch, config):
    monkeypatch.setitem(run_pipeline.COMMANDS, "scrape", lambda: {"success": False, "timestamp": "t", "error": "boom"})
    monkeypatch.setattr(run_pipeline, "get_config", lambda: config)

    code = run_pipeline.main(["scrape"])

    assert code == 1
    (report,) = config.reports_dir.glob("run_*.md")
    assert "boom" in report.read_text(encoding="utf-8")


def test_cron_entries_schedule_scrape_and_verify():
    entries = setup_cron.build_entries(Path("/usr/bin/python3"))

    assert entries[0] == "CRON_TZ=UTC"
    assert entries[1].startswith("0 0 * * * ")
    assert entries[1].endswith(f"run_pipeline.py scrape >> {setup_cron.LOG_FILE} 2>&1")
    assert entries[2].startswith("0 */12 * * * ")
    assert "run_pipeline.py verify" in entries[2]


def test_merge_crontab_is_idempotent():
    entries = setup_cron.build_entries(Path("/usr/bin/python3"))

    merged = setup_cron.merge_crontab("MAILTO=ops@example.com", entries)

    assert merged.splitlines()[0] == "MAILTO=ops@example.com"
    assert setup_cron.merge_crontab(merged, entries) is None
