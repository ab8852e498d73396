#!/usr/bin/env python3
"""Run the ghost job pipeline once.

  python run_pipeline.py scrape    # ingestion + re-verification (daily job)
  python run_pipeline.py verify    # re-verification sweep only
  python run_pipeline.py ingest    # ingestion only
"""
from __future__ import annotations

import argparse
import json
import sys

from ghostjobs.config import ensure_dirs, get_config
from ghostjobs.log import get_logger, set_level
from ghostjobs.report import build_run_report, write_run_report
from ghostjobs.triggers import trigger_ingest, trigger_scrape, trigger_verify

log = get_logger(__name__)

COMMANDS = {
    "scrape": trigger_scrape,
    "verify": trigger_verify,
    "ingest": trigger_ingest,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Ghost job hunter pipeline")
    parser.add_argument("command", nargs="?", default="scrape", choices=sorted(COMMANDS))
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on the console")
    parser.add_argument("--no-report", action="store_true", help="skip writing the markdown report")
    args = parser.parse_args(argv)

    if args.verbose:
        set_level("DEBUG")

    try:
        ensure_dirs(get_config())
    except OSError as exc:
        log.warning("Could not create data directories: %s", exc)

    payload = COMMANDS[args.command]()
    print(json.dumps(payload, indent=2))

    if not args.no_report:
        try:
            write_run_report(build_run_report(payload, command=args.command), get_config().reports_dir)
        except OSError as exc:
            log.warning("Could not write report: %s", exc)

    if not payload.get("success"):
        log.error("Run failed: %s", payload.get("error") or "see errors above")
        return 1
    log.info("Run complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
