"""Logging for pipeline runs: console for cron output, a dated file in logs/ for history."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_FORMATTER = logging.Formatter("%(asctime)s  %(levelname)-8s  %(name)s  %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
# urllib3 logs every connection at DEBUG, which drowns out --verbose output
_NOISY_LOGGERS = ("urllib3", "httpx", "openai")
_ready = False


def _level(name: str | None) -> int:
    return getattr(logging, (name or "INFO").strip().upper(), logging.INFO)


def _file_logging_enabled() -> bool:
    return os.environ.get("GHOSTJOBS_LOG_TO_FILE", "true").strip().lower() in ("1", "true", "yes")


def _file_handler() -> logging.Handler | None:
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        day = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        handler = logging.FileHandler(LOG_DIR / f"pipeline_{day}.log", encoding="utf-8")
    except OSError as exc:
        sys.stderr.write(f"File logging disabled: {exc}\n")
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(_FORMATTER)
    return handler


def _setup() -> None:
    root = logging.getLogger()
    level = _level(os.environ.get("LOG_LEVEL"))
    root.setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if root.handlers:
        # host application (or pytest) already owns the handlers
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(_FORMATTER)
    root.addHandler(console)

    if _file_logging_enabled():
        handler = _file_handler()
        if handler is not None:
            root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    global _ready
    if not _ready:
        _setup()
        _ready = True
    return logging.getLogger(name)


def set_level(level_name: str) -> None:
    """Raise or lower console verbosity at runtime (``run_pipeline.py --verbose``)."""
    level = _level(level_name)
    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)
