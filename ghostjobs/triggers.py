"""Entry points for schedulers and operators.

``trigger_scrape`` is the daily job (ingestion, then the re-verification
sweep); ``trigger_verify`` runs the sweep alone. Both always return a
JSON-serialisable dict with a ``success`` flag and never raise.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from ghostjobs.config import PipelineConfig, get_config
from ghostjobs.log import get_logger
from ghostjobs.models import utcnow
from ghostjobs.pipeline import Pipeline

log = get_logger(__name__)


@contextmanager
def _pipeline(config: PipelineConfig | None, pipeline: Pipeline | None) -> Iterator[Pipeline]:
    if pipeline is not None:
        yield pipeline
        return
    owned = Pipeline.from_config(config or get_config())
    try:
        yield owned
    finally:
        owned.close()


def _timestamp() -> str:
    return utcnow().isoformat()


def _failure(exc: Exception) -> dict[str, Any]:
    return {"success": False, "timestamp": _timestamp(), "error": str(exc) or type(exc).__name__}


def trigger_scrape(config: PipelineConfig | None = None, pipeline: Pipeline | None = None) -> dict[str, Any]:
    log.info("Starting daily job pipeline...")
    try:
        with _pipeline(config, pipeline) as p:
            log.info("Step 1: Scraping new jobs...")
            scrape = p.run_ingestion()
            log.info("Step 2: Re-verifying existing jobs...")
            reverify = p.run_reverification()
    except Exception as exc:
        log.exception("Pipeline error")
        return _failure(exc)
    return {
        "success": scrape.success and reverify.success,
        "timestamp": _timestamp(),
        "scrape": scrape.to_dict(),
        "reverify": reverify.to_dict(),
    }


def trigger_ingest(config: PipelineConfig | None = None, pipeline: Pipeline | None = None) -> dict[str, Any]:
    """Ingestion only, without the sweep."""
    try:
        with _pipeline(config, pipeline) as p:
            scrape = p.run_ingestion()
    except Exception as exc:
        log.exception("Ingestion error")
        return _failure(exc)
    return {"success": scrape.success, "timestamp": _timestamp(), "scrape": scrape.to_dict()}


def trigger_verify(config: PipelineConfig | None = None, pipeline: Pipeline | None = None) -> dict[str, Any]:
    log.info("Starting scheduled re-verification...")
    try:
        with _pipeline(config, pipeline) as p:
            result = p.run_reverification()
    except Exception as exc:
        log.exception("Re-verification error")
        return _failure(exc)
    return {"success": result.success, "timestamp": _timestamp(), "result": result.to_dict()}
