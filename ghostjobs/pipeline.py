"""
Ghost job pipeline.

Ingestion: scrape → drop already-stored URLs → verify → score → store.
Re-verification: re-check links of VERIFIED jobs older than 24 h and demote dead ones.
"""
from __future__ import annotations

import time
from datetime import datetime, timedelta
from typing import Callable

from ghostjobs.aggregator import AggregateResult, aggregate
from ghostjobs.config import PipelineConfig, get_config
from ghostjobs.http import HttpClient
from ghostjobs.log import get_logger
from ghostjobs.models import (
    JobRecord,
    LegitimacyAssessment,
    PipelineResult,
    RawPosting,
    ReverificationResult,
    VerificationVerdict,
    utcnow,
)
from ghostjobs.scorer import LegitimacyScorer
from ghostjobs.sources import JobSource, get_sources
from ghostjobs.store import CsvJobStore, JobStore
from ghostjobs.verifier import Verifier

log = get_logger(__name__)


class ErrorLog:
    """Error strings for one run, capped so a bad day cannot bloat the result."""

    def __init__(self, limit: int) -> None:
        self.limit = max(1, limit)
        self.items: list[str] = []
        self.dropped = 0

    def add(self, message: str) -> None:
        if len(self.items) < self.limit:
            self.items.append(message)
        else:
            self.dropped += 1

    def to_list(self) -> list[str]:
        """At most ``limit`` entries; on overflow the last one summarises the rest."""
        if self.dropped:
            kept = self.items[:self.limit - 1]
            return [*kept, f"... {len(self.items) - len(kept) + self.dropped} more errors not shown"]
        return list(self.items)


def is_accepted(assessment: LegitimacyAssessment, review_min_score: int) -> bool:
    """APPROVE, or REVIEW with a score of at least ``review_min_score``."""
    if assessment.recommendation == "APPROVE":
        return True
    return assessment.recommendation == "REVIEW" and assessment.score >= review_min_score


def drop_existing(postings: list[RawPosting], existing_urls: set[str]) -> list[RawPosting]:
    return [p for p in postings if p.apply_url not in existing_urls and p.source_url not in existing_urls]


class Pipeline:
    def __init__(
        self,
        *,
        store: JobStore,
        sources: list[JobSource],
        verifier: Verifier,
        scorer: LegitimacyScorer,
        http: HttpClient,
        config: PipelineConfig,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.sources = sources
        self.verifier = verifier
        self.scorer = scorer
        self.http = http
        self.config = config
        self.clock = clock

    @classmethod
    def from_config(cls, config: PipelineConfig | None = None, store: JobStore | None = None) -> Pipeline:
        config = config or get_config()
        http = HttpClient(config)
        return cls(
            store=store or CsvJobStore(config.store_path),
            sources=get_sources(http, config),
            verifier=Verifier(http, config),
            scorer=LegitimacyScorer.from_config(config),
            http=http,
            config=config,
        )

    def close(self) -> None:
        self.http.close()

    # --- Ingestion ---

    def run_ingestion(self) -> PipelineResult:
        started = time.monotonic()
        errors = ErrorLog(self.config.max_errors)
        result = PipelineResult()

        def finish() -> PipelineResult:
            result.duration_ms = int((time.monotonic() - started) * 1000)
            result.errors = errors.to_list()
            return result

        log.info("=== Starting Job Automation Pipeline ===")

        log.info("[1/4] Scraping jobs from all sources...")
        try:
            batch = aggregate(self.sources)
        except Exception as exc:
            log.error("Scraping failed: %s", exc)
            errors.add(f"Scraping error: {exc}")
            batch = AggregateResult(postings=[], seen_count=0)
        result.scraped_count = len(batch.postings)
        result.source_counts = dict(batch.source_counts)
        if not batch.postings:
            log.warning("No jobs scraped")
            return finish()

        log.info("[2/4] Checking for existing jobs in the store...")
        try:
            existing = self.store.list_existing_urls()
        except Exception as exc:
            # dedup is impossible without this, so nothing downstream may run
            log.error("Existing-job lookup failed: %s", exc)
            errors.add(f"Database check error: {exc}")
            result.success = False
            return finish()

        new_jobs = drop_existing(batch.postings, existing)
        result.skipped_count = len(batch.postings) - len(new_jobs)
        log.info("%d new jobs to process (%d already stored)", len(new_jobs), result.skipped_count)
        if not new_jobs:
            return finish()

        log.info("[3/4] Verifying %d job listings...", len(new_jobs))
        verdicts = self.verifier.verify_all(
            new_jobs,
            on_error=lambda p, exc: errors.add(f"Verification error for {p.title}: {exc}"),
        )
        valid: list[tuple[RawPosting, VerificationVerdict]] = [
            (p, verdicts[i]) for i, p in enumerate(new_jobs) if i in verdicts and verdicts[i].is_valid
        ]
        result.verified_count = len(valid)
        result.failed_count = len(new_jobs) - len(valid)
        log.info("%d jobs passed verification", len(valid))
        if not valid:
            return finish()

        log.info("[4/4] Running legitimacy analysis...")
        candidates = [p for p, _ in valid]
        assessments = self.scorer.score_all(
            candidates,
            on_error=lambda p, exc: errors.add(f"Scoring error for {p.title}: {exc}"),
        )

        to_store: list[tuple[RawPosting, VerificationVerdict, LegitimacyAssessment]] = []
        for i, (posting, verdict) in enumerate(valid):
            assessment = assessments.get(i)
            if assessment is None:
                result.failed_count += 1
            elif is_accepted(assessment, self.config.review_accept_min_score):
                to_store.append((posting, verdict, assessment))
            elif self.config.queue_borderline_for_review and assessment.recommendation != "REJECT":
                to_store.append((posting, verdict, assessment))
            else:
                log.debug("Rejected %s (%s, %d/100)", posting.title, assessment.recommendation, assessment.score)
                result.failed_count += 1
        log.info("%d jobs approved for insertion", len(to_store))

        for posting, verdict, assessment in to_store:
            if self._store_posting(posting, verdict, assessment, errors):
                result.added_count += 1
            else:
                result.failed_count += 1

        finish()
        log.info("=== Pipeline Complete ===")
        log.info(
            "Duration: %.1fs, added=%d, skipped=%d, failed=%d",
            result.duration_ms / 1000, result.added_count, result.skipped_count, result.failed_count,
        )
        return result

    def _store_posting(
        self,
        posting: RawPosting,
        verdict: VerificationVerdict,
        assessment: LegitimacyAssessment,
        errors: ErrorLog,
    ) -> bool:
        approved = assessment.recommendation == "APPROVE"
        now = self.clock()
        record = JobRecord.from_posting(
            posting,
            status="VERIFIED" if approved else "PENDING",
            verified_at=now if approved else None,
            notes=f"Auto-verified. Score: {assessment.score}/100. {verdict.notes}",
            now=now,
        )
        try:
            self.store.insert(record)
        except Exception as exc:
            log.warning("Insert failed for %s: %s", posting.title, exc)
            errors.add(f"Insert error for {posting.title}: {exc}")
            return False
        log.info("Added: %s at %s [%s]", posting.title, posting.company, record.verification_status)
        return True

    # --- Re-verification sweep ---

    def run_reverification(self) -> ReverificationResult:
        log.info("=== Re-verifying Existing Jobs ===")
        result = ReverificationResult()
        errors = ErrorLog(self.config.max_errors)
        threshold = self.clock() - timedelta(hours=self.config.reverify_after_hours)

        try:
            records = self.store.list_stale_verified(threshold)
        except Exception as exc:
            log.error("Stale-job lookup failed: %s", exc)
            errors.add(f"Fetch error: {exc}")
            result.success = False
            result.errors = errors.to_list()
            return result

        if not records:
            log.info("No jobs need re-verification")
            return result

        log.info("Checking %d jobs...", len(records))
        result.checked = len(records)
        for i, record in enumerate(records):
            if self._reverify_record(record, errors):
                result.expired += 1
            if i + 1 < len(records) and self.config.reverify_pause_s > 0:
                time.sleep(self.config.reverify_pause_s)

        result.errors = errors.to_list()
        log.info("Re-verification complete: %d of %d jobs expired", result.expired, result.checked)
        return result

    def _reverify_record(self, record: JobRecord, errors: ErrorLog) -> bool:
        """Re-check one record; returns True when it was demoted to BROKEN_LINK."""
        try:
            check = self.http.check_url(record.apply_url)
        except Exception as exc:
            log.warning("Link check raised for %s: %s", record.apply_url, exc)
            check = None
        else:
            log.debug("Re-check %s: %s", record.apply_url, check.describe())

        stamp = self.clock()
        iso = stamp.isoformat()
        try:
            if check is not None and check.accessible:
                self.store.update(record.id, last_verified_at=stamp, verification_notes=f"Re-verified at {iso}")
                return False
            if check is not None and check.status is not None:
                notes = f"Link broken (HTTP {check.status}) at {iso}"
            else:
                notes = f"Link unreachable at {iso}"
            self.store.update(record.id, verification_status="BROKEN_LINK", verification_notes=notes)
        except Exception as exc:
            log.warning("Update failed for %s: %s", record.id, exc)
            errors.add(f"Update error for {record.title}: {exc}")
            return False
        log.info("Expired: %s at %s (%s)", record.title, record.company, notes)
        return True


def run_ingestion(pipeline: Pipeline | None = None) -> PipelineResult:
    if pipeline is not None:
        return pipeline.run_ingestion()
    owned = Pipeline.from_config()
    try:
        return owned.run_ingestion()
    finally:
        owned.close()


def run_reverification(pipeline: Pipeline | None = None) -> ReverificationResult:
    if pipeline is not None:
        return pipeline.run_reverification()
    owned = Pipeline.from_config()
    try:
        return owned.run_reverification()
    finally:
        owned.close()
