"""Public listing eligibility: VERIFIED and re-confirmed within the freshness window."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from ghostjobs.config import PipelineConfig
from ghostjobs.models import JobRecord, utcnow
from ghostjobs.store import JobStore

FRESHNESS_WINDOW = timedelta(hours=48)


def is_publicly_listable(
    record: JobRecord,
    now: datetime | None = None,
    window: timedelta = FRESHNESS_WINDOW,
) -> bool:
    """True while the record is VERIFIED and ``now - last_verified_at < window``.

    A record exactly ``window`` old is no longer listed.
    """
    if record.verification_status != "VERIFIED" or record.last_verified_at is None:
        return False
    return (now or utcnow()) - record.last_verified_at < window


def filter_listable(
    records: Iterable[JobRecord],
    now: datetime | None = None,
    window: timedelta = FRESHNESS_WINDOW,
) -> list[JobRecord]:
    current = now or utcnow()
    listable = [r for r in records if is_publicly_listable(r, current, window)]
    return sorted(listable, key=lambda r: r.last_verified_at, reverse=True)  # type: ignore[arg-type,return-value]


def listable_jobs(store: JobStore, config: PipelineConfig, now: datetime | None = None) -> list[JobRecord]:
    """Jobs a public listing may show right now, newest verification first."""
    return filter_listable(store.all(), now, timedelta(hours=config.listing_window_hours))
