from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

from ghostjobs.listing import filter_listable, is_publicly_listable, listable_jobs
from ghostjobs.models import JobRecord
from ghostjobs.store import InMemoryJobStore

from conftest import NOW, make_posting


def _record(status: str = "VERIFIED", age: timedelta | None = timedelta(hours=1), title: str = "Dev") -> JobRecord:
    return JobRecord.from_posting(
        make_posting(title=title),
        status=status,
        verified_at=NOW - age if age is not None else None,
        notes="",
        now=NOW - timedelta(days=5),
    )


def test_window_boundary_is_exclusive():
    assert is_publicly_listable(_record(age=timedelta(hours=47, minutes=59)), NOW)
    assert not is_publicly_listable(_record(age=timedelta(hours=48)), NOW)


def test_only_verified_records_are_listed():
    assert not is_publicly_listable(_record(status="PENDING"), NOW)
    assert not is_publicly_listable(_record(status="BROKEN_LINK"), NOW)
    assert not is_publicly_listable(_record(age=None), NOW)


def test_filter_listable_sorts_newest_first():
    older = _record(age=timedelta(hours=20), title="Older")
    newer = _record(age=timedelta(hours=2), title="Newer")
    expired = _record(age=timedelta(hours=60), title="Expired")

    assert [r.title for r in filter_listable([older, expired, newer], NOW)] == ["Newer", "Older"]


def test_listable_jobs_uses_configured_window(config):
    store = InMemoryJobStore([_record(age=timedelta(hours=30))])

    assert len(listable_jobs(store, config, NOW)) == 1
    assert listable_jobs(store, replace(config, listing_window_hours=24), NOW) == []
