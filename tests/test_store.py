from __future__ import annotations

from datetime import timedelta

import pytest

from ghostjobs.models import JobRecord
from ghostjobs.store import CsvJobStore, InMemoryJobStore, StoreError

from conftest import NOW, make_posting


def _record(title: str, status: str, verified_hours_ago: float | None) -> JobRecord:
    verified_at = NOW - timedelta(hours=verified_hours_ago) if verified_hours_ago is not None else None
    return JobRecord.from_posting(
        make_posting(
            title=title,
            apply_url=f"https://boards.greenhouse.io/acme/jobs/{title}",
            source_url=f"https://remotive.com/jobs/{title}",
        ),
        status=status,
        verified_at=verified_at,
        notes="seed",
        now=NOW - timedelta(days=3),
    )


@pytest.fixture(params=["csv", "memory"])
def store(request, tmp_path):
    if request.param == "csv":
        return CsvJobStore(tmp_path / "data" / "jobs.csv")
    return InMemoryJobStore()


def test_stale_verified_selection(store):
    old = store.insert(_record("old", "VERIFIED", 30))
    store.insert(_record("fresh", "VERIFIED", 2))
    store.insert(_record("pending", "PENDING", None))
    store.insert(_record("broken", "BROKEN_LINK", 40))

    stale = store.list_stale_verified(NOW - timedelta(hours=24))

    assert [r.id for r in stale] == [old.id]


def test_existing_urls_cover_apply_and_source(store):
    store.insert(_record("a", "VERIFIED", 1))

    urls = store.list_existing_urls()

    assert urls == {"https://boards.greenhouse.io/acme/jobs/a", "https://remotive.com/jobs/a"}


def test_update_changes_status(store):
    record = store.insert(_record("a", "VERIFIED", 30))

    updated = store.update(record.id, verification_status="BROKEN_LINK", verification_notes="Link broken (HTTP 404)")

    assert updated.verification_status == "BROKEN_LINK"
    assert updated.created_at == record.created_at
    assert updated.updated_at != record.updated_at
    (stored,) = store.all()
    assert stored.verification_status == "BROKEN_LINK"
    assert stored.last_verified_at == record.last_verified_at


@pytest.mark.parametrize(
    "changes",
    [
        {"verification_status": "GONE"},
        {"id": "other"},
        {"colour": "blue"},
    ],
)
def test_update_rejects_invalid_changes(store, changes):
    record = store.insert(_record("a", "VERIFIED", 30))
    with pytest.raises(StoreError):
        store.update(record.id, **changes)


def test_update_unknown_id(store):
    store.insert(_record("a", "VERIFIED", 30))
    with pytest.raises(StoreError):
        store.update("missing", verification_status="EXPIRED")


def test_csv_store_round_trips_types(tmp_path):
    path = tmp_path / "jobs.csv"
    record = CsvJobStore(path).insert(_record("a", "VERIFIED", 30))

    (loaded,) = CsvJobStore(path).all()

    assert loaded == record
    assert loaded.salary_min == 70_000
    assert loaded.last_verified_at.tzinfo is not None


def test_csv_store_reports_unreadable_file(tmp_path):
    path = tmp_path / "jobs.csv"
    path.write_text("id,created_at\nx,not-a-date\n", encoding="utf-8")

    with pytest.raises(StoreError):
        CsvJobStore(path).list_existing_urls()


def test_csv_store_writes_header_into_empty_file(tmp_path):
    path = tmp_path / "jobs.csv"
    path.touch()
    store = CsvJobStore(path)

    record = store.insert(_record("a", "VERIFIED", 30))

    assert "https://boards.greenhouse.io/acme/jobs/a" in store.list_existing_urls()
    assert [r.id for r in store.all()] == [record.id]
    assert [r.id for r in store.list_stale_verified(NOW - timedelta(hours=24))] == [record.id]
