"""Storage port for job records, with CSV-file and in-memory implementations."""
from __future__ import annotations

import csv
import fcntl
import threading
from abc import ABC, abstractmethod
from dataclasses import fields
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any

from ghostjobs.log import get_logger
from ghostjobs.models import VERIFICATION_STATUSES, JobRecord, utcnow

log = get_logger(__name__)

HEADERS: list[str] = [f.name for f in fields(JobRecord)]
_DATETIME_FIELDS = {"last_verified_at", "created_at", "updated_at"}
_INT_FIELDS = {"salary_min", "salary_max"}
_IMMUTABLE_FIELDS = {"id", "created_at"}


class StoreError(RuntimeError):
    """A read or write against the job store failed."""


class JobStore(ABC):
    @abstractmethod
    def list_existing_urls(self) -> set[str]:
        """Every apply URL and source URL already stored."""

    @abstractmethod
    def list_stale_verified(self, threshold: datetime) -> list[JobRecord]:
        """VERIFIED records whose last verification is older than ``threshold``."""

    @abstractmethod
    def insert(self, record: JobRecord) -> JobRecord:
        pass

    @abstractmethod
    def update(self, record_id: str, **changes: Any) -> JobRecord:
        pass

    @abstractmethod
    def all(self) -> list[JobRecord]:
        pass


def _check_changes(changes: dict[str, Any]) -> None:
    unknown = set(changes) - set(HEADERS)
    if unknown:
        raise StoreError(f"Unknown job fields: {', '.join(sorted(unknown))}")
    frozen = set(changes) & _IMMUTABLE_FIELDS
    if frozen:
        raise StoreError(f"Fields cannot be updated: {', '.join(sorted(frozen))}")
    status = changes.get("verification_status")
    if status is not None and status not in VERIFICATION_STATUSES:
        raise StoreError(f"Invalid verification status {status!r}")


def _is_stale(record: JobRecord, threshold: datetime) -> bool:
    return (
        record.verification_status == "VERIFIED"
        and record.last_verified_at is not None
        and record.last_verified_at < threshold
    )


class InMemoryJobStore(JobStore):
    """Dict-backed store for dry runs and tests."""

    def __init__(self, records: list[JobRecord] | None = None) -> None:
        self._records: dict[str, JobRecord] = {r.id: r for r in records or []}
        self._lock = threading.Lock()

    def list_existing_urls(self) -> set[str]:
        with self._lock:
            return {u for r in self._records.values() for u in (r.apply_url, r.source_url) if u}

    def list_stale_verified(self, threshold: datetime) -> list[JobRecord]:
        with self._lock:
            return [r for r in self._records.values() if _is_stale(r, threshold)]

    def insert(self, record: JobRecord) -> JobRecord:
        with self._lock:
            if record.id in self._records:
                raise StoreError(f"Duplicate job id {record.id}")
            self._records[record.id] = record
        return record

    def update(self, record_id: str, **changes: Any) -> JobRecord:
        _check_changes(changes)
        changes.setdefault("updated_at", utcnow())
        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                raise StoreError(f"No job with id {record_id}")
            updated = current.with_changes(**changes)
            self._records[record_id] = updated
        return updated

    def all(self) -> list[JobRecord]:
        with self._lock:
            return list(self._records.values())

    def get(self, record_id: str) -> JobRecord | None:
        return self._records.get(record_id)


# --- CSV serialisation ---

def _to_row(record: JobRecord) -> dict[str, str]:
    row: dict[str, str] = {}
    for name in HEADERS:
        value = getattr(record, name)
        if value is None:
            row[name] = ""
        elif isinstance(value, datetime):
            row[name] = value.astimezone(timezone.utc).isoformat()
        else:
            row[name] = str(value)
    return row


def _parse_datetime(value: str) -> datetime | None:
    if not value:
        return None
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _from_row(row: dict[str, str]) -> JobRecord:
    values: dict[str, Any] = {}
    for name in HEADERS:
        raw = (row.get(name) or "").strip()
        if name in _DATETIME_FIELDS:
            values[name] = _parse_datetime(raw)
        elif name in _INT_FIELDS:
            values[name] = int(raw) if raw else None
        else:
            values[name] = raw
    if values["created_at"] is None:
        values["created_at"] = utcnow()
    if values["updated_at"] is None:
        values["updated_at"] = values["created_at"]
    return JobRecord(**values)


def _lock(f: IO[str], exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
    except OSError as exc:
        log.debug("flock unavailable: %s", exc)


def _unlock(f: IO[str]) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except OSError:
        pass


class CsvJobStore(JobStore):
    """Jobs table kept in a CSV file; every call is a locked read or rewrite."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def ensure(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # missing or empty: a headerless file would turn the first record into the header
            if not self.path.exists() or self.path.stat().st_size == 0:
                with open(self.path, "w", newline="", encoding="utf-8") as f:
                    _lock(f)
                    csv.writer(f).writerow(HEADERS)
                    _unlock(f)
                log.info("Created job store → %s", self.path)
        except OSError as exc:
            raise StoreError(f"Cannot create job store at {self.path}: {exc}") from exc

    def _read(self) -> list[JobRecord]:
        self.ensure()
        try:
            with open(self.path, "r", newline="", encoding="utf-8") as f:
                _lock(f, exclusive=False)
                try:
                    rows = list(csv.DictReader(f))
                finally:
                    _unlock(f)
            return [_from_row(r) for r in rows]
        except (OSError, ValueError, csv.Error) as exc:
            raise StoreError(f"Cannot read job store {self.path}: {exc}") from exc

    def all(self) -> list[JobRecord]:
        return self._read()

    def list_existing_urls(self) -> set[str]:
        return {u for r in self._read() for u in (r.apply_url, r.source_url) if u}

    def list_stale_verified(self, threshold: datetime) -> list[JobRecord]:
        return [r for r in self._read() if _is_stale(r, threshold)]

    def insert(self, record: JobRecord) -> JobRecord:
        self.ensure()
        try:
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                _lock(f)
                try:
                    csv.DictWriter(f, fieldnames=HEADERS).writerow(_to_row(record))
                finally:
                    _unlock(f)
        except (OSError, csv.Error) as exc:
            raise StoreError(f"Insert failed for {record.title!r}: {exc}") from exc
        log.debug("Stored: %s @ %s [%s]", record.title, record.company, record.verification_status)
        return record

    def update(self, record_id: str, **changes: Any) -> JobRecord:
        _check_changes(changes)
        changes.setdefault("updated_at", utcnow())
        self.ensure()
        try:
            with open(self.path, "r+", newline="", encoding="utf-8") as f:
                _lock(f)
                try:
                    records = [_from_row(r) for r in csv.DictReader(f)]
                    updated: JobRecord | None = None
                    for i, record in enumerate(records):
                        if record.id == record_id:
                            updated = record.with_changes(**changes)
                            records[i] = updated
                            break
                    if updated is None:
                        raise StoreError(f"No job with id {record_id}")
                    f.seek(0)
                    f.truncate()
                    w = csv.DictWriter(f, fieldnames=HEADERS)
                    w.writeheader()
                    w.writerows(_to_row(r) for r in records)
                finally:
                    _unlock(f)
        except (OSError, ValueError, csv.Error) as exc:
            raise StoreError(f"Update failed for {record_id}: {exc}") from exc
        log.debug("Updated %s → %s", record_id, updated.verification_status)
        return updated
