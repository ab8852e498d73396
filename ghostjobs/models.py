"""Data models for postings, verdicts, assessments and stored job records."""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Literal

LocationType = Literal["REMOTE", "HYBRID", "ONSITE"]
Recommendation = Literal["APPROVE", "REVIEW", "REJECT"]
VerificationStatus = Literal["VERIFIED", "EXPIRED", "BROKEN_LINK", "NOT_HIRING", "PENDING"]

RECOMMENDATIONS: tuple[str, ...] = ("APPROVE", "REVIEW", "REJECT")
VERIFICATION_STATUSES: tuple[str, ...] = ("VERIFIED", "EXPIRED", "BROKEN_LINK", "NOT_HIRING", "PENDING")

GHOST_JOB_THRESHOLD = 50


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RawPosting:
    title: str
    company: str
    location: str
    location_type: LocationType
    apply_url: str
    source_url: str
    source: str
    description: str = ""
    salary_min: int | None = None
    salary_max: int | None = None

    def dedup_key(self) -> str:
        """Batch dedup key: lower-cased company + title."""
        return f"{self.company.lower()}-{self.title.lower()}"


@dataclass(frozen=True)
class VerificationVerdict:
    url_accessible: bool
    http_status: int | None
    company_domain_trusted: bool
    red_flags: tuple[str, ...] = ()
    notes: str = ""

    @property
    def has_red_flags(self) -> bool:
        return bool(self.red_flags)

    @property
    def is_valid(self) -> bool:
        return self.url_accessible and self.company_domain_trusted and not self.has_red_flags


@dataclass(frozen=True)
class LegitimacyAssessment:
    score: int
    recommendation: Recommendation
    concerns: tuple[str, ...] = ()
    positive_signals: tuple[str, ...] = ()
    reasoning: str = ""
    strategy: str = "rules"

    @property
    def ghost_job_likely(self) -> bool:
        return self.score < GHOST_JOB_THRESHOLD


@dataclass
class JobRecord:
    id: str
    title: str
    company: str
    location: str
    location_type: LocationType
    apply_url: str
    source_url: str
    source: str
    salary_min: int | None = None
    salary_max: int | None = None
    verification_status: VerificationStatus = "PENDING"
    last_verified_at: datetime | None = None
    verification_notes: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_posting(
        cls,
        posting: RawPosting,
        *,
        status: VerificationStatus,
        verified_at: datetime | None,
        notes: str,
        now: datetime | None = None,
    ) -> JobRecord:
        stamp = now or utcnow()
        return cls(
            id=str(uuid.uuid4()),
            title=posting.title,
            company=posting.company,
            location=posting.location,
            location_type=posting.location_type,
            apply_url=posting.apply_url,
            source_url=posting.source_url,
            source=posting.source,
            salary_min=posting.salary_min,
            salary_max=posting.salary_max,
            verification_status=status,
            last_verified_at=verified_at,
            verification_notes=notes,
            created_at=stamp,
            updated_at=stamp,
        )

    def with_changes(self, **fields: Any) -> JobRecord:
        return replace(self, **fields)


@dataclass
class PipelineResult:
    success: bool = True
    scraped_count: int = 0
    verified_count: int = 0
    added_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    duration_ms: int = 0
    errors: list[str] = field(default_factory=list)
    source_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ReverificationResult:
    success: bool = True
    checked: int = 0
    expired: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
