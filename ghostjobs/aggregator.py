"""Run every source concurrently and dedup the merged batch on company + title."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting
from ghostjobs.sources.base import JobSource

log = get_logger(__name__)


@dataclass
class AggregateResult:
    postings: list[RawPosting]
    seen_count: int
    duplicate_count: int = 0
    source_counts: dict[str, int] = field(default_factory=dict)


def dedupe_postings(postings: list[RawPosting]) -> list[RawPosting]:
    """Keep the first posting for each lower-cased (company, title)."""
    seen: set[str] = set()
    unique: list[RawPosting] = []
    for posting in postings:
        key = posting.dedup_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(posting)
    return unique


def aggregate(sources: list[JobSource]) -> AggregateResult:
    if not sources:
        return AggregateResult(postings=[], seen_count=0)

    log.info("Scraping %d source(s) in parallel...", len(sources))
    with ThreadPoolExecutor(max_workers=len(sources)) as pool:
        # results come back in registration order, not completion order
        batches = list(pool.map(lambda src: src.collect(), sources))

    merged: list[RawPosting] = []
    source_counts: dict[str, int] = {}
    for src, batch in zip(sources, batches):
        source_counts[src.name] = len(batch)
        merged.extend(batch)

    unique = dedupe_postings(merged)
    log.info("Total unique jobs: %d (of %d scraped)", len(unique), len(merged))
    return AggregateResult(
        postings=unique,
        seen_count=len(merged),
        duplicate_count=len(merged) - len(unique),
        source_counts=source_counts,
    )
