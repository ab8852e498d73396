from __future__ import annotations

import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from ghostjobs.config import PipelineConfig
from ghostjobs.http import HttpClient
from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting

log = get_logger(__name__)


class JobSource(ABC):
    """One upstream job feed, fetched and normalised into ``RawPosting`` records."""

    name: str = "unknown"

    def __init__(self, http: HttpClient, config: PipelineConfig) -> None:
        self.http = http
        self.config = config

    @abstractmethod
    def fetch(self) -> list[RawPosting]:
        pass

    def collect(self) -> list[RawPosting]:
        """``fetch`` that never raises: a broken source contributes nothing."""
        try:
            postings = self.fetch()
        except Exception as exc:
            log.error("[%s] FAILED: %s", self.name, exc)
            return []
        log.info("[%s] returned %d jobs", self.name, len(postings))
        return postings

    @staticmethod
    def _keep(postings: list[RawPosting | None]) -> list[RawPosting]:
        return [p for p in postings if p is not None]


class CompanyBoardSource(JobSource):
    """A source with one API per employer, walked over a fixed roster of board tokens."""

    def __init__(self, http: HttpClient, config: PipelineConfig, companies: tuple[str, ...]) -> None:
        super().__init__(http, config)
        self.companies = companies

    @abstractmethod
    def fetch_company(self, token: str) -> list[RawPosting]:
        pass

    def _fetch_company_safely(self, token: str) -> list[RawPosting]:
        try:
            return self.fetch_company(token)
        except Exception as exc:
            log.debug("[%s] board %r failed: %s", self.name, token, exc)
            return []

    def fetch(self) -> list[RawPosting]:
        log.info("Scraping %d %s boards...", len(self.companies), self.name)
        size = max(1, self.config.roster_batch_size)
        postings: list[RawPosting] = []
        for start in range(0, len(self.companies), size):
            batch = self.companies[start:start + size]
            with ThreadPoolExecutor(max_workers=len(batch)) as pool:
                # map keeps roster order so batch dedup stays deterministic
                for jobs in pool.map(self._fetch_company_safely, batch):
                    postings.extend(jobs)
            if start + size < len(self.companies) and self.config.roster_pause_s > 0:
                time.sleep(self.config.roster_pause_s)
        return postings


def as_list(data: Any, key: str | None = None) -> list[dict]:
    """Pull a list of job dicts out of a payload that may be a bare list or a wrapper object."""
    if key is not None and isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise ValueError(f"unexpected payload type {type(data).__name__}")
    return [item for item in data if isinstance(item, dict)]
