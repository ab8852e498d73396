"""Himalayas remote jobs API. Max 20 jobs per request, offset pagination.

Docs: https://himalayas.app/api
"""
from __future__ import annotations

import time

import requests

from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting
from ghostjobs.retry import retry
from ghostjobs.sources.base import JobSource
from ghostjobs.sources.normalize import build_posting, first_text, salary_bound

log = get_logger(__name__)

API_URL = "https://himalayas.app/jobs/api"


class HimalayasSource(JobSource):
    name = "himalayas"

    @retry()
    def _fetch_page(self, offset: int, limit: int) -> list[dict]:
        data = self.http.get_json(API_URL, params={"limit": limit, "offset": offset})
        jobs = data.get("jobs", []) if isinstance(data, dict) else data
        if not isinstance(jobs, list):
            return []
        return [j for j in jobs if isinstance(j, dict)]

    def _to_posting(self, hit: dict) -> RawPosting | None:
        restrictions = hit.get("locationRestrictions")
        location = ", ".join(str(r) for r in restrictions) if isinstance(restrictions, list) else ""
        return build_posting(
            title=hit.get("title"),
            company=hit.get("companyName"),
            location=location or "Remote",
            location_type="REMOTE",
            apply_url=first_text(hit.get("applicationLink"), hit.get("url")),
            source_url=hit.get("url"),
            source=self.name,
            description=first_text(hit.get("description"), hit.get("excerpt")),
            salary_min=salary_bound(hit.get("minSalary")),
            salary_max=salary_bound(hit.get("maxSalary"), upper=True),
        )

    def fetch(self) -> list[RawPosting]:
        limit = self.config.himalayas_page_size
        postings: list[RawPosting] = []
        for page in range(self.config.himalayas_max_pages):
            try:
                jobs = self._fetch_page(page * limit, limit)
            except requests.RequestException as exc:
                # keep what earlier pages returned
                log.warning("Himalayas page %d error: %s", page, exc)
                break
            if not jobs:
                break
            postings.extend(self._keep([self._to_posting(hit) for hit in jobs]))
            log.debug("Himalayas page %d returned %d jobs", page, len(jobs))
            if self.config.page_pause_s > 0:
                time.sleep(self.config.page_pause_s)
        return postings
