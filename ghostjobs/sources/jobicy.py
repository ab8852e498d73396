"""Jobicy remote jobs API.

Docs: https://jobicy.com/jobs-rss-feed (API v2)
"""
from __future__ import annotations

from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting
from ghostjobs.retry import retry
from ghostjobs.sources.base import JobSource, as_list
from ghostjobs.sources.normalize import build_posting, first_text, salary_bound

log = get_logger(__name__)

API_URL = "https://jobicy.com/api/v2/remote-jobs"


class JobicySource(JobSource):
    name = "jobicy"

    @retry()
    def _fetch(self, count: int) -> list[dict]:
        return as_list(self.http.get_json(API_URL, params={"count": count}), "jobs")

    def fetch(self) -> list[RawPosting]:
        return self._keep([
            build_posting(
                title=hit.get("jobTitle"),
                company=hit.get("companyName"),
                location=first_text(hit.get("jobGeo"), "Remote"),
                location_type="REMOTE",
                apply_url=hit.get("url"),
                source_url=hit.get("url"),
                source=self.name,
                description=first_text(hit.get("jobDescription"), hit.get("jobExcerpt")),
                salary_min=salary_bound(hit.get("annualSalaryMin")),
                salary_max=salary_bound(hit.get("annualSalaryMax"), upper=True),
            )
            for hit in self._fetch(count=100)
        ])
