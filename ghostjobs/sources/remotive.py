"""Remotive: free API for remote tech jobs (no API key required).

Docs: https://remotive.com/api/remote-jobs
"""
from __future__ import annotations

from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting
from ghostjobs.retry import retry
from ghostjobs.sources.base import JobSource, as_list
from ghostjobs.sources.normalize import build_posting, first_text, parse_salary

log = get_logger(__name__)

API_URL = "https://remotive.com/api/remote-jobs"


class RemotiveSource(JobSource):
    name = "remotive"

    @retry()
    def _fetch(self, limit: int) -> list[dict]:
        data = self.http.get_json(API_URL, params={"limit": limit})
        return as_list(data, "jobs")

    def fetch(self) -> list[RawPosting]:
        postings: list[RawPosting | None] = []
        for hit in self._fetch(limit=200):
            salary_min, salary_max = parse_salary(hit.get("salary"))
            postings.append(
                build_posting(
                    title=hit.get("title"),
                    company=hit.get("company_name"),
                    location=first_text(hit.get("candidate_required_location"), hit.get("job_type"), "Remote"),
                    location_type="REMOTE",
                    apply_url=hit.get("url"),
                    source_url=hit.get("url"),
                    source=self.name,
                    description=hit.get("description"),
                    salary_min=salary_min,
                    salary_max=salary_max,
                )
            )
        return self._keep(postings)
