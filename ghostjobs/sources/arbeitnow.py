"""Arbeitnow job board API (mostly European, onsite unless flagged remote).

Docs: https://www.arbeitnow.com/api/job-board-api
"""
from __future__ import annotations

from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting
from ghostjobs.retry import retry
from ghostjobs.sources.base import JobSource, as_list
from ghostjobs.sources.normalize import build_posting, infer_location_type, text

log = get_logger(__name__)

API_URL = "https://www.arbeitnow.com/api/job-board-api"


class ArbeitnowSource(JobSource):
    name = "arbeitnow"

    @retry()
    def _fetch(self) -> list[dict]:
        return as_list(self.http.get_json(API_URL), "data")

    def fetch(self) -> list[RawPosting]:
        postings: list[RawPosting | None] = []
        for hit in self._fetch():
            location = text(hit.get("location"))
            location_type = "REMOTE" if hit.get("remote") else infer_location_type(location, "ONSITE")
            postings.append(
                build_posting(
                    title=hit.get("title"),
                    company=hit.get("company_name"),
                    location=location,
                    location_type=location_type,
                    apply_url=hit.get("url"),
                    source_url=hit.get("url"),
                    source=self.name,
                    description=hit.get("description"),
                )
            )
        return self._keep(postings)
