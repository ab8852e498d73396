"""Remote OK public API. The first array element is a legal/metadata notice.

Docs: https://remoteok.com/api
"""
from __future__ import annotations

from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting
from ghostjobs.retry import retry
from ghostjobs.sources.base import JobSource, as_list
from ghostjobs.sources.normalize import build_posting, first_text, salary_bound

log = get_logger(__name__)

API_URL = "https://remoteok.com/api"


class RemoteOKSource(JobSource):
    name = "remoteok"

    @retry()
    def _fetch(self) -> list[dict]:
        return as_list(self.http.get_json(API_URL))

    def fetch(self) -> list[RawPosting]:
        postings: list[RawPosting | None] = []
        for hit in self._fetch()[1:]:
            salary_min = salary_bound(hit.get("salary_min"))
            salary_max = salary_bound(hit.get("salary_max"), upper=True) or salary_bound(
                hit.get("salary_min"), upper=True
            )
            postings.append(
                build_posting(
                    title=hit.get("position"),
                    company=hit.get("company"),
                    location=first_text(hit.get("location"), "Remote"),
                    location_type="REMOTE",
                    apply_url=first_text(hit.get("apply_url"), hit.get("url")),
                    source_url=hit.get("url"),
                    source=self.name,
                    description=hit.get("description"),
                    salary_min=salary_min,
                    salary_max=salary_max,
                )
            )
        return self._keep(postings)
