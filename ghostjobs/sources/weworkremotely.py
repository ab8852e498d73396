"""We Work Remotely public API."""
from __future__ import annotations

from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting
from ghostjobs.retry import retry
from ghostjobs.sources.base import JobSource, as_list
from ghostjobs.sources.normalize import build_posting, first_text, text

log = get_logger(__name__)

API_URL = "https://weworkremotely.com/api/v1/remote-jobs"
JOB_PAGE_URL = "https://weworkremotely.com/remote-jobs/{id}"


def _apply_link(hit: dict) -> str:
    # "instructions" is sometimes a bare URL, sometimes prose
    instructions = text(hit.get("instructions"))
    if instructions.startswith(("http://", "https://")):
        return instructions
    return text(hit.get("url"))


class WeWorkRemotelySource(JobSource):
    name = "weworkremotely"

    @retry()
    def _fetch(self) -> list[dict]:
        return as_list(self.http.get_json(API_URL))

    def fetch(self) -> list[RawPosting]:
        postings: list[RawPosting | None] = []
        for hit in self._fetch():
            source_url = text(hit.get("url"))
            if not source_url and hit.get("id") is not None:
                source_url = JOB_PAGE_URL.format(id=hit["id"])
            postings.append(
                build_posting(
                    title=hit.get("title"),
                    company=hit.get("company"),
                    location=first_text(hit.get("region"), "Remote"),
                    location_type="REMOTE",
                    apply_url=_apply_link(hit),
                    source_url=source_url,
                    source=self.name,
                    description=hit.get("description"),
                )
            )
        return self._keep(postings)
