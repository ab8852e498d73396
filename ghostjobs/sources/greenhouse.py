"""Greenhouse job boards, one public board API per company.

Docs: https://developers.greenhouse.io/job-board.html
"""
from __future__ import annotations

from ghostjobs.config import PipelineConfig
from ghostjobs.http import HttpClient
from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting
from ghostjobs.sources.base import CompanyBoardSource, as_list
from ghostjobs.sources.normalize import build_posting, company_from_token, infer_location_type, text

log = get_logger(__name__)

BOARD_URL = "https://boards-api.greenhouse.io/v1/boards/{token}/jobs"


class GreenhouseSource(CompanyBoardSource):
    name = "greenhouse"

    def __init__(self, http: HttpClient, config: PipelineConfig) -> None:
        super().__init__(http, config, config.greenhouse_companies)

    def fetch_company(self, token: str) -> list[RawPosting]:
        data = self.http.get_json(BOARD_URL.format(token=token), params={"content": "true"})
        company = company_from_token(token)
        postings: list[RawPosting | None] = []
        for hit in as_list(data, "jobs"):
            location_info = hit.get("location")
            location = text(location_info.get("name")) if isinstance(location_info, dict) else ""
            postings.append(
                build_posting(
                    title=hit.get("title"),
                    company=company,
                    location=location or "Remote",
                    location_type=infer_location_type(location, "ONSITE"),
                    apply_url=hit.get("absolute_url"),
                    source_url=hit.get("absolute_url"),
                    source=f"greenhouse-{token}",
                    description=hit.get("content"),
                )
            )
        return self._keep(postings)
