"""Lever postings API, one public endpoint per company.

Docs: https://github.com/lever/postings-api
"""
from __future__ import annotations

from ghostjobs.config import PipelineConfig
from ghostjobs.http import HttpClient
from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting
from ghostjobs.sources.base import CompanyBoardSource, as_list
from ghostjobs.sources.normalize import build_posting, company_from_token, first_text, infer_location_type, text

log = get_logger(__name__)

POSTINGS_URL = "https://api.lever.co/v0/postings/{token}"


class LeverSource(CompanyBoardSource):
    name = "lever"

    def __init__(self, http: HttpClient, config: PipelineConfig) -> None:
        super().__init__(http, config, config.lever_companies)

    def fetch_company(self, token: str) -> list[RawPosting]:
        data = self.http.get_json(POSTINGS_URL.format(token=token), params={"mode": "json"})
        company = company_from_token(token)
        postings: list[RawPosting | None] = []
        for hit in as_list(data):
            categories = hit.get("categories")
            location = text(categories.get("location")) if isinstance(categories, dict) else ""
            postings.append(
                build_posting(
                    title=hit.get("text"),
                    company=company,
                    location=location or "Remote",
                    location_type=infer_location_type(location, "ONSITE"),
                    apply_url=first_text(hit.get("applyUrl"), hit.get("hostedUrl")),
                    source_url=hit.get("hostedUrl"),
                    source=f"lever-{token}",
                    description=hit.get("descriptionPlain"),
                )
            )
        return self._keep(postings)
