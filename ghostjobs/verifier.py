"""Check that a posting is live, hosted on a trustworthy domain, and free of scam language.

Verification steps:
  1. The apply URL answers 2xx/3xx (HEAD, GET fallback, 10 s timeout).
  2. The apply host is a known ATS, or its bare root domain answers.
  3. Title + description match none of the red-flag patterns.
"""
from __future__ import annotations

import re
from typing import Callable
from urllib.parse import urlparse

from ghostjobs.batching import run_in_batches
from ghostjobs.config import PipelineConfig
from ghostjobs.http import HttpClient
from ghostjobs.log import get_logger
from ghostjobs.models import RawPosting, VerificationVerdict

log = get_logger(__name__)

# (pattern, label); every match is reported, in this order.
RED_FLAG_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"urgently hiring", re.I), "Urgently hiring language"),
    (re.compile(r"immediate start", re.I), "Immediate start pressure"),
    (re.compile(r"no experience needed", re.I), "No experience needed for tech role"),
    (re.compile(r"work from home \$\d+k", re.I), "Work from home with unrealistic salary claims"),
    (re.compile(r"\$\d{3,}/day", re.I), "Unrealistic daily rate"),
    (re.compile(r"\$\d{3,}/hour", re.I), "Unrealistic hourly rate (>$200/hr for entry level)"),
    (re.compile(r"guaranteed income", re.I), "Guaranteed income claims"),
    (re.compile(r"be your own boss", re.I), "MLM-style language"),
    (re.compile(r"unlimited earning", re.I), "Unlimited earning claims"),
    (re.compile(r"crypto.*payment", re.I), "Crypto payment offers"),
    (re.compile(r"training fee|pay for training", re.I), "Requires training fee"),
    (re.compile(r"send.*money|wire transfer", re.I), "Requests money transfer"),
    (re.compile(r"personal.*bank.*account", re.I), "Requests bank account info"),
    (re.compile(r"ssn|social security", re.I), "Requests SSN upfront"),
)

UNREALISTIC_SALARY_MIN = 200_000
UNREALISTIC_SALARY_FLAG = "Unrealistic entry-level salary (>$200k)"
VAGUE_COMPANY_FLAG = "Vague or confidential company name"
_VAGUE_COMPANY_NAMES = {"company", "confidential"}


def extract_host(url: str) -> str | None:
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    return host.lower() if host else None


def is_trusted_host(host: str, trusted_domains: tuple[str, ...]) -> bool:
    return any(host == d or host.endswith("." + d) for d in trusted_domains)


def detect_red_flags(posting: RawPosting) -> list[str]:
    text = f"{posting.title} {posting.description}"
    flags = [label for pattern, label in RED_FLAG_PATTERNS if pattern.search(text)]

    if posting.salary_min and posting.salary_min > UNREALISTIC_SALARY_MIN:
        flags.append(UNREALISTIC_SALARY_FLAG)

    company = posting.company.strip()
    if len(company) < 3 or company.lower() in _VAGUE_COMPANY_NAMES:
        flags.append(VAGUE_COMPANY_FLAG)
    return flags


def _notes(url_accessible: bool, status: int | None, trusted: bool, flags: list[str]) -> str:
    return "; ".join([
        f"URL accessible ({status})" if url_accessible else f"URL not accessible ({status or 'failed'})",
        "Company domain valid" if trusted else "Company domain invalid",
        f"Red flags: {', '.join(flags)}" if flags else "No red flags",
    ])


class Verifier:
    def __init__(self, http: HttpClient, config: PipelineConfig) -> None:
        self.http = http
        self.config = config

    def check_company_domain(self, apply_url: str) -> bool:
        host = extract_host(apply_url)
        if not host:
            return False
        if is_trusted_host(host, self.config.trusted_domains):
            return True
        root = host[4:] if host.startswith("www.") else host
        return self.http.check_url(f"https://{root}").accessible

    def verify(self, posting: RawPosting) -> VerificationVerdict:
        log.debug("Verifying: %s at %s", posting.title, posting.company)
        link = self.http.check_url(posting.apply_url)
        trusted = self.check_company_domain(posting.apply_url)
        flags = detect_red_flags(posting)
        return VerificationVerdict(
            url_accessible=link.accessible,
            http_status=link.status,
            company_domain_trusted=trusted,
            red_flags=tuple(flags),
            notes=_notes(link.accessible, link.status, trusted, flags),
        )

    def verify_all(
        self,
        postings: list[RawPosting],
        on_error: Callable[[RawPosting, Exception], None] | None = None,
    ) -> dict[int, VerificationVerdict]:
        """Verify in batches; returns verdicts keyed by position in ``postings``.

        A posting whose check raises is left out of the result and reported
        through ``on_error``.
        """
        return run_in_batches(
            postings,
            self.verify,
            batch_size=self.config.verify_batch_size,
            pause_s=self.config.verify_pause_s,
            on_error=on_error,
        )

