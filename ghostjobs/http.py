"""Shared HTTP client used by source adapters, the verifier and the sweep."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from ghostjobs.config import PipelineConfig
from ghostjobs.log import get_logger

log = get_logger(__name__)

# Servers that refuse HEAD answer with one of these; a GET is tried instead.
_METHOD_REJECTED = {405, 501}


@dataclass(frozen=True)
class LinkCheck:
    accessible: bool
    status: int | None
    error: str | None = None

    def describe(self) -> str:
        if self.status is not None:
            return f"HTTP {self.status}"
        return self.error or "failed"


def _link_check(r: requests.Response) -> LinkCheck:
    r.close()
    return LinkCheck(accessible=200 <= r.status_code < 400, status=r.status_code)


def _pooled_session(pool_size: int) -> requests.Session:
    """Session whose per-host pool covers every worker thread that can hit one host at once."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class HttpClient:
    """Thin wrapper over a ``requests.Session`` with the pipeline's timeouts."""

    def __init__(self, config: PipelineConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self.session = session or _pooled_session(config.http_pool_size)

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET a JSON document from a source API; raises on non-2xx or bad JSON."""
        r = self.session.get(
            url,
            params=params,
            headers={"User-Agent": self.config.source_user_agent, "Accept": "application/json"},
            timeout=self.config.source_timeout_s,
        )
        r.raise_for_status()
        return r.json()

    def _probe(self, method: str, url: str) -> requests.Response:
        return self.session.request(
            method,
            url,
            headers={"User-Agent": self.config.link_user_agent},
            timeout=self.config.link_timeout_s,
            allow_redirects=True,
            stream=method == "GET",
        )

    def check_url(self, url: str) -> LinkCheck:
        """HEAD the URL (one GET when HEAD is refused or dropped); 2xx and 3xx count as live."""
        try:
            r = self._probe("HEAD", url)
        except requests.Timeout:
            return LinkCheck(accessible=False, status=None, error="timeout")
        except requests.RequestException as exc:
            # Some hosts drop HEAD connections outright.
            log.debug("HEAD failed for %s (%s), retrying with GET", url, exc)
            return self._check_with_get(url)
        if r.status_code in _METHOD_REJECTED:
            r.close()
            log.debug("HEAD rejected by %s (%d), retrying with GET", url, r.status_code)
            return self._check_with_get(url)
        return _link_check(r)

    def _check_with_get(self, url: str) -> LinkCheck:
        try:
            r = self._probe("GET", url)
        except requests.Timeout:
            return LinkCheck(accessible=False, status=None, error="timeout")
        except requests.RequestException as exc:
            log.debug("Link check failed for %s: %s", url, exc)
            return LinkCheck(accessible=False, status=None, error=type(exc).__name__)
        return _link_check(r)

    def close(self) -> None:
        self.session.close()
