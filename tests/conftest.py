from __future__ import annotations

import os

os.environ.setdefault("GHOSTJOBS_LOG_TO_FILE", "false")

from datetime import datetime, timezone
from typing import Any, Callable

import pytest
import requests

from ghostjobs.config import PipelineConfig
from ghostjobs.http import HttpClient
from ghostjobs.models import RawPosting

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.closed = False

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stand-in for ``requests.Session``.

    ``routes`` maps ``url`` or ``(method, url)`` to a FakeResponse, an
    exception instance to raise, or a callable ``(method, url, kwargs)``.
    Unknown URLs answer 404.
    """

    def __init__(self, routes: dict | None = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def _respond(self, method: str, url: str, kwargs: dict) -> FakeResponse:
        self.calls.append((method, url))
        handler = self.routes.get((method, url), self.routes.get(url))
        if handler is None:
            return FakeResponse(404)
        if callable(handler):
            handler = handler(method, url, kwargs)
        if isinstance(handler, BaseException):
            raise handler
        return handler

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._respond("GET", url, kwargs)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        return self._respond(method, url, kwargs)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("time.sleep", lambda _s: None)


@pytest.fixture
def config(tmp_path) -> PipelineConfig:
    return PipelineConfig(
        greenhouse_companies=("acme",),
        lever_companies=("globex",),
        roster_pause_s=0.0,
        page_pause_s=0.0,
        verify_pause_s=0.0,
        score_pause_s=0.0,
        reverify_pause_s=0.0,
        store_path=tmp_path / "jobs.csv",
        reports_dir=tmp_path / "reports",
    )


@pytest.fixture
def make_http(config: PipelineConfig) -> Callable[..., HttpClient]:
    def _make(routes: dict | None = None) -> HttpClient:
        return HttpClient(config, session=FakeSession(routes))  # type: ignore[arg-type]

    return _make


def make_posting(**overrides: Any) -> RawPosting:
    values: dict[str, Any] = {
        "title": "Junior Developer",
        "company": "Acme",
        "location": "Remote",
        "location_type": "REMOTE",
        "apply_url": "https://boards.greenhouse.io/acme/jobs/1",
        "source_url": "https://boards.greenhouse.io/acme/jobs/1",
        "source": "greenhouse-acme",
        "description": "Build and maintain Python services for our payments platform. " * 10,
        "salary_min": 70_000,
        "salary_max": 90_000,
    }
    values.update(overrides)
    return RawPosting(**values)
