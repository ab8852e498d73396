"""Backoff policy for upstream fetches.

Only source adapters retry. Link checks and model calls fail fast so a
candidate is never retried within the same run.
"""
from __future__ import annotations

import functools
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Tuple, Type

import requests

from ghostjobs.log import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 2
    base_delay: float = 1.0
    max_delay: float = 15.0
    backoff_factor: float = 2.0
    jitter: bool = True
    retryable: Tuple[Type[BaseException], ...] = (Exception,)

    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        delay = min(self.base_delay * self.backoff_factor ** (attempt - 1), self.max_delay)
        if self.jitter:
            delay *= 0.5 + random.random()
        return delay


# One retry for a flaky board API; a second failure drops the source for this run.
SOURCE_FETCH = RetryPolicy(max_attempts=2, base_delay=1.5, retryable=(requests.RequestException,))


def retry(policy: RetryPolicy = SOURCE_FETCH) -> Callable:
    """Decorator: call again on ``policy.retryable`` errors, re-raising the last one."""

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 1
            while True:
                try:
                    return fn(*args, **kwargs)
                except policy.retryable as exc:
                    if attempt >= policy.max_attempts:
                        log.warning("%s gave up after %d attempts: %s", fn.__qualname__, attempt, exc)
                        raise
                    wait = policy.delay(attempt)
                    log.info("%s failed (%s), retry %d in %.1fs", fn.__qualname__, exc, attempt, wait)
                    time.sleep(wait)
                    attempt += 1

        return wrapper

    return decorator
