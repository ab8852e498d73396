from __future__ import annotations

import pytest
import requests

from ghostjobs.batching import run_in_batches
from ghostjobs.retry import SOURCE_FETCH, RetryPolicy, retry


def test_retry_recovers_from_transient_error():
    calls = []

    @retry(RetryPolicy(max_attempts=3, base_delay=0.01, retryable=(ConnectionError,)))
    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise ConnectionError("reset")
        return "ok"

    assert flaky() == "ok"
    assert len(calls) == 3


def test_retry_does_not_retry_other_errors():
    calls = []

    @retry(RetryPolicy(max_attempts=3, retryable=(ConnectionError,)))
    def broken():
        calls.append(1)
        raise KeyError("bad payload")

    with pytest.raises(KeyError):
        broken()
    assert len(calls) == 1


def test_retry_reraises_after_last_attempt():
    @retry(RetryPolicy(max_attempts=2, retryable=(ConnectionError,)))
    def down():
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        down()


def test_backoff_delay_is_capped():
    policy = RetryPolicy(base_delay=1.0, backoff_factor=2.0, max_delay=15.0, jitter=False)
    assert policy.delay(1) == 1.0
    assert policy.delay(3) == 4.0
    assert policy.delay(10) == 15.0


def test_source_fetch_policy_retries_request_errors_once():
    assert SOURCE_FETCH.max_attempts == 2
    assert issubclass(requests.ConnectionError, SOURCE_FETCH.retryable)


def test_run_in_batches_keys_by_index_and_reports_errors(monkeypatch):
    pauses = []
    monkeypatch.setattr("ghostjobs.batching.time.sleep", pauses.append)
    failed = []

    def square(n):
        if n == 4:
            raise ValueError("four")
        return n * n

    results = run_in_batches(
        [1, 2, 3, 4, 5, 6, 7],
        square,
        batch_size=3,
        pause_s=0.5,
        on_error=lambda item, exc: failed.append(item),
    )

    assert results == {0: 1, 1: 4, 2: 9, 4: 25, 5: 36, 6: 49}
    assert failed == [4]
    assert pauses == [0.5, 0.5]
