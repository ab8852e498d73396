"""Bounded fan-out helper: run one task per item, a batch at a time."""
from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

from ghostjobs.log import get_logger

log = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def run_in_batches(
    items: Sequence[T],
    fn: Callable[[T], R],
    *,
    batch_size: int,
    pause_s: float = 0.0,
    on_error: Callable[[T, Exception], None] | None = None,
) -> dict[int, R]:
    """Apply ``fn`` to every item with at most ``batch_size`` calls in flight.

    Results are keyed by the item's index. A batch always runs to completion
    before the next one starts; ``pause_s`` is slept between batches to stay
    under third-party rate limits. An item whose call raises is missing from
    the result and handed to ``on_error``.
    """
    results: dict[int, R] = {}
    size = max(1, batch_size)
    for start in range(0, len(items), size):
        batch = items[start:start + size]
        with ThreadPoolExecutor(max_workers=len(batch)) as pool:
            futures = [pool.submit(fn, item) for item in batch]
        for offset, future in enumerate(futures):
            try:
                results[start + offset] = future.result()
            except Exception as exc:
                log.warning("%s failed on item %d: %s", getattr(fn, "__name__", "task"), start + offset, exc)
                if on_error is not None:
                    on_error(batch[offset], exc)
        if start + size < len(items) and pause_s > 0:
            time.sleep(pause_s)
    return results
