"""Bounded worker pool for outbound summarization calls."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from contextvars import copy_context
import threading
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def map_with_concurrency(
    items: Sequence[T],
    concurrency: int,
    fn: Callable[[T], R],
) -> list[R]:
    """Apply ``fn`` to every item with at most ``concurrency`` calls in flight.

    Workers drain a shared index counter; each claimed index is processed
    exactly once and its result is written to the matching slot, so output
    order follows input order regardless of completion order. If any call
    raises, the first exception is re-raised once all workers have stopped.
    """
    results: list[R | None] = [None] * len(items)
    if not items:
        return []

    next_index = 0
    index_lock = threading.Lock()
    stop = threading.Event()

    def _claim() -> int | None:
        nonlocal next_index
        with index_lock:
            if stop.is_set() or next_index >= len(items):
                return None
            current = next_index
            next_index += 1
            return current

    def _worker() -> None:
        while True:
            current = _claim()
            if current is None:
                return
            try:
                results[current] = fn(items[current])
            except BaseException:
                stop.set()
                raise

    workers = min(max(1, int(concurrency)), len(items))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        # Copy current context (including tracing spans) into each worker thread.
        futures = [executor.submit(copy_context().run, _worker) for _ in range(workers)]

    for future in futures:
        exc = future.exception()
        if exc is not None:
            raise exc

    return results  # type: ignore[return-value]
