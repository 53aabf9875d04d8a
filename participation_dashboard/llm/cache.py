"""
In-memory cache for LLM summaries.

Summaries are keyed by a SHA-256 hash of a stable JSON rendering of the
request inputs (purpose, model and post sample). The cache is injected into
the summarizer, so callers choose its lifetime; the CLI keeps one per process.
"""

from __future__ import annotations

from collections import OrderedDict
import hashlib
import json
import threading
from typing import Any, Protocol


class SummaryCache(Protocol):
    """Minimal cache interface used by the summarizer."""

    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class LRUSummaryCache:
    """Thread-safe least-recently-used cache with a fixed capacity.

    Entries are stored fully formed under a lock, so concurrent workers
    never observe a partial entry.

    Attributes:
        capacity: Maximum number of entries kept; 0 disables caching
    """

    def __init__(self, capacity: int = 256):
        self.capacity = max(0, int(capacity))
        self._data: OrderedDict[str, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def set(self, key: str, value: Any) -> None:
        if self.capacity == 0:
            return
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self.capacity:
                self._data.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data


def cache_key(payload: Any) -> str:
    """Return a content hash for a JSON-serializable payload.

    Key order does not affect the hash.
    """
    encoded = json.dumps(payload, sort_keys=True, ensure_ascii=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
