"""In-memory response cache with lazy TTL expiry."""

import copy
import dataclasses
import threading
import time
from typing import Any, Callable, Dict, Optional

from citydash.domain import SourceTag
from citydash.response_cache.base import CachedResponse, ResponseCache

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="response_cache/in_memory")


class InMemoryResponseCache(ResponseCache):
    """Thread-safe, TTL-aware in-memory cache.

    Expired entries are dropped when read; there is no background sweep.
    Payloads are copied on the way in and out; callers never share a dict
    with the table.
    """

    def __init__(self, ttl_seconds: int, *, name: str = "cache", clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize with a TTL (seconds), a label for logs and a monotonic clock."""
        logger.debug("Initializing InMemoryResponseCache", extra={"cache": name, "ttl": ttl_seconds})
        self.ttl = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: dict[str, CachedResponse] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: CachedResponse) -> bool:
        """True once the entry has reached `inserted_at + ttl`."""
        return self._clock() >= entry.inserted_at + self.ttl

    def get(self, key: str) -> Optional[CachedResponse]:
        """Return a copy of the live entry for `key`, dropping it if expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry):
                self._entries.pop(key, None)
                return None
            return dataclasses.replace(entry, payload=copy.deepcopy(entry.payload))

    def put(self, key: str, payload: Dict[str, Any], source: SourceTag) -> CachedResponse:
        """Store a private copy of `payload` under `key`."""
        entry = CachedResponse(
            payload=copy.deepcopy(payload), inserted_at=self._clock(), source=source, city_key=key
        )
        with self._lock:
            self._entries[key] = entry
        return dataclasses.replace(entry, payload=payload)

    def delete(self, key: str) -> None:
        """Drop the entry for `key` if present."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def close(self) -> None:
        """Release memory held by the table."""
        self.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
