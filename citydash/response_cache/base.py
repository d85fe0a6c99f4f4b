"""Shared protocol and entry type for response cache backends."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from citydash.domain import SourceTag


@dataclass(frozen=True)
class CachedResponse:
    """A computed payload plus the bookkeeping needed to validate a hit."""
    payload: Dict[str, Any]
    inserted_at: float
    source: SourceTag
    city_key: str


class ResponseCache(Protocol):
    """Protocol for per-domain response caches keyed by normalized city."""
    ttl: int

    def get(self, key: str) -> Optional[CachedResponse]:
        """Return the live entry for `key`, or None if missing or expired."""

    def put(self, key: str, payload: Dict[str, Any], source: SourceTag) -> CachedResponse:
        """Store `payload` for `key`, replacing any previous entry."""

    def delete(self, key: str) -> None:
        """Drop the entry for `key` without raising if it is absent."""

    def clear(self) -> None:
        """Drop every entry."""

    def close(self) -> None:
        """Release backend resources at shutdown."""
