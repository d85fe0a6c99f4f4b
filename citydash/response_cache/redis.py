"""Redis-backed response cache with TTL."""

import json
import time
from typing import Any, Dict, Optional

from citydash.domain import SourceTag
from citydash.response_cache.base import CachedResponse, ResponseCache
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="response_cache/redis")


class RedisResponseCache(ResponseCache):
    """Responses stored as JSON under `<prefix><city key>` with SETEX.

    Redis owns expiry. Backend errors never propagate: a failed read is a
    miss and a failed write is skipped.
    """

    def __init__(self, client, ttl_seconds: int, *, prefix: str = "citydash:weather:") -> None:
        """Initialize with a Redis client, TTL and key prefix."""
        logger.debug("Initializing RedisResponseCache", extra={"prefix": prefix, "ttl": ttl_seconds})
        self.client = client
        self.ttl = ttl_seconds
        self.prefix = prefix

    def _key(self, key: str) -> str:
        """Return the Redis key for a normalized city key."""
        return f"{self.prefix}{key}"

    @staticmethod
    def _dump(entry: CachedResponse) -> bytes:
        """Serialize an entry to JSON bytes."""
        data = {
            "payload": entry.payload,
            "inserted_at": entry.inserted_at,
            "source": entry.source.value,
            "city_key": entry.city_key,
        }
        return json.dumps(data).encode("utf-8")

    @staticmethod
    def _load(raw: bytes | str) -> Optional[CachedResponse]:
        """Deserialize an entry, or None if the stored document is unusable."""
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            data = json.loads(raw)
            return CachedResponse(
                payload=data["payload"],
                inserted_at=float(data["inserted_at"]),
                source=SourceTag(data["source"]),
                city_key=str(data["city_key"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Failed to deserialize cached response: %s", exc)
            return None

    def get(self, key: str) -> Optional[CachedResponse]:
        """Return the entry for `key`; Redis has already dropped expired ones."""
        try:
            raw = self.client.get(self._key(key))
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to read cached response from Redis: %s", exc)
            return None
        if not raw:
            return None
        return self._load(raw)

    def put(self, key: str, payload: Dict[str, Any], source: SourceTag) -> CachedResponse:
        """Store `payload` under `key` with the configured TTL."""
        entry = CachedResponse(payload=payload, inserted_at=time.time(), source=source, city_key=key)
        try:
            self.client.setex(self._key(key), self.ttl, self._dump(entry))
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to write cached response to Redis: %s", exc)
        return entry

    def delete(self, key: str) -> None:
        """Remove the entry for `key`."""
        try:
            self.client.delete(self._key(key))
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to delete cached response from Redis: %s", exc)

    def clear(self) -> None:
        """Best-effort clear for all entries under the configured prefix."""
        try:
            for redis_key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(redis_key)
        except Exception as exc:  # pragma: no cover
            logger.error("Failed to clear cached responses from Redis: %s", exc)

    def close(self) -> None:
        """Close the Redis connection pool."""
        try:
            self.client.close()
        except Exception as exc:  # pragma: no cover
            logger.warning("Failed to close Redis client: %s", exc)
