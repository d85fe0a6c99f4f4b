"""Response cache backends."""

from .base import CachedResponse, ResponseCache
from .factory import ResponseCaches, build_response_caches, in_memory_caches
from .memory import InMemoryResponseCache
from .redis import RedisResponseCache

__all__ = [
    "CachedResponse",
    "ResponseCache",
    "ResponseCaches",
    "InMemoryResponseCache",
    "RedisResponseCache",
    "build_response_caches",
    "in_memory_caches",
]
