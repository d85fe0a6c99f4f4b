"""City-name normalization and the stable string hash used to seed synthetic data."""

from __future__ import annotations

import re

from citydash.errors import MissingParameter

_WHITESPACE = re.compile(r"\s+")

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
_MASK_32 = 0xFFFFFFFF


def normalize_city(raw: str | None) -> str:
    """Return the cache/lookup key for a free-text city name.

    Trims, drops periods, collapses runs of whitespace to a single space and
    lowercases, so " St.  Louis " and "st louis" share a key. Raises
    MissingParameter when nothing is left.
    """
    if raw is None:
        raise MissingParameter("city")
    key = raw.replace(".", "")
    key = _WHITESPACE.sub(" ", key).strip().lower()
    if not key:
        raise MissingParameter("city")
    return key


def city_hash(city_key: str) -> int:
    """32-bit FNV-1a over the UTF-8 bytes of `city_key`."""
    h = FNV_OFFSET_BASIS
    for byte in city_key.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & _MASK_32
    return h


def hash_bucket(h: int, modulo: int, *, shift: int = 0) -> int:
    """Pick a value in [0, modulo) from a slice of the hash bits."""
    return (h >> shift) % modulo
