"""Deterministic topic identifiers derived from canonical URLs."""

from __future__ import annotations

_FNV64_OFFSET_BASIS = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3
_MASK64 = 0xFFFFFFFFFFFFFFFF


def fnv1a_64(data: bytes) -> int:
    """Return the unsigned 64-bit FNV-1a hash of ``data``."""

    value = _FNV64_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * _FNV64_PRIME) & _MASK64
    return value


def url_to_id(url: str) -> int:
    """Map a canonical URL to a signed 64-bit identifier.

    The same URL always yields the same identifier, across calls, processes
    and backends, so topics surfaced by separate queries can be matched up.
    """

    value = fnv1a_64(url.encode("utf-8"))
    if value >= 1 << 63:
        value -= 1 << 64
    return value


__all__ = ["fnv1a_64", "url_to_id"]
