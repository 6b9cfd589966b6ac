"""Simple in-memory cache with TTL for API responses."""

import os
import time

DEFAULT_TTL = int(os.environ.get("CACHE_TTL", "3600"))  # 1 hour
SWEEP_INTERVAL = 300  # seconds between purges of expired entries

# Sentinel for "no entry"; None is a legitimate cached value.
MISSING = object()

_store: dict[str, tuple[object, float]] = {}
_last_sweep = 0.0


def get(key: str, default=MISSING):
    """Return cached data if it exists and hasn't expired, else ``default``."""
    entry = _store.get(key)
    if entry is None:
        return default
    data, expires_at = entry
    if time.time() >= expires_at:
        _store.pop(key, None)
        return default
    return data


def _sweep(now: float):
    """Drop every expired entry, including keys that are never read again."""
    global _last_sweep
    for key in [k for k, (_, expires_at) in _store.items() if now >= expires_at]:
        del _store[key]
    _last_sweep = now


def set(key: str, data, ttl: float = DEFAULT_TTL):
    """Store data with a TTL (seconds)."""
    now = time.time()
    if now - _last_sweep >= SWEEP_INTERVAL:
        _sweep(now)
    _store[key] = (data, now + ttl)


def invalidate(key: str):
    """Remove a cached entry."""
    _store.pop(key, None)


def clear():
    """Drop every cached entry."""
    global _last_sweep
    _store.clear()
    _last_sweep = 0.0
