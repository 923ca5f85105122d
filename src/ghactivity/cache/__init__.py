"""Time-boxed response caching for ghactivity.

This package provides :class:`CacheStore`, a per-namespace JSON file cache
whose entries stay valid for a fixed TTL, and :class:`ActivityService`,
which serves fresh cached payloads and falls back to a fetcher on a miss.

Both are wired up by the ``activity`` and ``user`` commands, with the cache
root taken from :func:`~ghactivity.config.get_cache_dir` and the TTL from
the ``cache`` section of the configuration
(:class:`~ghactivity.models.CacheConfig`).
"""

from ghactivity.cache.service import ActivityService, FetchResult
from ghactivity.cache.store import CacheEntry, CacheStore

__all__ = ["ActivityService", "CacheEntry", "CacheStore", "FetchResult"]
