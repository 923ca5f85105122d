"""Get-or-fetch orchestration over a :class:`~ghactivity.cache.store.CacheStore`.

:class:`ActivityService` hides the cache/miss decision from callers. For a
given key it either returns the fresh cached payload without touching the
network, or calls the supplied fetcher exactly once, persists the result
best-effort, and returns it.

Per call::

    START -> fresh entry? -- yes --> RETURNED (from_cache=True)
                          +- no --> fetch -- ok --> write (best-effort) --> RETURNED
                                           +- error --> FAILED (propagated unchanged)

Failure policy:

* fetch failures propagate unchanged -- no retry, no stale fallback, no write
* :class:`~ghactivity.exceptions.CacheReadError` propagates, since the cache
  state is unknown
* :class:`~ghactivity.exceptions.CacheWriteError` is logged and attached to
  the result; the fetched payload is still returned

The service never prints. Callers use :attr:`FetchResult.from_cache` and
:attr:`FetchResult.write_error` to report what happened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ghactivity.cache.store import CacheStore, validate_key
from ghactivity.exceptions import CacheWriteError

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Any]


@dataclass
class FetchResult:
    """Outcome of :meth:`ActivityService.get_or_fetch`.

    Attributes:
        payload: The cached or freshly fetched JSON value.
        from_cache: ``True`` when the payload came from a fresh cache entry
            and no network call was made.
        stored_at: When the returned payload was written to the cache.
            ``None`` when caching is disabled or the write failed.
        write_error: The error raised while persisting a fresh payload, if
            any.
    """

    payload: Any
    from_cache: bool
    stored_at: Optional[datetime] = None
    write_error: Optional[CacheWriteError] = None


class ActivityService:
    """Serve payloads from the cache when fresh, from the fetcher otherwise.

    Args:
        store: The cache to consult. ``None`` disables caching: every call
            fetches and nothing is written.

    Example::

        service = ActivityService(CacheStore(cache_dir, "events"))
        with GitHubClient(config.request) as client:
            result = service.get_or_fetch("octocat", client.fetch_events)
    """

    def __init__(self, store: Optional[CacheStore]) -> None:
        self._store = store

    @property
    def store(self) -> Optional[CacheStore]:
        return self._store

    def get_or_fetch(self, key: str, fetcher: Fetcher, refresh: bool = False) -> FetchResult:
        """Return the payload for *key*, fetching it on a miss.

        Args:
            key: The cache key (a GitHub username).
            fetcher: Callable taking the key and returning the remote JSON
                value, or raising a
                :class:`~ghactivity.exceptions.FetchError`.
            refresh: Skip the cache lookup and always fetch. The fresh
                payload is still written.

        Returns:
            A :class:`FetchResult` describing the payload and its origin.

        Raises:
            FetchError: Whatever *fetcher* raised, unchanged.
            CacheReadError: If the cache could not be read.
            InvalidUsageError: If *key* is empty.
        """
        validate_key(key)

        if self._store is not None and not refresh:
            entry = self._store.read(key)
            if entry is not None:
                logger.debug("Serving %r from %s cache", key, self._store.namespace)
                return FetchResult(
                    payload=entry.payload,
                    from_cache=True,
                    stored_at=entry.stored_at,
                )

        logger.debug("Fetching %r from upstream", key)
        payload = fetcher(key)

        if self._store is None:
            return FetchResult(payload=payload, from_cache=False)

        try:
            entry = self._store.write(key, payload)
        except CacheWriteError as exc:
            logger.warning("Could not cache response for %r: %s", key, exc)
            return FetchResult(payload=payload, from_cache=False, write_error=exc)

        return FetchResult(payload=payload, from_cache=False, stored_at=entry.stored_at)
