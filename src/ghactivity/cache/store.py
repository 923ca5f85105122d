"""Time-boxed JSON file cache, one file per key.

Each :class:`CacheStore` owns a single namespace directory under the cache
root (``<cache_dir>/<namespace>/``) and stores one JSON artifact per cache
key. An artifact is a serialised :class:`CacheEntry`: the key, the payload
exactly as it was written, and an explicit ``stored_at`` UTC timestamp.

Validity is a read-time judgment. An entry is *fresh* while
``now - stored_at < ttl`` and is otherwise treated as absent; stale files
are never deleted by reads and are simply replaced by the next write.
Wall-clock time is used as-is, so clock changes are not compensated for.

Read outcomes:

* missing, zero-byte, malformed, or stale entry -- ``None`` (a silent miss)
* any other storage fault (permission denied, unreadable path) --
  :class:`~ghactivity.exceptions.CacheReadError`

Writes are atomic (temp file + ``os.replace``) and last-write-wins; there
is no locking between concurrent writers of the same key.

See Also:
    :class:`~ghactivity.cache.service.ActivityService` -- the get-or-fetch
    orchestration built on top of this store.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from ghactivity.config import atomic_write
from ghactivity.exceptions import CacheReadError, CacheWriteError, InvalidUsageError
from ghactivity.models import DEFAULT_TTL_SECONDS

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_SLUG_LENGTH = 64


class CacheEntry(BaseModel):
    """A single persisted cache artifact.

    Attributes:
        key: The cache key this entry was written under.
        payload: The JSON value exactly as it was written.
        stored_at: UTC time the entry was written.
    """

    key: str = Field(description="Cache key the entry belongs to")
    payload: Any = Field(description="Cached JSON value")
    stored_at: datetime = Field(description="UTC write time")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_key(key: str) -> str:
    """Return *key* unchanged, or raise if it is empty.

    Raises:
        InvalidUsageError: If *key* is empty or whitespace only.
    """
    if not isinstance(key, str) or not key.strip():
        raise InvalidUsageError("Cache key must be a non-empty string")
    return key


class CacheStore:
    """Read/write time-boxed cache entries for one namespace.

    Args:
        root: Cache root directory. Passed in explicitly so tests can use a
            temporary directory.
        namespace: Subdirectory holding this store's artifacts (e.g.
            ``"events"`` or ``"users"``).
        ttl_seconds: How long an entry stays fresh after it is written.
        clock: Zero-argument callable returning the current aware
            ``datetime``. Defaults to UTC wall-clock time.

    Example::

        store = CacheStore(tmp_path, "events", ttl_seconds=600)
        store.write("octocat", [{"type": "WatchEvent"}])
        entry = store.read("octocat")
        assert entry.payload == [{"type": "WatchEvent"}]
    """

    def __init__(
        self,
        root: str | Path,
        namespace: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Optional[Clock] = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._root = Path(root)
        self._namespace = namespace
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock: Clock = clock or _utcnow

    @property
    def directory(self) -> Path:
        """Directory holding this namespace's artifacts."""
        return self._root / self._namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def path_for(self, key: str) -> Path:
        """Return the artifact path for *key*.

        The file name is a readable slug of the key plus a short SHA-256
        digest, so keys that differ only in case stay distinct on
        case-insensitive filesystems.
        """
        validate_key(key)
        slug = _UNSAFE_CHARS.sub("_", key)[:_MAX_SLUG_LENGTH].lstrip(".") or "key"
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
        return self.directory / f"{slug}-{digest}.json"

    def read(self, key: str) -> Optional[CacheEntry]:
        """Return the fresh entry for *key*, or ``None`` on a miss.

        Args:
            key: The cache key.

        Returns:
            The stored :class:`CacheEntry` when one exists, parses, and is
            younger than the TTL. ``None`` otherwise.

        Raises:
            CacheReadError: If the artifact exists but cannot be read.
            InvalidUsageError: If *key* is empty.
        """
        path = self.path_for(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Cache miss (%s): no entry for %r", self._namespace, key)
            return None
        except UnicodeDecodeError:
            logger.debug("Cache miss (%s): undecodable entry at %s", self._namespace, path)
            return None
        except OSError as exc:
            raise CacheReadError(f"Cannot read cache entry {path}: {exc}") from exc

        entry = self._parse(text, key, path)
        if entry is None:
            return None

        if not self.is_fresh(entry):
            logger.debug(
                "Cache miss (%s): entry for %r is stale (age %s)",
                self._namespace,
                key,
                self.age(entry),
            )
            return None

        logger.debug("Cache hit (%s): %r", self._namespace, key)
        return entry

    def write(self, key: str, payload: Any) -> CacheEntry:
        """Persist *payload* under *key*, replacing any previous entry.

        Args:
            key: The cache key.
            payload: Any JSON-serialisable value.

        Returns:
            The :class:`CacheEntry` that was written.

        Raises:
            CacheWriteError: If the payload is not JSON-serialisable or the
                file cannot be written.
            InvalidUsageError: If *key* is empty.
        """
        path = self.path_for(key)
        entry = CacheEntry(key=key, payload=payload, stored_at=self._clock())
        try:
            text = json.dumps(entry.model_dump(mode="json"), indent=2, allow_nan=False) + "\n"
        except (TypeError, ValueError) as exc:
            raise CacheWriteError(f"Cannot serialise cache entry for '{key}': {exc}") from exc

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            atomic_write(path, text)
        except OSError as exc:
            raise CacheWriteError(f"Cannot write cache entry {path}: {exc}") from exc

        logger.debug("Cache write (%s): %r -> %s", self._namespace, key, path)
        return entry

    def age(self, entry: CacheEntry) -> timedelta:
        """Return how long ago *entry* was written."""
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now - entry.stored_at

    def is_fresh(self, entry: CacheEntry) -> bool:
        """Return ``True`` while *entry* is younger than the TTL."""
        return self.age(entry) < self._ttl

    def entries(self) -> list[Path]:
        """Return all artifact paths in this namespace, sorted."""
        if not self.directory.is_dir():
            return []
        return sorted(p for p in self.directory.glob("*.json") if p.is_file())

    def clear(self) -> int:
        """Delete every artifact in this namespace.

        Returns:
            The number of files removed.

        Raises:
            CacheWriteError: If a file cannot be removed.
        """
        removed = 0
        for path in self.entries():
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise CacheWriteError(f"Cannot remove cache entry {path}: {exc}") from exc
            removed += 1
        return removed

    def _parse(self, text: str, key: str, path: Path) -> Optional[CacheEntry]:
        """Deserialise an artifact, returning ``None`` when it is unusable."""
        if not text.strip():
            logger.debug("Cache miss (%s): empty entry at %s", self._namespace, path)
            return None
        try:
            entry = CacheEntry.model_validate_json(text)
        except ValueError as exc:
            logger.debug("Cache miss (%s): corrupt entry at %s: %s", self._namespace, path, exc)
            return None
        if entry.key != key:
            logger.debug(
                "Cache miss (%s): %s belongs to %r, not %r",
                self._namespace,
                path,
                entry.key,
                key,
            )
            return None
        if entry.stored_at.tzinfo is None:
            entry.stored_at = entry.stored_at.replace(tzinfo=timezone.utc)
        return entry
