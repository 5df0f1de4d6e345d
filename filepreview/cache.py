"""
Ephemeral Blob Cache
====================

Keeps large binary previews (PDF documents) in memory for a limited time so
that the preview response can carry a short identifier and the bytes can be
streamed by a follow-up request.

Expiry is sliding: every successful ``get`` refreshes the entry. Expired
entries are swept after each ``put`` and are never returned by ``get``,
even before the next sweep has removed them.

The cache is a plain object so callers can share one instance per process,
or hand a test a private instance driven by a fake clock:

    >>> now = [0.0]
    >>> cache = BlobCache(ttl_seconds=10, clock=lambda: now[0])
    >>> file_id = cache.put(b"%PDF-1.7 ...", format="pdf")
    >>> now[0] = 11
    >>> cache.get(file_id) is None
    True
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from filepreview.extractors.util.identifiers import generate_identifier

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


@dataclass
class CacheEntry:
    payload: bytes = field(repr=False)
    format: str
    display_name: str
    timestamp: float

    @property
    def size(self) -> int:
        return len(self.payload)


class BlobStore(Protocol):
    def put(
        self, payload: bytes, *, format: str, display_name: Optional[str] = None
    ) -> str: ...

    def get(self, file_id: str) -> Optional[CacheEntry]: ...

    def sweep(self) -> int: ...


class BlobCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.ttl_seconds

    def put(
        self, payload: bytes, *, format: str, display_name: Optional[str] = None
    ) -> str:
        """Store ``payload`` and return its identifier."""
        file_id = generate_identifier("file")
        if display_name is None:
            display_name = f"document_{time.time_ns() // 1_000_000}.{format}"
        with self._lock:
            self._entries[file_id] = CacheEntry(
                payload=payload,
                format=format,
                display_name=display_name,
                timestamp=self._clock(),
            )
        logger.debug(f"Cached [{file_id}] ({len(payload)} bytes, {format})")
        self.sweep()
        return file_id

    def get(self, file_id: str) -> Optional[CacheEntry]:
        """The entry for ``file_id`` with its timestamp refreshed, or None."""
        with self._lock:
            entry = self._entries.get(file_id)
            if entry is None:
                return None
            now = self._clock()
            if self._expired(entry, now):
                del self._entries[file_id]
                return None
            entry.timestamp = now
            return entry

    def sweep(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [
                file_id
                for file_id, entry in self._entries.items()
                if self._expired(entry, now)
            ]
            for file_id in expired:
                del self._entries[file_id]
        if expired:
            logger.info("Swept %d expired cache entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, file_id: str) -> bool:
        with self._lock:
            return file_id in self._entries


_default_cache: Optional[BlobCache] = None
_default_cache_lock = threading.Lock()


def get_default_cache(ttl_seconds: float = DEFAULT_TTL_SECONDS) -> BlobCache:
    """The process-wide cache, created on first use."""
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = BlobCache(ttl_seconds=ttl_seconds)
        return _default_cache
