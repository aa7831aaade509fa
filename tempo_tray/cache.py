"""Thread-safe TTL cache for raw API response bodies."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from tempo_tray.locks import ReadWriteLock
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache")


@dataclass(frozen=True)
class CachedResponse:
    """Raw body of one request identity and the instant it stops being served."""
    identity: str
    raw_body: bytes
    expires_at: float


class TTLCache:
    """Identity -> raw body store with lazy expiry.

    Expired entries are never swept; they are ignored by `get` and replaced by
    the next `put` for the same identity. Entries are immutable and swapped in
    whole under the write lock, so readers never see a partial entry.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty cache; `clock` returns seconds on a monotonic scale."""
        self._clock = clock
        self._entries: Dict[str, CachedResponse] = {}
        self._lock = ReadWriteLock()

    def get(self, identity: str) -> Tuple[Optional[bytes], bool]:
        """Return `(body, True)` for a live entry, `(None, False)` otherwise."""
        with self._lock.read():
            entry = self._entries.get(identity)
        if entry is None:
            return None, False
        if self._clock() >= entry.expires_at:
            logger.debug("Cache entry expired", extra={"identity": identity})
            return None, False
        return entry.raw_body, True

    def put(self, identity: str, body: bytes, ttl: float) -> None:
        """Store `body` for `identity`, replacing any previous entry."""
        entry = CachedResponse(identity=identity, raw_body=bytes(body), expires_at=self._clock() + ttl)
        with self._lock.write():
            self._entries[identity] = entry

    def peek(self, identity: str) -> Optional[CachedResponse]:
        """Return the stored entry, expired or not, without touching it."""
        with self._lock.read():
            return self._entries.get(identity)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock.write():
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)
