"""Bounded, Brotli-compressed store for serialized aggregate payloads."""
from __future__ import annotations

import logging

import brotli

from solvelog.errors import CacheError

logger = logging.getLogger(__name__)


class ResultCache:
    """Job id -> compressed payload map with first-in, first-out eviction.

    Entries are immutable: ``set`` on an existing key is ignored. When the
    cache is full the oldest *inserted* key is evicted, however recently it
    was read. The cache is not thread- or task-safe on its own; callers guard
    it with a reader/writer lock.

    Example:
        cache = ResultCache(capacity=8)
        cache.set(42, payload)
        cache.get(42) == payload
    """

    def __init__(self, capacity: int = 8, *, quality: int = 5) -> None:
        """
        Args:
            capacity: Maximum number of entries.
            quality: Brotli quality (0-11) used on ``set``.
        """
        if capacity < 1:
            raise ValueError("cache capacity must be at least 1")
        self.capacity = capacity
        self.quality = quality
        # dicts keep insertion order, which is the eviction order
        self._entries: dict[int, bytes] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def has(self, key: int) -> bool:
        return key in self._entries

    def get(self, key: int) -> bytes | None:
        """Return the decompressed payload, or ``None`` on a miss.

        A blob that fails to decompress is reported as a miss.
        """
        blob = self._entries.get(key)
        if blob is None:
            return None
        try:
            return brotli.decompress(blob)
        except brotli.error as e:
            logger.warning("Discarding unreadable cache entry for job %s: %s", key, e)
            return None

    def set(self, key: int, value: bytes) -> None:
        """Compress and store ``value`` unless ``key`` is already cached.

        Raises:
            CacheError: If compression fails.
        """
        if key in self._entries:
            return
        try:
            blob = brotli.compress(value, quality=self.quality)
        except brotli.error as e:
            raise CacheError(f"failed to compress payload for job {key}: {e}") from e

        if len(self._entries) >= self.capacity:
            evicted = next(iter(self._entries))
            del self._entries[evicted]
            logger.debug("Evicted cached payload for job %s", evicted)

        self._entries[key] = blob
        logger.debug("Cached payload for job %s (%d -> %d bytes)", key, len(value), len(blob))

    def remove(self, key: int) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
