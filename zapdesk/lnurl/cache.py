import time
from collections import OrderedDict
from typing import Callable, Optional

from loguru import logger

from ..core.base import CacheEntry, PayParameters


class PayParametersCache:
    """TTL cache of discovered payRequest parameters, keyed by lowercased address.

    Entries are replaced whole on every write, so a reader sees either the
    previous entry or the new one. When `max_entries` is reached the least
    recently written entry is dropped.
    """

    def __init__(
        self,
        ttl: float,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self.clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def get(self, key: str) -> Optional[PayParameters]:
        entry = self._entries.get(key.lower())
        if entry is None:
            return None
        if entry.is_stale(self.ttl, self.clock()):
            logger.trace(f"Cache entry for {key} is stale.")
            return None
        return entry.params

    def set(self, key: str, params: PayParameters) -> None:
        key = key.lower()
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(params=params, fetched_at=self.clock())
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.trace(f"Evicted cache entry for {evicted}.")

    def invalidate(self, key: str) -> None:
        self._entries.pop(key.lower(), None)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
