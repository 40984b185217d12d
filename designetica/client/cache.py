"""In-memory wireframe cache with TTL expiry and a bounded LRU size.

Expired entries are evicted lazily on read. When the cache is full, the least
recently used entry is dropped on write.
"""

from __future__ import annotations

import json
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from designetica.settings import WIREFRAME_CACHE_MAX_ENTRIES, WIREFRAME_CACHE_TTL


@dataclass(frozen=True)
class CacheEntry:
    key: str
    html: str
    timestamp_ms: int
    processing_time_ms: int


def make_cache_key(
    description: str,
    theme: str,
    color_scheme: str,
    fast_mode: bool,
) -> str:
    """Compose the cache key from every request field that affects output.

    The key is a JSON array so field boundaries can never collide
    (``"a|b", "c"`` vs ``"a", "b|c"``).
    """
    return json.dumps(
        [description.strip(), theme, color_scheme, bool(fast_mode)],
        ensure_ascii=False,
        separators=(",", ":"),
    )


class WireframeCache:
    """Explicitly constructed cache; inject one per orchestrator.

    Args:
        ttl_seconds: Entry lifetime. An entry is expired once
            ``now - timestamp >= ttl``.
        max_entries: LRU bound.
        clock: Returns the current time in seconds (injectable for tests).
    """

    def __init__(
        self,
        ttl_seconds: float = WIREFRAME_CACHE_TTL,
        max_entries: int = WIREFRAME_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.time,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._ttl_ms = int(ttl_seconds * 1000)
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._now_ms() - entry.timestamp_ms >= self._ttl_ms:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry

    def set(self, key: str, html: str, processing_time_ms: int = 0) -> CacheEntry:
        entry = CacheEntry(
            key=key,
            html=html,
            timestamp_ms=self._now_ms(),
            processing_time_ms=processing_time_ms,
        )
        self._entries[key] = entry
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        return entry

    def clear(self) -> None:
        self._entries.clear()
