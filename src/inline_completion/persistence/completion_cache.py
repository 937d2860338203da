"""
In-memory completion cache keyed by request fingerprint.

Bounded (1000 entries) and time-limited (5 minutes). Eviction removes the
entry with the smallest access count, ties going to the entry met first in
insertion order. This is least-frequently-used on purpose, not LRU.
"""

from typing import Optional

import structlog

from inline_completion.models.completion_models import CacheEntry, CompletionSuggestion
from inline_completion.monitoring.metrics import completion_cache_events_total
from inline_completion.scheduling.clock import Clock, resolve_clock

logger = structlog.get_logger(__name__)


class CompletionCache:
    """
    Fingerprint -> ranked suggestions.

    Values are copied on the way in and on the way out, so callers can never
    mutate what the cache holds. Expired entries are dropped lazily on access;
    there are no background timers.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_size: int = 1000,
        clock: Optional[Clock] = None,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = resolve_clock(clock)
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def set(self, key: str, value: list[CompletionSuggestion]) -> None:
        """Store a copy of `value`, evicting one entry first if full."""
        if key not in self._entries and len(self._entries) >= self.max_size:
            self._evict_least_used()
        self._entries[key] = CacheEntry(
            value=[suggestion.model_copy() for suggestion in value],
            timestamp=self._clock.now(),
            access_count=1,
        )

    def get(self, key: str) -> Optional[list[CompletionSuggestion]]:
        """Return a copy of the cached suggestions, or None if absent/expired."""
        entry = self._entries.get(key)
        if entry is None:
            completion_cache_events_total.labels(event="miss").inc()
            return None
        if self._clock.now() - entry.timestamp > self.ttl_seconds:
            del self._entries[key]
            completion_cache_events_total.labels(event="expired").inc()
            return None
        entry.access_count += 1
        completion_cache_events_total.labels(event="hit").inc()
        return [suggestion.model_copy() for suggestion in entry.value]

    def access_count(self, key: str) -> Optional[int]:
        entry = self._entries.get(key)
        return entry.access_count if entry else None

    def clear(self) -> None:
        self._entries.clear()

    def _evict_least_used(self) -> None:
        victim: Optional[str] = None
        min_count = None
        for key, entry in self._entries.items():
            if min_count is None or entry.access_count < min_count:
                min_count = entry.access_count
                victim = key
        if victim is not None:
            del self._entries[victim]
            completion_cache_events_total.labels(event="evicted").inc()
            logger.debug("Evicted cache entry", access_count=min_count, size=len(self._entries))
