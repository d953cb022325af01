"""Generic in-memory cache with a per-entry TTL chosen at insertion time."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Iterable, Optional, TypeVar

from core.clock import Clock
from core.config import ONE_DAY, ONE_HOUR, ONE_MINUTE
from core.models import Item

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

# (key, now) -> seconds the value stays valid.
TTLPolicy = Callable[[K, float], float]

# Items can be edited for two hours after posting.
EDIT_WINDOW_SECONDS = 2 * ONE_HOUR


def default_text_ttl(item: Item, now: float) -> float:
    """TTL policy for sanitized display text keyed by item.

    Fresh items may still be edited so their text is only reused briefly;
    older content is immutable and can be kept much longer.
    """

    age = now - item.time
    if age < EDIT_WINDOW_SECONDS:
        return 30
    if age < ONE_DAY:
        return 10 * ONE_MINUTE
    return ONE_HOUR


@dataclass
class CacheEntry(Generic[V]):
    value: V
    inserted_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now >= self.inserted_at + self.ttl


class TTLCache(Generic[K, V]):
    """Thread-safe mapping with lazy expiry.

    Expired entries are dropped when a ``get`` or ``put`` touches them. When
    ``sweep_interval`` is set, ``put`` also removes every expired entry at most
    once per interval so key churn cannot grow the map without limit.
    """

    def __init__(
        self,
        clock: Clock,
        policy: TTLPolicy,
        sweep_interval: Optional[float] = None,
    ) -> None:
        self._clock = clock
        self._policy = policy
        self._sweep_interval = sweep_interval
        self._entries: dict[K, CacheEntry[V]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock.now()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, keys: Iterable[K]) -> list[tuple[K, V]]:
        """Return ``(key, value)`` for each requested key that is present and fresh."""

        now = self._clock.now()
        found: list[tuple[K, V]] = []
        with self._lock:
            for key in keys:
                entry = self._entries.get(key)
                if entry is None:
                    continue
                if entry.expired(now):
                    del self._entries[key]
                    continue
                found.append((key, entry.value))
        return found

    def put(self, key: K, value: V) -> None:
        now = self._clock.now()
        ttl = self._policy(key, now)
        with self._lock:
            if ttl <= 0:
                self._entries.pop(key, None)
            else:
                self._entries[key] = CacheEntry(value=value, inserted_at=now, ttl=ttl)
            if self._sweep_interval is not None and now - self._last_sweep >= self._sweep_interval:
                self._sweep_locked(now)

    def sweep(self) -> int:
        """Remove all expired entries and return how many were dropped."""

        now = self._clock.now()
        with self._lock:
            return self._sweep_locked(now)

    def _sweep_locked(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.expired(now)]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        return len(expired)
