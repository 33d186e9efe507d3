"""Bounded TTL cache for product lookups."""

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class Cache(Protocol):
    """Key-value cache with per-entry expiry."""

    def get(self, key: str) -> object | None:
        """Return the value for ``key`` unless it is missing or stale."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store ``value`` for ``ttl_seconds``."""


@dataclass
class InMemoryCache(Cache):
    """Process-local LRU cache; stale entries are dropped on access."""

    max_entries: int = 512
    clock: Callable[[], float] = time.monotonic
    _entries: OrderedDict[str, tuple[float, object]] = field(
        default_factory=OrderedDict, init=False
    )

    def get(self, key: str) -> object | None:
        item = self._entries.get(key)
        if item is None:
            return None
        deadline, value = item
        if self.clock() >= deadline:
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        self._entries[key] = (self.clock() + ttl_seconds, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)
