"""
Cache Contracts

Data structures for the bounded in-process cache.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar


T = TypeVar("T")


class EvictionPolicy(str, Enum):
    """Which entry gives way when a cache is full."""
    LRU = "lru"
    LFU = "lfu"
    FIFO = "fifo"


@dataclass
class CacheEntry(Generic[T]):
    """
    Entry in a bounded cache.

    Mutable: access bookkeeping is updated on every hit.
    Times are seconds on the owning cache's clock.
    """
    value: T
    created_at: float
    expires_at: float
    access_count: int = 0
    last_accessed: float = 0.0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time statistics for one cache."""
    name: str
    size: int
    max_size: int
    hits: int
    misses: int
    evictions: int
    hit_rate: float
