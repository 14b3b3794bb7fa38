"""Bounded caching for signatures, match lists and predictions."""

from __future__ import annotations
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar, Union
import inspect
import json
import time

from ..contracts.base import ConfigurationError, coerce_enum
from ..contracts.cache_contracts import CacheEntry, CacheStats, EvictionPolicy
from ..signature.fingerprint import hash_string


T = TypeVar("T")

SIGNATURE_CACHE_SIZE = 500
SIGNATURE_CACHE_TTL = 30 * 60
MATCH_CACHE_SIZE = 200
MATCH_CACHE_TTL = 10 * 60
PREDICTION_CACHE_SIZE = 100
PREDICTION_CACHE_TTL = 5 * 60


@dataclass
class CacheConfig:
    """Capacity, default TTL (seconds) and eviction policy of one cache."""
    name: str = "cache"
    max_size: int = 100
    default_ttl: float = 300.0
    policy: EvictionPolicy = EvictionPolicy.LRU

    def __post_init__(self):
        if self.max_size <= 0:
            raise ConfigurationError(f"{self.name}: max_size must be > 0, got {self.max_size}")
        if self.default_ttl <= 0:
            raise ConfigurationError(f"{self.name}: default_ttl must be > 0, got {self.default_ttl}")
        try:
            self.policy = coerce_enum("policy", EvictionPolicy, self.policy)
        except ValueError as exc:
            raise ConfigurationError(f"{self.name}: {exc}") from None


class BoundedCache(Generic[T]):
    """
    In-memory cache with per-entry TTL and a capacity bound.

    Expired entries are treated as absent and removed lazily on get/has;
    cleanup() sweeps them eagerly. Not synchronized: share an instance
    across tasks only if the caller serializes access.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time
    ):
        self.config = config or CacheConfig()
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def max_size(self) -> int:
        return self.config.max_size

    def get(self, key: str) -> Optional[T]:
        """Cached value, or None on miss or expiry."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        now = self._clock()
        if entry.is_expired(now):
            del self._entries[key]
            self._misses += 1
            return None

        self._hits += 1
        entry.access_count += 1
        entry.last_accessed = now
        if self.config.policy == EvictionPolicy.LRU:
            self._entries.move_to_end(key)
        return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None):
        """Store value; evicts one entry first if the key is new and the cache is full."""
        if ttl is not None and ttl <= 0:
            raise ConfigurationError(f"{self.name}: ttl must be > 0, got {ttl}")

        if key not in self._entries and len(self._entries) >= self.config.max_size:
            self._evict()

        now = self._clock()
        self._entries[key] = CacheEntry(
            value=value,
            created_at=now,
            expires_at=now + (ttl if ttl is not None else self.config.default_ttl),
            access_count=0,
            last_accessed=now
        )
        self._entries.move_to_end(key)

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return False
        return True

    def delete(self, key: str) -> bool:
        if key in self._entries:
            del self._entries[key]
            return True
        return False

    def clear(self):
        """Drop all entries and reset statistics."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def cleanup(self) -> int:
        """Remove every expired entry; returns how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> CacheStats:
        total = self._hits + self._misses
        return CacheStats(
            name=self.name,
            size=len(self._entries),
            max_size=self.config.max_size,
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
            hit_rate=self._hits / total if total > 0 else 0.0
        )

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Union[T, Awaitable[T]]],
        ttl: Optional[float] = None
    ) -> T:
        """
        Cached value, or the factory's result stored under key.

        Not atomic: concurrent callers missing the same key may each run
        the factory, so factories must be idempotent.
        """
        entry = self._entries.get(key)
        if entry is not None and not entry.is_expired(self._clock()):
            return self.get(key)
        # Counts the miss and drops an expired entry
        self.get(key)

        value = factory()
        if inspect.isawaitable(value):
            value = await value
        self.set(key, value, ttl)
        return value

    def _evict(self):
        if not self._entries:
            return

        policy = self.config.policy
        if policy == EvictionPolicy.LRU:
            victim = next(iter(self._entries))
        elif policy == EvictionPolicy.LFU:
            victim = min(self._entries, key=lambda k: self._entries[k].access_count)
        else:
            victim = min(self._entries, key=lambda k: self._entries[k].created_at)

        del self._entries[victim]
        self._evictions += 1


# =============================================================================
# SPECIALIZED CACHES
# =============================================================================

def signature_cache_config(policy: EvictionPolicy = EvictionPolicy.LRU) -> CacheConfig:
    return CacheConfig("signatures", SIGNATURE_CACHE_SIZE, SIGNATURE_CACHE_TTL, policy)


def match_cache_config(policy: EvictionPolicy = EvictionPolicy.LRU) -> CacheConfig:
    return CacheConfig("matches", MATCH_CACHE_SIZE, MATCH_CACHE_TTL, policy)


def prediction_cache_config(policy: EvictionPolicy = EvictionPolicy.LRU) -> CacheConfig:
    return CacheConfig("predictions", PREDICTION_CACHE_SIZE, PREDICTION_CACHE_TTL, policy)


def create_signature_cache(**kwargs) -> BoundedCache:
    return BoundedCache(signature_cache_config(), **kwargs)


def create_match_cache(**kwargs) -> BoundedCache:
    return BoundedCache(match_cache_config(), **kwargs)


def create_prediction_cache(**kwargs) -> BoundedCache:
    return BoundedCache(prediction_cache_config(), **kwargs)


class CacheBundle:
    """The three per-stage caches owned by one engine instance."""

    def __init__(
        self,
        signatures: Optional[BoundedCache] = None,
        matches: Optional[BoundedCache] = None,
        predictions: Optional[BoundedCache] = None
    ):
        self.signatures = signatures if signatures is not None else create_signature_cache()
        self.matches = matches if matches is not None else create_match_cache()
        self.predictions = predictions if predictions is not None else create_prediction_cache()

    def caches(self):
        return (self.signatures, self.matches, self.predictions)

    def get_stats(self) -> Dict[str, CacheStats]:
        return {cache.name: cache.get_stats() for cache in self.caches()}

    def clear_all(self):
        for cache in self.caches():
            cache.clear()


# =============================================================================
# KEY CONVENTIONS
# =============================================================================

def signature_key(raw_input: Any) -> str:
    return f"sig_{hash_string(_stable_text(raw_input))}"


def match_key(fingerprint: str, options: Optional[Dict[str, Any]] = None) -> str:
    return f"match_{fingerprint}_{hash_string(_stable_text(options or {}))}"


def prediction_key(fingerprint: str, position: int) -> str:
    return f"pred_{fingerprint}_{position}"


def _stable_text(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)
