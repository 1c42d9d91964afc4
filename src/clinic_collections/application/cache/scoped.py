"""Application cache – ScopedCache port and InMemoryScopedCache."""
from __future__ import annotations

import dataclasses
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from clinic_collections.kernel.errors import InvalidArgumentError
from clinic_collections.kernel.time import Clock, SystemClock
from clinic_collections.observability.logging import get_logger

if TYPE_CHECKING:
    from clinic_collections.config.settings import CollectionSettings

__all__ = [
    "CacheScopeConfig",
    "CacheStats",
    "InMemoryScopedCache",
    "ScopedCache",
]

_log = get_logger(__name__)


@runtime_checkable
class ScopedCache(Protocol):
    def get(self, scope: str, key: str) -> Any: ...
    def set(self, scope: str, key: str, value: Any, ttl: float | None = None) -> Any: ...
    def invalidate(self, scope: str, key: str | None = None) -> int: ...


@dataclasses.dataclass(frozen=True)
class CacheScopeConfig:
    ttl: float
    max_size: int

    def __post_init__(self) -> None:
        if self.ttl <= 0:
            raise InvalidArgumentError("ttl must be > 0", detail={"ttl": self.ttl})
        if self.max_size <= 0:
            raise InvalidArgumentError("max_size must be > 0", detail={"max_size": self.max_size})


@dataclasses.dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


@dataclasses.dataclass
class _Entry:
    value: Any
    stored_at: float
    expires_at: float


class InMemoryScopedCache:
    """Per-scope TTL cache, created once per process and injected where needed.

    A full scope evicts its oldest 10% (at least one entry) before storing.
    ``None`` is never cached since it signals a miss.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        *,
        scopes: Mapping[str, CacheScopeConfig] | None = None,
        default_ttl: float = 300.0,
        max_size: int = 1000,
    ) -> None:
        self._clock = clock or SystemClock()
        self._default = CacheScopeConfig(ttl=default_ttl, max_size=max_size)
        self._configs: dict[str, CacheScopeConfig] = dict(scopes or {})
        self._data: dict[str, dict[str, _Entry]] = {}
        self._stats: dict[str, CacheStats] = {}

    @classmethod
    def from_settings(
        cls,
        settings: CollectionSettings,
        clock: Clock | None = None,
        *,
        scopes: Mapping[str, CacheScopeConfig] | None = None,
    ) -> "InMemoryScopedCache":
        """Cache whose default scope uses ``cache_ttl_seconds`` and ``cache_max_size``."""
        return cls(
            clock,
            scopes=scopes,
            default_ttl=float(settings.cache_ttl_seconds),
            max_size=settings.cache_max_size,
        )

    def config(self, scope: str) -> CacheScopeConfig:
        return self._configs.get(scope, self._default)

    def get(self, scope: str, key: str) -> Any:
        entries = self._data.get(scope, {})
        stats = self._stats.setdefault(scope, CacheStats())
        entry = entries.get(key)
        if entry is None:
            stats.misses += 1
            return None
        if self._clock.monotonic() >= entry.expires_at:
            del entries[key]
            stats.misses += 1
            return None
        stats.hits += 1
        return entry.value

    def set(self, scope: str, key: str, value: Any, ttl: float | None = None) -> Any:
        if value is None:
            return None
        config = self.config(scope)
        entries = self._data.setdefault(scope, {})
        if key not in entries and len(entries) >= config.max_size:
            self._evict_oldest(scope, max(1, math.floor(config.max_size * 0.1)))
        now = self._clock.monotonic()
        entries[key] = _Entry(value=value, stored_at=now, expires_at=now + (ttl or config.ttl))
        return value

    def invalidate(self, scope: str, key: str | None = None) -> int:
        """Drop one key, or the whole scope when *key* is ``None``."""
        entries = self._data.get(scope)
        if not entries:
            return 0
        if key is None:
            removed = len(entries)
            entries.clear()
        else:
            removed = 1 if entries.pop(key, None) is not None else 0
        if removed:
            _log.debug("cache_invalidated", scope=scope, key=key, removed=removed)
        return removed

    def purge_expired(self, scope: str | None = None) -> int:
        now = self._clock.monotonic()
        removed = 0
        for name in [scope] if scope is not None else list(self._data):
            entries = self._data.get(name, {})
            for key in [k for k, e in entries.items() if now >= e.expires_at]:
                del entries[key]
                removed += 1
        return removed

    def stats(self, scope: str) -> CacheStats:
        stats = self._stats.setdefault(scope, CacheStats())
        stats.size = len(self._data.get(scope, {}))
        return stats

    def _evict_oldest(self, scope: str, count: int) -> None:
        entries = self._data[scope]
        for key in sorted(entries, key=lambda k: entries[k].stored_at)[:count]:
            del entries[key]
        _log.debug("cache_evicted", scope=scope, count=count)
