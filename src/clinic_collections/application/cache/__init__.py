"""Application cache – injectable scoped cache."""
from clinic_collections.application.cache.keys import CacheKey
from clinic_collections.application.cache.scoped import (
    CacheScopeConfig,
    CacheStats,
    InMemoryScopedCache,
    ScopedCache,
)

__all__ = [
    "CacheKey",
    "CacheScopeConfig",
    "CacheStats",
    "InMemoryScopedCache",
    "ScopedCache",
]
