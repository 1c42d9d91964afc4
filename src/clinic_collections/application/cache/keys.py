"""Application cache – CacheKey builder."""
from __future__ import annotations

__all__ = ["CacheKey"]


class CacheKey:
    """Factory for deterministic cache key strings."""

    @staticmethod
    def for_entity(entity_id: str) -> str:
        return f"entity:{entity_id}"

    @staticmethod
    def for_owner(owner_id: str, entity_id: str) -> str:
        return f"{owner_id}:entity:{entity_id}"
