"""Application gateway – CollectionGateway port and ListResult."""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from clinic_collections.application.query import FilterSpec, PageSpec, SortSpec
from clinic_collections.kernel.types import Entity


@dataclasses.dataclass(frozen=True)
class ListResult:
    """One ``list`` response: the returned items and the total match count."""

    items: tuple[Entity, ...] = ()
    total: int = 0

    @classmethod
    def empty(cls) -> "ListResult":
        return cls()


@runtime_checkable
class CollectionGateway(Protocol):
    """Port: remote store for one entity type.

    Pure I/O boundary, no cached state.  ``page=None`` asks for every match
    (client-side pagination).  ``remove`` is idempotent; ``restore`` brings a
    deactivated entity back and returns its canonical form.
    """

    async def list(
        self, filters: FilterSpec, sort: SortSpec | None, page: PageSpec | None
    ) -> ListResult: ...

    async def get_by_id(self, entity_id: str) -> Entity: ...

    async def create(self, payload: Mapping[str, Any]) -> Entity: ...

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> Entity: ...

    async def remove(self, entity_id: str) -> None: ...

    async def set_field(self, entity_id: str, field: str, value: Any) -> Entity: ...

    async def restore(self, entity_id: str) -> Entity: ...


__all__ = ["CollectionGateway", "ListResult"]
