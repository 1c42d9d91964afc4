"""Application controller – ViewState, ControllerStatus and LocalCollection."""
from __future__ import annotations

import dataclasses
import math
from collections.abc import Iterable
from enum import Enum

from clinic_collections.kernel.errors import BaseError
from clinic_collections.kernel.types import Entity


class ControllerStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclasses.dataclass(frozen=True)
class ViewState:
    """What the presentational layer renders.

    On a failed refetch ``error`` is set and ``items`` keep the last good data.
    """

    items: tuple[Entity, ...] = ()
    total: int = 0
    loading: bool = False
    error: BaseError | None = None
    status: ControllerStatus = ControllerStatus.IDLE
    page: int = 1
    per_page: int = 50

    @property
    def total_pages(self) -> int:
        if self.per_page <= 0 or self.total <= 0:
            return 0
        return math.ceil(self.total / self.per_page)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def is_empty(self) -> bool:
        return not self.items


class LocalCollection:
    """The controller's local copy of the fetched items and total.

    ``generation`` increases each time a fetch replaces the content, so
    optimistic mutations can tell whether their snapshot is still the basis
    of what is shown.
    """

    def __init__(self) -> None:
        self._items: list[Entity] = []
        self._total = 0
        self._generation = 0

    @property
    def items(self) -> tuple[Entity, ...]:
        return tuple(self._items)

    @property
    def total(self) -> int:
        return self._total

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        return len(self._items)

    def replace_all(self, items: Iterable[Entity], total: int) -> None:
        self._items = list(items)
        self._total = total
        self._generation += 1

    def clear(self) -> None:
        self.replace_all((), 0)

    def index_of(self, entity_id: str) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == entity_id:
                return index
        return None

    def index_of_token(self, token: str) -> int | None:
        for index, item in enumerate(self._items):
            if item.token == token:
                return index
        return None

    def find(self, entity_id: str) -> Entity | None:
        index = self.index_of(entity_id)
        return None if index is None else self._items[index]

    def insert(self, index: int, entity: Entity) -> None:
        self._items.insert(min(max(index, 0), len(self._items)), entity)

    def replace(self, entity_id: str, entity: Entity) -> bool:
        index = self.index_of(entity_id)
        if index is None:
            return False
        self._items[index] = entity
        return True

    def replace_at(self, index: int, entity: Entity) -> None:
        self._items[index] = entity

    def pop(self, entity_id: str) -> tuple[int, Entity] | None:
        index = self.index_of(entity_id)
        if index is None:
            return None
        return index, self._items.pop(index)

    def pop_at(self, index: int) -> Entity:
        return self._items.pop(index)

    def adjust_total(self, delta: int) -> None:
        self._total = max(0, self._total + delta)


__all__ = ["ControllerStatus", "LocalCollection", "ViewState"]
