"""Application query – filter, sort and page value objects."""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable

from clinic_collections.kernel.errors import InvalidArgumentError
from clinic_collections.kernel.types import Entity

Predicate = Callable[[Entity, Any], bool]


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class PaginationMode(str, Enum):
    """Where slicing happens; fixed per collection at construction time."""

    SERVER = "server"
    CLIENT = "client"


@dataclasses.dataclass(frozen=True)
class SortSpec:
    """Single sort criterion."""

    key: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        if not self.key:
            raise InvalidArgumentError("sort key must not be empty")
        object.__setattr__(self, "direction", SortDirection(self.direction))


@dataclasses.dataclass(frozen=True)
class PageSpec:
    """Offset-based pagination parameters."""

    page: int = 1
    per_page: int = 50

    def __post_init__(self) -> None:
        if self.page < 1:
            raise InvalidArgumentError("page must be >= 1", detail={"page": self.page})
        if self.per_page <= 0:
            raise InvalidArgumentError("per_page must be > 0", detail={"per_page": self.per_page})

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclasses.dataclass(frozen=True)
class FilterDefinition:
    """A named filter and the predicate that applies it.

    A value is *active* when it is neither ``None`` nor equal to ``default``,
    the match-all sentinel (``"all"`` for a status select, ``False`` for a
    checkbox).
    """

    name: str
    predicate: Predicate = dataclasses.field(compare=False)
    default: Any = None

    def is_active(self, value: Any) -> bool:
        return value is not None and value != self.default


@dataclasses.dataclass(frozen=True)
class QuerySchema:
    """Filters a collection supports and the fields free-text search looks at."""

    filters: tuple[FilterDefinition, ...] = ()
    searchable_fields: tuple[str, ...] = ()

    def filter(self, name: str) -> FilterDefinition:
        for definition in self.filters:
            if definition.name == name:
                return definition
        raise InvalidArgumentError(f"Unknown filter {name!r}", detail={"filter": name})

    @property
    def filter_names(self) -> frozenset[str]:
        return frozenset(d.name for d in self.filters)

    def defaults(self) -> dict[str, Any]:
        return {d.name: d.default for d in self.filters}


@dataclasses.dataclass(frozen=True)
class FilterSpec:
    """Current filter values plus the free-text ``search`` term."""

    values: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    search: str = ""

    @property
    def search_term(self) -> str:
        return self.search.strip()

    def with_value(self, name: str, value: Any) -> "FilterSpec":
        return dataclasses.replace(self, values={**self.values, name: value})

    def with_search(self, search: str) -> "FilterSpec":
        return dataclasses.replace(self, search=search or "")

    def active(self, schema: QuerySchema) -> "FilterSpec":
        """Drop every value that is inactive under *schema*.

        Names unknown to *schema* are kept so the receiver can reject them.
        """
        kept = {}
        for name, value in self.values.items():
            if name in schema.filter_names and not schema.filter(name).is_active(value):
                continue
            kept[name] = value
        return dataclasses.replace(self, values=kept)


@dataclasses.dataclass(frozen=True)
class QuerySpec:
    """Everything the UI controls: filters, search, sort and page.

    Changing filters, search, sort or page size goes back to page 1.
    """

    filters: FilterSpec = dataclasses.field(default_factory=FilterSpec)
    sort: SortSpec | None = None
    page: PageSpec = dataclasses.field(default_factory=PageSpec)

    def with_filter(self, name: str, value: Any) -> "QuerySpec":
        return dataclasses.replace(
            self, filters=self.filters.with_value(name, value), page=self._first_page()
        )

    def with_search(self, search: str) -> "QuerySpec":
        return dataclasses.replace(
            self, filters=self.filters.with_search(search), page=self._first_page()
        )

    def with_sort(self, sort: SortSpec | None) -> "QuerySpec":
        return dataclasses.replace(self, sort=sort, page=self._first_page())

    def with_page(self, page: int) -> "QuerySpec":
        return dataclasses.replace(self, page=PageSpec(page=page, per_page=self.page.per_page))

    def with_per_page(self, per_page: int) -> "QuerySpec":
        return dataclasses.replace(self, page=PageSpec(page=1, per_page=per_page))

    def _first_page(self) -> PageSpec:
        return PageSpec(page=1, per_page=self.page.per_page)


__all__ = [
    "FilterDefinition",
    "FilterSpec",
    "PageSpec",
    "PaginationMode",
    "Predicate",
    "QuerySchema",
    "QuerySpec",
    "SortDirection",
    "SortSpec",
]
