"""Application query – pure filter/sort/page engine."""
from __future__ import annotations

import dataclasses
import datetime
import math
import unicodedata
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any, Generic, TypeVar

from clinic_collections.application.query.spec import (
    FilterDefinition,
    FilterSpec,
    PageSpec,
    PaginationMode,
    QuerySchema,
    SortDirection,
    SortSpec,
)
from clinic_collections.kernel.errors import InvalidArgumentError
from clinic_collections.kernel.types import Entity

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class ViewSlice(Generic[T]):
    """The visible part of a collection with computed navigation properties."""

    items: tuple[T, ...]
    total: int
    page: int
    per_page: int

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


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collation_key(value: Any) -> tuple[int, Any]:
    """Sort key for a non-null value.

    Numbers compare numerically, strings ignoring case and accents (the raw
    string breaks ties), dates chronologically.  Values of different kinds
    never compare directly.
    """
    if isinstance(value, (bool, int, float, Decimal)):
        return (0, value)
    if isinstance(value, str):
        return (1, (_fold(value), value))
    if isinstance(value, datetime.datetime):
        return (2, value.isoformat())
    if isinstance(value, datetime.date):
        return (2, datetime.datetime.combine(value, datetime.time()).isoformat())
    return (3, str(value))


def matches_search(entity: Entity, term: str, fields: Iterable[str]) -> bool:
    """Case-insensitive substring match on at least one of *fields*."""
    needle = _fold(term.strip())
    if not needle:
        return True
    for path in fields:
        value = entity.get(path)
        if value is None:
            continue
        if needle in _fold(str(value)):
            return True
    return False


def _active_filters(filters: FilterSpec, schema: QuerySchema) -> list[tuple[FilterDefinition, Any]]:
    active = []
    for name, value in filters.values.items():
        definition = schema.filter(name)
        if definition.is_active(value):
            active.append((definition, value))
    return active


def apply_filters(items: Iterable[Entity], filters: FilterSpec, schema: QuerySchema) -> list[Entity]:
    """Keep items passing every active filter and, when given, the search term."""
    active = _active_filters(filters, schema)
    term = filters.search_term
    kept = []
    for item in items:
        if not all(definition.predicate(item, value) for definition, value in active):
            continue
        if term and not matches_search(item, term, schema.searchable_fields):
            continue
        kept.append(item)
    return kept


def sort_items(items: Sequence[Entity], sort: SortSpec | None) -> list[Entity]:
    """Stable single-key sort; entities without a value go last in both directions."""
    if sort is None:
        return list(items)
    present = [item for item in items if item.get(sort.key) is not None]
    missing = [item for item in items if item.get(sort.key) is None]
    present.sort(
        key=lambda item: collation_key(item.get(sort.key)),
        reverse=sort.direction is SortDirection.DESC,
    )
    return present + missing


def compute_view(
    items: Sequence[Entity],
    filters: FilterSpec,
    sort: SortSpec | None,
    page: PageSpec,
    *,
    schema: QuerySchema,
    mode: PaginationMode = PaginationMode.CLIENT,
    server_total: int | None = None,
) -> ViewSlice[Entity]:
    """Produce the visible slice of *items* for the given filter/sort/page.

    In ``CLIENT`` mode *items* is every match and the slice is cut here; in
    ``SERVER`` mode *items* already is one page and ``total`` comes from
    *server_total*.
    """
    if page.per_page <= 0:
        raise InvalidArgumentError("per_page must be > 0", detail={"per_page": page.per_page})

    ordered = sort_items(apply_filters(items, filters, schema), sort)

    if mode is PaginationMode.SERVER:
        total = server_total if server_total is not None else len(ordered)
        return ViewSlice(items=tuple(ordered), total=total, page=page.page, per_page=page.per_page)

    start = page.offset
    return ViewSlice(
        items=tuple(ordered[start : start + page.per_page]),
        total=len(ordered),
        page=page.page,
        per_page=page.per_page,
    )


__all__ = [
    "ViewSlice",
    "apply_filters",
    "collation_key",
    "compute_view",
    "matches_search",
    "sort_items",
]
