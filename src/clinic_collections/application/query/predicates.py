"""Application query – reusable filter predicates.

Each factory takes a key path and returns a ``(entity, value) -> bool``
predicate for :class:`~clinic_collections.application.query.FilterDefinition`.
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from clinic_collections.application.query.spec import Predicate
from clinic_collections.kernel.types import Entity


def field_equals(path: str) -> Predicate:
    def predicate(entity: Entity, value: Any) -> bool:
        return entity.get(path) == value

    predicate.__name__ = f"field_equals({path})"
    return predicate


def field_truthy(path: str) -> Predicate:
    """Match entities whose *path* truthiness equals the filter value."""

    def predicate(entity: Entity, value: Any) -> bool:
        return bool(entity.get(path)) == bool(value)

    predicate.__name__ = f"field_truthy({path})"
    return predicate


def field_in(path: str) -> Predicate:
    def predicate(entity: Entity, value: Iterable[Any]) -> bool:
        return entity.get(path) in set(value)

    predicate.__name__ = f"field_in({path})"
    return predicate


def field_contains(path: str) -> Predicate:
    """Match when *value* is an element of a list field, or a substring of a text field."""

    def predicate(entity: Entity, value: Any) -> bool:
        current = entity.get(path)
        if current is None:
            return False
        if isinstance(current, str):
            return str(value).casefold() in current.casefold()
        try:
            return value in current
        except TypeError:
            return False

    predicate.__name__ = f"field_contains({path})"
    return predicate


__all__ = ["field_contains", "field_equals", "field_in", "field_truthy"]
