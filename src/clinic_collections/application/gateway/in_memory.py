"""Application gateway – InMemoryCollectionGateway."""
from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, Callable

from clinic_collections.application.gateway.port import ListResult
from clinic_collections.application.query import (
    FilterSpec,
    PageSpec,
    PaginationMode,
    QuerySchema,
    SortSpec,
    compute_view,
)
from clinic_collections.kernel.errors import ConflictError, NotFoundError, ValidationError
from clinic_collections.kernel.types import Entity

Validator = Callable[[Mapping[str, Any]], list[dict[str, Any]]]

__all__ = ["InMemoryCollectionGateway"]


class InMemoryCollectionGateway:
    """In-process backend for one entity type.

    Deletes are soft: removed entities are kept as tombstones for
    ``restore``, and removing an absent id succeeds.  ``validator`` returns
    field errors for a merged payload; ``transitions`` maps ``field -> {from_value: {allowed to_values}}``
    and rejects other changes with :class:`ConflictError`.
    """

    def __init__(
        self,
        resource: str,
        schema: QuerySchema,
        items: list[Entity] | None = None,
        *,
        validator: Validator | None = None,
        transitions: Mapping[str, Mapping[Any, frozenset[Any]]] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._resource = resource
        self._schema = schema
        self._items: dict[str, Entity] = {item.id: item for item in items or []}
        self._tombstones: dict[str, Entity] = {}
        self._validator = validator
        self._transitions = transitions or {}
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    @property
    def items(self) -> list[Entity]:
        return list(self._items.values())

    @property
    def removed(self) -> list[Entity]:
        return list(self._tombstones.values())

    async def list(
        self, filters: FilterSpec, sort: SortSpec | None, page: PageSpec | None
    ) -> ListResult:
        unknown = sorted(set(filters.values) - self._schema.filter_names)
        if unknown:
            raise ValidationError(
                f"Unsupported filters for {self._resource}: {', '.join(unknown)}",
                errors=[{"field": name, "message": "unsupported filter"} for name in unknown],
            )
        view = compute_view(
            list(self._items.values()),
            filters,
            sort,
            page or PageSpec(page=1, per_page=max(len(self._items), 1)),
            schema=self._schema,
            mode=PaginationMode.CLIENT,
        )
        return ListResult(items=view.items, total=view.total)

    async def get_by_id(self, entity_id: str) -> Entity:
        return self._require(entity_id)

    async def create(self, payload: Mapping[str, Any]) -> Entity:
        data = {k: v for k, v in payload.items() if k != "id"}
        self._validate(data)
        entity = Entity(id=self._id_factory(), data=data)
        self._items[entity.id] = entity
        return entity

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> Entity:
        current = self._require(entity_id)
        changes = {k: v for k, v in patch.items() if k != "id"}
        self._check_transitions(current, changes)
        updated = current.with_changes(changes)
        self._validate(updated.data)
        self._items[entity_id] = updated
        return updated

    async def remove(self, entity_id: str) -> None:
        entity = self._items.pop(entity_id, None)
        if entity is not None:
            self._tombstones[entity_id] = entity

    async def set_field(self, entity_id: str, field: str, value: Any) -> Entity:
        return await self.update(entity_id, {field: value})

    async def restore(self, entity_id: str) -> Entity:
        """Bring a soft-deleted entity back."""
        if entity_id in self._items:
            return self._items[entity_id]
        try:
            entity = self._tombstones.pop(entity_id)
        except KeyError:
            raise NotFoundError(self._resource, entity_id) from None
        self._items[entity_id] = entity
        return entity

    def _require(self, entity_id: str) -> Entity:
        try:
            return self._items[entity_id]
        except KeyError:
            raise NotFoundError(self._resource, entity_id) from None

    def _validate(self, data: Mapping[str, Any]) -> None:
        if self._validator is None:
            return
        errors = self._validator(data)
        if errors:
            raise ValidationError(f"Invalid {self._resource} data", errors=errors)

    def _check_transitions(self, current: Entity, changes: Mapping[str, Any]) -> None:
        for field, graph in self._transitions.items():
            if field not in changes:
                continue
            before, after = current.get(field), changes[field]
            if before == after:
                continue
            if after not in graph.get(before, frozenset()):
                raise ConflictError(
                    f"{self._resource} '{current.id}' cannot change {field} from {before!r} to {after!r}",
                    detail={"field": field, "from": before, "to": after},
                )
