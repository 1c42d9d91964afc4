"""Application mutations – OptimisticMutationCoordinator.

Every mutation is applied to the local collection first, then sent to the
gateway.  Success swaps in the server's canonical entity; failure restores the
exact snapshot taken before the change and re-raises to the caller.
"""
from __future__ import annotations

import contextlib
import dataclasses
import uuid
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any, Awaitable, Callable

from clinic_collections.application.controller import DebouncedQueryController
from clinic_collections.application.gateway import CollectionGateway
from clinic_collections.application.session import require_user
from clinic_collections.kernel.errors import ConflictError, NotFoundError
from clinic_collections.kernel.types import Entity
from clinic_collections.observability.logging import get_logger

__all__ = ["MutationKind", "OptimisticMutationCoordinator", "OptimisticPatch"]


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    REMOVE = "remove"
    RESTORE = "restore"


@dataclasses.dataclass(frozen=True)
class OptimisticPatch:
    """A locally applied change waiting for its gateway call to settle."""

    entity_id: str
    kind: MutationKind
    patch: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    previous: Entity | None = None


def _temp_id() -> str:
    return f"tmp-{uuid.uuid4().hex[:12]}"


class OptimisticMutationCoordinator:
    """Optimistic create/update/toggle/reactivate/remove over a controller's collection.

    At most one mutation per entity id is in flight; a second one is rejected
    with :class:`ConflictError` before touching local state or the gateway.
    """

    def __init__(
        self,
        gateway: CollectionGateway,
        controller: DebouncedQueryController,
        *,
        temp_id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._gateway = gateway
        self._controller = controller
        self._temp_id_factory = temp_id_factory or _temp_id
        self._pending: dict[str, OptimisticPatch] = {}
        self._log = get_logger(__name__, collection=controller.name)

    @property
    def pending(self) -> tuple[OptimisticPatch, ...]:
        return tuple(self._pending.values())

    def is_pending(self, entity_id: str) -> bool:
        return entity_id in self._pending

    @contextlib.contextmanager
    def _claim(self, key: str, record: OptimisticPatch) -> Iterator[OptimisticPatch]:
        if key in self._pending:
            self._log.info("mutation_conflict", entity_id=key, kind=record.kind.value)
            raise ConflictError(
                f"Another change to '{key}' is still in progress",
                code="mutation_in_flight",
                detail={"entity_id": key, "in_flight": self._pending[key].kind.value},
            )
        self._pending[key] = record
        try:
            yield record
        finally:
            self._pending.pop(key, None)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, payload: Mapping[str, Any]) -> Entity:
        """Prepend a temporary entity, then swap in the server's entity.

        The temporary entity is found again by its correlation token, not its
        temporary id.
        """
        require_user(self._controller.session)
        collection = self._controller.collection
        token = uuid.uuid4().hex
        temporary = Entity(id=self._temp_id_factory(), data=dict(payload), token=token)
        record = OptimisticPatch(temporary.id, MutationKind.CREATE, dict(payload))

        with self._claim(token, record):
            generation = collection.generation
            collection.insert(0, temporary)
            collection.adjust_total(+1)
            self._controller.notify()
            try:
                created = await self._gateway.create(payload)
            except Exception as exc:
                index = collection.index_of_token(token)
                if index is not None:
                    collection.pop_at(index)
                    if collection.generation == generation:
                        collection.adjust_total(-1)
                self._controller.notify()
                self._log.warning("create_rolled_back", temp_id=temporary.id, error=repr(exc))
                raise
            index = collection.index_of_token(token)
            if index is not None:
                collection.replace_at(index, created)
                self._controller.notify()
            self._log.debug("create_confirmed", entity_id=created.id)
            return created

    # ------------------------------------------------------------------
    # Update / set_field / toggle_field
    # ------------------------------------------------------------------

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> Entity:
        return await self._optimistic_update(
            entity_id, patch, lambda: self._gateway.update(entity_id, patch)
        )

    async def reactivate(
        self, entity_id: str, optimistic: Mapping[str, Any] | None = None
    ) -> Entity:
        """Restore a deactivated entity, showing *optimistic* until the server answers."""
        return await self._optimistic_update(
            entity_id,
            optimistic or {},
            lambda: self._gateway.restore(entity_id),
            kind=MutationKind.RESTORE,
        )

    async def set_field(self, entity_id: str, field: str, value: Any) -> Entity:
        return await self._optimistic_update(
            entity_id, {field: value}, lambda: self._gateway.set_field(entity_id, field, value)
        )

    async def toggle_field(self, entity_id: str, field: str) -> Entity:
        """Flip a boolean field (e.g. ``is_favorite``) of a loaded entity."""
        current = self._controller.collection.find(entity_id)
        if current is None:
            raise NotFoundError(self._controller.name, entity_id)
        return await self.set_field(entity_id, field, not current.get(field))

    async def _optimistic_update(
        self,
        entity_id: str,
        patch: Mapping[str, Any],
        call: Callable[[], Awaitable[Entity]],
        *,
        kind: MutationKind = MutationKind.UPDATE,
    ) -> Entity:
        require_user(self._controller.session)
        collection = self._controller.collection
        previous = collection.find(entity_id)
        record = OptimisticPatch(entity_id, kind, dict(patch), previous)

        with self._claim(entity_id, record):
            optimistic = previous.with_changes(patch) if previous is not None else None
            if optimistic is not None:
                collection.replace(entity_id, optimistic)
                self._controller.notify()
            try:
                canonical = await call()
            except Exception as exc:
                # Only undo our own change; a refetch in between is newer data.
                if optimistic is not None and collection.find(entity_id) is optimistic:
                    collection.replace(entity_id, previous)  # type: ignore[arg-type]
                    self._controller.notify()
                self._log.warning(
                    f"{kind.value}_rolled_back", entity_id=entity_id, fields=sorted(patch), error=repr(exc)
                )
                raise
            if collection.replace(entity_id, canonical):
                self._controller.notify()
            return canonical

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    async def remove(self, entity_id: str) -> None:
        """Drop the entity locally, then remove it remotely.

        On failure the entity goes back to its original index.  Removing an id
        that is no longer loaded still calls the (idempotent) gateway but
        leaves ``total`` alone.
        """
        require_user(self._controller.session)
        collection = self._controller.collection
        record = OptimisticPatch(entity_id, MutationKind.REMOVE, previous=collection.find(entity_id))

        with self._claim(entity_id, record):
            generation = collection.generation
            popped = collection.pop(entity_id)
            if popped is not None:
                collection.adjust_total(-1)
                self._controller.notify()
            try:
                await self._gateway.remove(entity_id)
            except Exception as exc:
                if (
                    popped is not None
                    and collection.generation == generation
                    and collection.find(entity_id) is None
                ):
                    index, entity = popped
                    collection.insert(index, entity)
                    collection.adjust_total(+1)
                    self._controller.notify()
                self._log.warning("remove_rolled_back", entity_id=entity_id, error=repr(exc))
                raise
            self._log.debug("remove_confirmed", entity_id=entity_id, was_loaded=popped is not None)
