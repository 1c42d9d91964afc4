"""Application view – CollectionDefinition and the CollectionView facade."""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Callable

from clinic_collections.application.cache import CacheKey, ScopedCache
from clinic_collections.application.controller import (
    DebouncedQueryController,
    ViewListener,
    ViewState,
)
from clinic_collections.application.gateway import CollectionGateway
from clinic_collections.application.mutations import OptimisticMutationCoordinator
from clinic_collections.application.query import (
    FilterSpec,
    PageSpec,
    PaginationMode,
    QuerySchema,
    QuerySpec,
    SortDirection,
    SortSpec,
)
from clinic_collections.application.session import SessionProvider, require_user
from clinic_collections.config.settings import CollectionSettings
from clinic_collections.kernel.errors import InvalidArgumentError
from clinic_collections.kernel.types import Entity

__all__ = ["CollectionDefinition", "CollectionView"]


@dataclasses.dataclass(frozen=True)
class CollectionDefinition:
    """Static description of one entity type as shown in a list view.

    ``per_page`` and ``refresh_interval`` fall back to
    :class:`~clinic_collections.config.settings.CollectionSettings` when
    ``None``.  ``restore_patch`` is what a reactivated entity shows while the
    gateway call is in flight.
    """

    name: str
    schema: QuerySchema
    pagination: PaginationMode = PaginationMode.SERVER
    default_sort: SortSpec | None = None
    per_page: int | None = None
    min_search_length: int = 0
    refresh_interval: float | None = None
    restore_patch: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def initial_query(self, settings: CollectionSettings) -> QuerySpec:
        return QuerySpec(
            filters=FilterSpec(values=self.schema.defaults()),
            sort=self.default_sort,
            page=PageSpec(page=1, per_page=self.per_page or settings.default_per_page),
        )


class CollectionView:
    """Everything a list screen binds to: state, setters and mutation triggers.

    Usage::

        view = CollectionView(PATIENTS, gateway, session)
        async with view:
            view.set_search("maria")
            await view.toggle_field(patient_id, "is_favorite")
            render(view.state)
    """

    def __init__(
        self,
        definition: CollectionDefinition,
        gateway: CollectionGateway,
        session: SessionProvider,
        *,
        settings: CollectionSettings | None = None,
        cache: ScopedCache | None = None,
    ) -> None:
        self._definition = definition
        self._settings = settings or CollectionSettings()
        self._gateway = gateway
        self._session = session
        self._cache = cache
        self._controller = DebouncedQueryController(
            gateway,
            session,
            schema=definition.schema,
            pagination=definition.pagination,
            initial_query=definition.initial_query(self._settings),
            debounce=self._settings.debounce_seconds,
            min_search_length=definition.min_search_length,
            refresh_interval=definition.refresh_interval or self._settings.refresh_interval,
            name=definition.name,
        )
        self._mutations = OptimisticMutationCoordinator(gateway, self._controller)

    @property
    def definition(self) -> CollectionDefinition:
        return self._definition

    @property
    def controller(self) -> DebouncedQueryController:
        return self._controller

    @property
    def mutations(self) -> OptimisticMutationCoordinator:
        return self._mutations

    @property
    def state(self) -> ViewState:
        return self._controller.state

    @property
    def query(self) -> QuerySpec:
        return self._controller.query

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        return self._controller.subscribe(listener)

    # -- lifecycle -----------------------------------------------------

    async def mount(self) -> ViewState:
        return await self._controller.mount()

    def unmount(self) -> None:
        self._controller.unmount()

    async def __aenter__(self) -> "CollectionView":
        await self.mount()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unmount()

    async def refresh(self) -> ViewState:
        return await self._controller.refresh()

    # -- query setters -------------------------------------------------

    def set_filter(self, name: str, value: Any) -> None:
        self._controller.set_filter(name, value)

    def reset_filters(self) -> None:
        query = self._controller.query
        defaults = FilterSpec(values=self._definition.schema.defaults())
        self._controller.set_query(
            dataclasses.replace(query, filters=defaults, page=PageSpec(1, query.page.per_page))
        )

    def set_search(self, text: str) -> None:
        self._controller.set_search(text)

    def set_sort(self, key: str, direction: SortDirection | str = SortDirection.ASC) -> None:
        self._controller.set_sort(SortSpec(key, SortDirection(direction)))

    def toggle_sort(self, key: str) -> None:
        """Column-header click: same key flips direction, a new key sorts ascending."""
        current = self._controller.query.sort
        if current is not None and current.key == key:
            self._controller.set_sort(SortSpec(key, current.direction.flipped()))
        else:
            self._controller.set_sort(SortSpec(key, SortDirection.ASC))

    def set_page(self, page: int) -> None:
        self._controller.set_page(page)

    def set_per_page(self, per_page: int) -> None:
        self._controller.set_per_page(per_page)

    # -- mutations -----------------------------------------------------

    async def create(self, payload: Mapping[str, Any]) -> Entity:
        created = await self._mutations.create(payload)
        self._remember(created)
        return created

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> Entity:
        self._forget(entity_id)
        updated = await self._mutations.update(entity_id, patch)
        self._remember(updated)
        return updated

    async def set_field(self, entity_id: str, field: str, value: Any) -> Entity:
        self._forget(entity_id)
        updated = await self._mutations.set_field(entity_id, field, value)
        self._remember(updated)
        return updated

    async def toggle_field(self, entity_id: str, field: str) -> Entity:
        self._forget(entity_id)
        updated = await self._mutations.toggle_field(entity_id, field)
        self._remember(updated)
        return updated

    async def reactivate(self, entity_id: str) -> Entity:
        self._forget(entity_id)
        restored = await self._mutations.reactivate(entity_id, self._definition.restore_patch)
        self._remember(restored)
        return restored

    async def remove(self, entity_id: str) -> None:
        self._forget(entity_id)
        await self._mutations.remove(entity_id)

    # -- details and stats ---------------------------------------------

    async def get(self, entity_id: str) -> Entity:
        """Detail lookup: cache first, then the gateway."""
        owner = require_user(self._session)
        if self._cache is not None:
            cached = self._cache.get(self._definition.name, CacheKey.for_owner(owner, entity_id))
            if cached is not None:
                return cached
        entity = await self._gateway.get_by_id(entity_id)
        self._remember(entity)
        return entity

    def stats(self, **predicates: Callable[[Entity], bool]) -> dict[str, int]:
        """Count loaded items per predicate; ``total`` is always included.

        Example: ``view.stats(favorites=lambda p: p.get("is_favorite"))``.
        """
        items = self._controller.collection.items
        counts = {"total": self._controller.state.total}
        for name, predicate in predicates.items():
            if name == "total":
                raise InvalidArgumentError("'total' is reserved in stats()")
            counts[name] = sum(1 for item in items if predicate(item))
        return counts

    def _remember(self, entity: Entity) -> None:
        owner = self._session.user_id
        if self._cache is None or owner is None:
            return
        self._cache.set(
            self._definition.name,
            CacheKey.for_owner(owner, entity.id),
            entity,
            ttl=self._settings.cache_ttl_seconds,
        )

    def _forget(self, entity_id: str) -> None:
        owner = self._session.user_id
        if self._cache is None or owner is None:
            return
        self._cache.invalidate(self._definition.name, CacheKey.for_owner(owner, entity_id))
