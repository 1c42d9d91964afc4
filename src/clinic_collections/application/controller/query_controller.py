"""Application controller – DebouncedQueryController.

Holds the query the UI controls, schedules ``gateway.list`` after a debounce
window and applies only the response of the most recently issued request.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable

from clinic_collections.application.controller.state import (
    ControllerStatus,
    LocalCollection,
    ViewState,
)
from clinic_collections.application.gateway import CollectionGateway, ListResult
from clinic_collections.application.query import (
    PaginationMode,
    QuerySchema,
    QuerySpec,
    SortSpec,
    compute_view,
)
from clinic_collections.application.session import SessionProvider, SessionSnapshot, snapshot
from clinic_collections.kernel.errors import BaseError, ExternalServiceError, InvalidArgumentError
from clinic_collections.observability.logging import get_logger

ViewListener = Callable[[ViewState], None]

__all__ = ["DebouncedQueryController", "ViewListener"]


class DebouncedQueryController:
    """State machine ``IDLE -> FETCHING -> LOADED | ERRORED`` for one view.

    Parameters
    ----------
    gateway:
        Remote store for the entity type.
    session:
        Owner scope; nothing is fetched while it has no user or is loading.
    schema:
        Filters and searchable fields of the collection.
    pagination:
        ``SERVER`` fetches one page at a time; ``CLIENT`` fetches every match
        and slices locally, so page changes never hit the gateway.
    debounce:
        Seconds between the last query change and the fetch.
    min_search_length:
        Non-empty search terms shorter than this are held without fetching.
    refresh_interval:
        When set, refetch every *refresh_interval* seconds while mounted.
    """

    def __init__(
        self,
        gateway: CollectionGateway,
        session: SessionProvider,
        *,
        schema: QuerySchema,
        pagination: PaginationMode = PaginationMode.SERVER,
        initial_query: QuerySpec | None = None,
        debounce: float = 0.3,
        min_search_length: int = 0,
        refresh_interval: float | None = None,
        name: str = "collection",
    ) -> None:
        if debounce < 0:
            raise InvalidArgumentError("debounce must be >= 0", detail={"debounce": debounce})
        if refresh_interval is not None and refresh_interval <= 0:
            raise InvalidArgumentError(
                "refresh_interval must be > 0", detail={"refresh_interval": refresh_interval}
            )
        self._gateway = gateway
        self._session = session
        self._schema = schema
        self._pagination = PaginationMode(pagination)
        self._query = initial_query or QuerySpec()
        self._debounce = debounce
        self._min_search_length = min_search_length
        self._refresh_interval = refresh_interval
        self._name = name

        self._collection = LocalCollection()
        self._status = ControllerStatus.IDLE
        self._loading = False
        self._error: BaseError | None = None
        self._seq = 0
        self._owner: str | None = None
        self._mounted = False

        self._debounce_task: asyncio.Task[None] | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._fetch_tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[ViewListener] = []
        self._unsubscribe_session: Callable[[], None] | None = None
        self._log = get_logger(__name__, collection=name)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def schema(self) -> QuerySchema:
        return self._schema

    @property
    def pagination(self) -> PaginationMode:
        return self._pagination

    @property
    def session(self) -> SessionProvider:
        return self._session

    @property
    def query(self) -> QuerySpec:
        return self._query

    @property
    def status(self) -> ControllerStatus:
        return self._status

    @property
    def collection(self) -> LocalCollection:
        return self._collection

    @property
    def request_seq(self) -> int:
        """Sequence number of the most recently issued request."""
        return self._seq

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def has_pending_debounce(self) -> bool:
        return self._debounce_task is not None and not self._debounce_task.done()

    @property
    def state(self) -> ViewState:
        view = compute_view(
            self._collection.items,
            self._query.filters,
            self._query.sort,
            self._query.page,
            schema=self._schema,
            mode=self._pagination,
            server_total=self._collection.total,
        )
        return ViewState(
            items=view.items,
            total=view.total,
            loading=self._loading,
            error=self._error,
            status=self._status,
            page=view.page,
            per_page=view.per_page,
        )

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        """Register *listener* for every new state; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self) -> None:
        if not self._listeners:
            return
        current = self.state
        for listener in list(self._listeners):
            listener(current)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def mount(self) -> ViewState:
        """Start observing the session and fetch as soon as it is ready."""
        if self._mounted:
            return self.state
        self._mounted = True
        self._unsubscribe_session = self._session.subscribe(self._on_session_change)
        if self._refresh_interval is not None:
            self._refresh_task = asyncio.get_running_loop().create_task(
                self._auto_refresh(self._refresh_interval)
            )
        self._log.debug("collection_mounted")
        if snapshot(self._session).is_ready:
            return await self.refresh()
        return self.state

    def unmount(self) -> None:
        """Cancel timers; responses still in flight are ignored when they land."""
        if not self._mounted:
            return
        self._mounted = False
        self._cancel_debounce()
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
        if self._unsubscribe_session is not None:
            self._unsubscribe_session()
            self._unsubscribe_session = None
        # Anything still in flight belongs to the previous mount.
        self._seq += 1
        if self._status is ControllerStatus.FETCHING:
            self._status = ControllerStatus.LOADED if self._collection.items else ControllerStatus.IDLE
        self._loading = False
        self._log.debug("collection_unmounted", in_flight=len(self._fetch_tasks))

    async def refresh(self) -> ViewState:
        """Fetch now with the held query, dropping any pending debounce."""
        self._cancel_debounce()
        task = self._spawn_fetch()
        if task is not None:
            await task
        return self.state

    async def settle(self) -> None:
        """Wait until no debounce timer or fetch is outstanding."""
        while True:
            pending = [t for t in (self._debounce_task, *self._fetch_tasks) if t is not None and not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Query setters (bound to UI controls)
    # ------------------------------------------------------------------

    def set_filter(self, name: str, value: Any) -> None:
        self._schema.filter(name)
        self._change(self._query.with_filter(name, value))

    def set_filters(self, **values: Any) -> None:
        query = self._query
        for name, value in values.items():
            self._schema.filter(name)
            query = query.with_filter(name, value)
        self._change(query)

    def set_search(self, text: str) -> None:
        query = self._query.with_search(text)
        term = query.filters.search_term
        held = bool(term) and len(term) < self._min_search_length
        if held:
            # A pending timer would read the held term when it fires.
            self._cancel_debounce()
        self._change(query, fetch=not held)

    def set_sort(self, sort: SortSpec | None) -> None:
        self._change(self._query.with_sort(sort))

    def set_page(self, page: int) -> None:
        self._change(self._query.with_page(page), fetch=self._pagination is PaginationMode.SERVER)

    def set_per_page(self, per_page: int) -> None:
        self._change(
            self._query.with_per_page(per_page), fetch=self._pagination is PaginationMode.SERVER
        )

    def set_query(self, query: QuerySpec) -> None:
        for name in query.filters.values:
            self._schema.filter(name)
        self._change(query)

    def _change(self, query: QuerySpec, *, fetch: bool = True) -> None:
        self._query = query
        self.notify()
        if fetch and self._mounted:
            self._schedule_fetch()

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _schedule_fetch(self) -> None:
        self._cancel_debounce()
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounced_fetch())

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None

    async def _debounced_fetch(self) -> None:
        await asyncio.sleep(self._debounce)
        if self._debounce_task is asyncio.current_task():
            self._debounce_task = None
        self._spawn_fetch()

    def _spawn_fetch(self) -> asyncio.Task[None] | None:
        if not self._mounted:
            return None
        current = snapshot(self._session)
        if not current.is_ready:
            self._log.debug("fetch_skipped_no_session", is_loading=current.is_loading)
            return None
        self._seq += 1
        seq = self._seq
        query = self._query
        self._owner = current.user_id
        self._status = ControllerStatus.FETCHING
        self._loading = True
        self._error = None
        self.notify()
        task = asyncio.get_running_loop().create_task(self._run_fetch(seq, query))
        self._fetch_tasks.add(task)
        task.add_done_callback(self._on_fetch_done)
        return task

    async def _run_fetch(self, seq: int, query: QuerySpec) -> None:
        try:
            result = await self._list(seq, query)
        except BaseError as exc:
            if not self._is_current(seq):
                self._log.debug("stale_response_discarded", seq=seq, latest=self._seq, failed=True)
                return
            self._error = exc
            self._status = ControllerStatus.ERRORED
            self._loading = False
            self._log.warning("fetch_failed", seq=seq, error_code=exc.code, retryable=exc.retryable)
            self.notify()
            return
        if not self._is_current(seq):
            self._log.debug("stale_response_discarded", seq=seq, latest=self._seq)
            return
        self._collection.replace_all(result.items, result.total)
        self._error = None
        self._status = ControllerStatus.LOADED
        self._loading = False
        self._log.debug("fetch_succeeded", seq=seq, count=len(result.items), total=result.total)
        self.notify()

    async def _list(self, seq: int, query: QuerySpec) -> ListResult:
        page = query.page if self._pagination is PaginationMode.SERVER else None
        filters = query.filters.active(self._schema)
        self._log.debug("fetch_started", seq=seq, filters=dict(filters.values), search=filters.search_term)
        try:
            return await self._gateway.list(filters, query.sort, page)
        except BaseError:
            raise
        except Exception as exc:
            # Codec bugs and the like are reported as a failed listing.
            raise ExternalServiceError(
                self._name, f"Listing {self._name} failed: {exc!r}", cause=exc
            ) from exc

    def _is_current(self, seq: int) -> bool:
        return self._mounted and seq == self._seq

    def _on_fetch_done(self, task: asyncio.Task[None]) -> None:
        self._fetch_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._log.error("fetch_crashed", error=repr(exc))

    async def _auto_refresh(self, interval: float) -> None:
        while self._mounted:
            await asyncio.sleep(interval)
            if self.has_pending_debounce or self._fetch_tasks:
                continue
            self._spawn_fetch()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def _on_session_change(self, current: SessionSnapshot) -> None:
        if not self._mounted:
            return
        if current.user_id != self._owner and self._owner is not None:
            # Data of a previous owner must not leak into the new scope.
            self._seq += 1
            self._owner = None
            self._collection.clear()
            self._status = ControllerStatus.IDLE
            self._loading = False
            self._error = None
            self.notify()
        if current.is_ready and self._owner is None:
            self._cancel_debounce()
            self._spawn_fetch()
