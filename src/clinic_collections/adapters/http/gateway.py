"""HTTP adapter – HttpCollectionGateway over a REST resource.

Wire contract::

    GET    /{resource}?page=&per_page=&search=&sort_by=&sort_order=&<filters>
           -> {"items": [...], "total": n}
    GET    /{resource}/{id}            -> entity
    POST   /{resource}                 -> entity
    PUT    /{resource}/{id}            -> entity
    DELETE /{resource}/{id}            -> empty (404 counts as removed)
    PATCH  /{resource}/{id}            -> entity   (set_field default)
    PUT    /{resource}/{id}/{route}    -> entity or ack   (set_field with a FieldRoute)
    PUT    /{resource}/{id}/{restore_path}  -> entity or ack   (restore)
"""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Callable

from clinic_collections.adapters.http.client import HttpxHttpClient
from clinic_collections.adapters.http.codec import EntityCodec, JsonEntityCodec
from clinic_collections.application.gateway import ListResult
from clinic_collections.application.query import FilterSpec, PageSpec, SortSpec
from clinic_collections.kernel.errors import ExternalServiceError, NotFoundError, ValidationError
from clinic_collections.kernel.types import Entity
from clinic_collections.observability.logging import get_logger

FilterEncoder = Callable[[Any], Mapping[str, Any]]


def param(name: str) -> FilterEncoder:
    """Send the filter value unchanged under the query parameter *name*."""
    return lambda value: {name: value}


def choice(name: str, mapping: Mapping[Any, Any]) -> FilterEncoder:
    """Translate the filter value through *mapping*; unmapped values send nothing."""
    return lambda value: {name: mapping[value]} if value in mapping else {}


@dataclasses.dataclass(frozen=True)
class FieldRoute:
    """Dedicated endpoint for one field, e.g. ``PUT /patients/{id}/favorite``."""

    path: str
    body_key: str


class HttpCollectionGateway:
    """:class:`~clinic_collections.application.gateway.CollectionGateway` over HTTP.

    ``filter_params`` maps each supported filter name to an encoder producing
    query parameters; any other filter name is rejected with
    :class:`ValidationError` before a request is sent.
    """

    def __init__(
        self,
        client: HttpxHttpClient,
        resource: str,
        *,
        codec: EntityCodec | None = None,
        filter_params: Mapping[str, FilterEncoder] | None = None,
        sort_fields: Mapping[str, str] | None = None,
        field_routes: Mapping[str, FieldRoute] | None = None,
        restore_path: str = "restore",
    ) -> None:
        self._client = client
        self._resource = resource.strip("/")
        self._codec = codec or JsonEntityCodec()
        self._filter_params = dict(filter_params or {})
        self._sort_fields = dict(sort_fields or {})
        self._field_routes = dict(field_routes or {})
        self._restore_path = restore_path.strip("/")
        self._log = get_logger(__name__, resource=self._resource)

    @property
    def resource(self) -> str:
        return self._resource

    def _url(self, *parts: str) -> str:
        return "/".join(("", self._resource, *parts))

    def build_params(
        self, filters: FilterSpec, sort: SortSpec | None, page: PageSpec | None
    ) -> dict[str, Any]:
        unknown = sorted(set(filters.values) - set(self._filter_params))
        if unknown:
            raise ValidationError(
                f"Unsupported filters for {self._resource}: {', '.join(unknown)}",
                errors=[{"field": name, "message": "unsupported filter"} for name in unknown],
            )
        params: dict[str, Any] = {}
        if page is not None:
            params["page"] = page.page
            params["per_page"] = page.per_page
        if filters.search_term:
            params["search"] = filters.search_term
        if sort is not None:
            params["sort_by"] = self._sort_fields.get(sort.key, sort.key)
            params["sort_order"] = sort.direction.value
        for name, value in filters.values.items():
            if value is None:
                continue
            params.update(self._filter_params[name](value))
        return {k: _wire_value(v) for k, v in params.items()}

    async def list(
        self, filters: FilterSpec, sort: SortSpec | None, page: PageSpec | None
    ) -> ListResult:
        params = self.build_params(filters, sort, page)
        body = await self._client.get(self._url(), params=params)
        if body is None:
            return ListResult.empty()
        if isinstance(body, list):
            items = tuple(self._codec.decode(raw) for raw in body)
            return ListResult(items=items, total=len(items))
        if not isinstance(body, Mapping) or not isinstance(body.get("items"), list):
            raise ExternalServiceError(
                service=self._resource, message="List response has no 'items' array"
            )
        items = tuple(self._codec.decode(raw) for raw in body["items"])
        total = body.get("total")
        return ListResult(items=items, total=int(total) if total is not None else len(items))

    async def get_by_id(self, entity_id: str) -> Entity:
        return self._entity(await self._client.get(self._url(entity_id)), entity_id)

    async def create(self, payload: Mapping[str, Any]) -> Entity:
        body = await self._client.post(self._url(), json=self._codec.encode(payload))
        if body is None:
            raise ExternalServiceError(service=self._resource, message="Create returned no entity")
        return self._codec.decode(body)

    async def update(self, entity_id: str, patch: Mapping[str, Any]) -> Entity:
        body = await self._client.put(self._url(entity_id), json=self._codec.encode(patch))
        return self._entity(body, entity_id)

    async def remove(self, entity_id: str) -> None:
        try:
            await self._client.delete(self._url(entity_id))
        except NotFoundError:
            self._log.debug("remove_already_gone", entity_id=entity_id)

    async def set_field(self, entity_id: str, field: str, value: Any) -> Entity:
        route = self._field_routes.get(field)
        if route is None:
            body = await self._client.patch(
                self._url(entity_id), json=self._codec.encode({field: value})
            )
        else:
            body = await self._client.put(
                self._url(entity_id, route.path), json={route.body_key: value}
            )
        return await self._canonical(body, entity_id)

    async def restore(self, entity_id: str) -> Entity:
        body = await self._client.put(self._url(entity_id, self._restore_path))
        self._log.debug("entity_restored", entity_id=entity_id)
        return await self._canonical(body, entity_id)

    async def _canonical(self, body: Any, entity_id: str) -> Entity:
        if isinstance(body, Mapping) and body.get("id") is not None:
            return self._codec.decode(body)
        # Acknowledgement-only endpoint; read back the canonical entity.
        return await self.get_by_id(entity_id)

    def _entity(self, body: Any, entity_id: str) -> Entity:
        if body is None:
            raise NotFoundError(self._resource, entity_id)
        return self._codec.decode(body)


def _wire_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


__all__ = ["FieldRoute", "FilterEncoder", "HttpCollectionGateway", "choice", "param"]
