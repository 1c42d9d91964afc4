"""Admin users list."""
from __future__ import annotations

from clinic_collections.adapters.http import HttpCollectionGateway, HttpxHttpClient, param
from clinic_collections.application.query import (
    FilterDefinition,
    PaginationMode,
    QuerySchema,
    SortDirection,
    SortSpec,
    field_equals,
)
from clinic_collections.application.view import CollectionDefinition

USER_SCHEMA = QuerySchema(
    filters=(
        FilterDefinition("plan", field_equals("plan"), default="all"),
        FilterDefinition("status", field_equals("status"), default="all"),
    ),
    searchable_fields=("name", "email"),
)

USERS = CollectionDefinition(
    name="users",
    schema=USER_SCHEMA,
    pagination=PaginationMode.SERVER,
    default_sort=SortSpec("last_login", SortDirection.DESC),
    per_page=25,
    min_search_length=3,
    refresh_interval=60.0,
)


def users_gateway(client: HttpxHttpClient) -> HttpCollectionGateway:
    return HttpCollectionGateway(
        client,
        "admin/users",
        filter_params={"plan": param("plan"), "status": param("status")},
        sort_fields={"last_login": "lastLogin"},
    )


__all__ = ["USERS", "USER_SCHEMA", "users_gateway"]
