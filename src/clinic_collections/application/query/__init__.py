"""Application query – filter/sort/page specs and the pure view engine."""
from clinic_collections.application.query.engine import (
    ViewSlice,
    apply_filters,
    collation_key,
    compute_view,
    matches_search,
    sort_items,
)
from clinic_collections.application.query.predicates import (
    field_contains,
    field_equals,
    field_in,
    field_truthy,
)
from clinic_collections.application.query.spec import (
    FilterDefinition,
    FilterSpec,
    PageSpec,
    PaginationMode,
    QuerySchema,
    QuerySpec,
    SortDirection,
    SortSpec,
)

__all__ = [
    "FilterDefinition",
    "FilterSpec",
    "PageSpec",
    "PaginationMode",
    "QuerySchema",
    "QuerySpec",
    "SortDirection",
    "SortSpec",
    "ViewSlice",
    "apply_filters",
    "collation_key",
    "compute_view",
    "field_contains",
    "field_equals",
    "field_in",
    "field_truthy",
    "matches_search",
    "sort_items",
]
