"""HTTP adapters – httpx client, tenacity retry and the REST collection gateway."""

from clinic_collections.adapters.http.client import (
    HttpClient,
    HttpxHttpClient,
    RETRYABLE_STATUS_CODES,
    TokenProvider,
    error_for_response,
)
from clinic_collections.adapters.http.codec import EntityCodec, JsonEntityCodec
from clinic_collections.adapters.http.gateway import (
    FieldRoute,
    FilterEncoder,
    HttpCollectionGateway,
    choice,
    param,
)
from clinic_collections.adapters.http.retry import TenacityRetryPolicy

__all__ = [
    "EntityCodec",
    "FieldRoute",
    "FilterEncoder",
    "HttpClient",
    "HttpCollectionGateway",
    "HttpxHttpClient",
    "JsonEntityCodec",
    "RETRYABLE_STATUS_CODES",
    "TenacityRetryPolicy",
    "TokenProvider",
    "choice",
    "param",
    "error_for_response",
]
