"""HTTP adapter – HttpxHttpClient."""
from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx

from clinic_collections.adapters.http.retry import TenacityRetryPolicy
from clinic_collections.config.settings import CollectionSettings
from clinic_collections.kernel.errors import (
    BaseError,
    ConflictError,
    ExternalServiceError,
    NetworkError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

TokenProvider = Callable[[], Awaitable[str | None]]

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def _body(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {"data": payload}


def _retry_after(response: httpx.Response) -> float | None:
    raw = response.headers.get("retry-after")
    try:
        return float(raw) if raw is not None else None
    except ValueError:
        return None


def error_for_response(method: str, url: str, response: httpx.Response) -> BaseError:
    """Map an unsuccessful response onto the error taxonomy."""
    status = response.status_code
    body = _body(response)
    message = str(body.get("message") or f"HTTP {status} from {method} {url}")
    if status in RETRYABLE_STATUS_CODES:
        return NetworkError(message, status_code=status, retry_after_seconds=_retry_after(response))
    if status == 404:
        return NotFoundError(url)
    if status == 409:
        return ConflictError(message, detail=body)
    if status in (400, 422):
        errors = body.get("errors")
        return ValidationError(message, errors=errors if isinstance(errors, list) else None, detail=body)
    if status in (401, 403):
        return UnauthorizedError(message, detail={"status": status})
    return ExternalServiceError(service=url, message=message, status_code=status)


class HttpxHttpClient:
    """Thin async httpx wrapper with structured error mapping and retry.

    ``token_provider`` returns the bearer token for each request (the
    authenticated backend session); ``retry`` re-issues requests that failed
    with :class:`NetworkError`.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        *,
        token_provider: TokenProvider | None = None,
        retry: TenacityRetryPolicy | None = None,
        **kwargs: Any,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, **kwargs)
        self._token_provider = token_provider
        self._retry = retry

    @classmethod
    def from_settings(
        cls, settings: CollectionSettings, *, token_provider: TokenProvider | None = None
    ) -> "HttpxHttpClient":
        """Client for ``settings.api_base_url`` with the configured timeout and retries."""
        retry = None
        if settings.max_retries > 0:
            retry = TenacityRetryPolicy(max_retries=settings.max_retries, base_delay=settings.retry_base_delay)
        return cls(
            settings.api_base_url,
            settings.request_timeout,
            token_provider=token_provider,
            retry=retry,
        )

    async def __aenter__(self) -> "HttpxHttpClient":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._client.__aexit__(*args)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)

    async def request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body (``None`` when empty)."""
        if self._retry is None:
            return await self._send(method, url, **kwargs)
        return await self._retry.execute_async(lambda: self._send(method, url, **kwargs))

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        if self._token_provider is not None:
            token = await self._token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"HTTP request timed out: {method} {url}", cause=exc) from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"HTTP transport failure: {method} {url}", cause=exc) from exc
        if response.is_error:
            raise error_for_response(method, url, response)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ExternalServiceError(
                service=url, message=f"Non-JSON response from {method} {url}", status_code=response.status_code
            ) from exc


HttpClient = HttpxHttpClient

__all__ = ["HttpClient", "HttpxHttpClient", "RETRYABLE_STATUS_CODES", "TokenProvider", "error_for_response"]
