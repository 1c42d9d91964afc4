"""Infrastructure errors – transport failures and unexpected remote responses."""

from __future__ import annotations

from typing import Any

from clinic_collections.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class NetworkError(InfrastructureError):
    """Transport or connectivity failure (timeouts included). Retryable."""

    default_code = "network_error"
    retryable = True

    def __init__(
        self,
        message: str = "Network request failed",
        *,
        status_code: int | None = None,
        retry_after_seconds: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.retry_after_seconds = retry_after_seconds


class ExternalServiceError(InfrastructureError):
    """The remote backend returned a response outside the gateway contract."""

    default_code = "external_service_error"

    def __init__(
        self,
        service: str,
        message: str | None = None,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"External service '{service}' error", **kwargs)
        self.service = service
        self.status_code = status_code


__all__ = [
    "ExternalServiceError",
    "InfrastructureError",
    "NetworkError",
]
