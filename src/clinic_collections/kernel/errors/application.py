"""Application-layer errors – caller mistakes and missing sessions."""

from __future__ import annotations

from clinic_collections.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class InvalidArgumentError(ApplicationError, ValueError):
    """Programmer error in query construction, e.g. a non-positive ``per_page``."""

    default_code = "invalid_argument"


class UnauthorizedError(ApplicationError):
    """No authenticated user is available for the requested operation."""

    default_code = "unauthorized"


__all__ = [
    "ApplicationError",
    "InvalidArgumentError",
    "UnauthorizedError",
]
