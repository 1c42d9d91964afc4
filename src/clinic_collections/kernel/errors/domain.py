"""Domain errors – rejected data, vanished entities and concurrent edits."""

from __future__ import annotations

from typing import Any

from clinic_collections.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when the backend rejects an operation on business grounds."""

    default_code = "domain_error"


class ValidationError(DomainError):
    """Caller-supplied data was rejected; not retryable without correction.

    ``errors`` is a list of field-level failures, e.g.
    ``[{"field": "cpf", "message": "CPF inválido"}]``.
    """

    default_code = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.errors: list[dict[str, Any]] = errors or []

    @property
    def fields(self) -> list[str]:
        return [str(e["field"]) for e in self.errors if "field" in e]

    def to_dict(self) -> dict[str, Any]:
        base = super().to_dict()
        base["errors"] = self.errors
        return base


class NotFoundError(DomainError):
    """The requested entity does not exist (or was deleted concurrently)."""

    default_code = "not_found"

    def __init__(
        self,
        resource: str,
        identifier: Any = None,
        **kwargs: Any,
    ) -> None:
        msg = f"{resource} not found"
        if identifier is not None:
            msg = f"{resource} '{identifier}' not found"
        super().__init__(msg, **kwargs)
        self.resource = resource
        self.identifier = identifier


class ConflictError(DomainError):
    """Concurrent modification, or a second mutation on an entity still in flight.

    Retryable after a refetch.
    """

    default_code = "conflict"
    retryable = True


__all__ = [
    "ConflictError",
    "DomainError",
    "NotFoundError",
    "ValidationError",
]
