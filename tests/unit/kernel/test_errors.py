"""Unit tests for kernel error hierarchy."""

from __future__ import annotations

import json

import pytest

from clinic_collections.kernel.errors import (
    ApplicationError,
    BaseError,
    ConflictError,
    DomainError,
    ExternalServiceError,
    InfrastructureError,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


class TestBaseError:
    def test_message_is_stored(self) -> None:
        err = BaseError("something went wrong")
        assert err.message == "something went wrong"

    def test_default_code(self) -> None:
        assert BaseError("m").code == "base_error"

    def test_custom_code(self) -> None:
        assert BaseError("m", code="custom").code == "custom"

    def test_str_is_json(self) -> None:
        payload = json.loads(str(BaseError("boom", detail={"k": 1})))
        assert payload == {"code": "base_error", "message": "boom", "retryable": False, "detail": {"k": 1}}

    def test_retryable_in_payload(self) -> None:
        assert NetworkError("timeout").to_dict()["retryable"] is True
        assert NetworkError("bad gateway", retryable=False).to_dict()["retryable"] is False
        assert ExternalServiceError("patients", retryable=True).retryable is True
        assert BaseError.retryable is False

    def test_cause_is_chained(self) -> None:
        original = RuntimeError("low level")
        err = BaseError("wrapped", cause=original)
        assert err.__cause__ is original
        assert "RuntimeError" in err.to_dict()["cause"]


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls, parent",
        [
            (ValidationError, DomainError),
            (NotFoundError, DomainError),
            (ConflictError, DomainError),
            (InvalidArgumentError, ApplicationError),
            (UnauthorizedError, ApplicationError),
            (NetworkError, InfrastructureError),
            (ExternalServiceError, InfrastructureError),
        ],
    )
    def test_subclass(self, cls: type, parent: type) -> None:
        assert issubclass(cls, parent)
        assert issubclass(cls, BaseError)

    def test_invalid_argument_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            raise InvalidArgumentError("per_page must be > 0")

    def test_retryable_flags(self) -> None:
        assert NetworkError().retryable is True
        assert ConflictError("stale").retryable is True
        assert ValidationError("bad").retryable is False
        assert NotFoundError("patients", "p1").retryable is False


class TestValidationError:
    def test_fields(self) -> None:
        err = ValidationError(
            "Invalid patient",
            errors=[{"field": "cpf", "message": "CPF inválido"}, {"message": "general"}],
        )
        assert err.fields == ["cpf"]
        assert err.to_dict()["errors"][0]["field"] == "cpf"

    def test_errors_default_empty(self) -> None:
        assert ValidationError("x").errors == []


class TestNotFoundError:
    def test_message_with_identifier(self) -> None:
        err = NotFoundError("patients", "p-1")
        assert err.message == "patients 'p-1' not found"
        assert err.resource == "patients"
        assert err.identifier == "p-1"

    def test_message_without_identifier(self) -> None:
        assert NotFoundError("patients").message == "patients not found"


class TestNetworkError:
    def test_defaults(self) -> None:
        err = NetworkError()
        assert err.message == "Network request failed"
        assert err.status_code is None
        assert err.retry_after_seconds is None

    def test_status_and_retry_after(self) -> None:
        err = NetworkError("throttled", status_code=429, retry_after_seconds=2.0)
        assert err.status_code == 429
        assert err.retry_after_seconds == 2.0


class TestExternalServiceError:
    def test_default_message(self) -> None:
        err = ExternalServiceError("nfse", status_code=418)
        assert err.message == "External service 'nfse' error"
        assert err.status_code == 418
