"""Unit tests – structured logging helpers."""
from __future__ import annotations

import json
import logging

import pytest
import structlog

from clinic_collections.config.settings import CollectionSettings
from clinic_collections.observability.logging import (
    DEFAULT_SENSITIVE_FIELDS,
    JsonLoggerFactory,
    SensitiveFieldsFilter,
    get_logger,
)


class TestSensitiveFieldsFilter:
    def test_redacts_top_level(self) -> None:
        result = SensitiveFieldsFilter().redact({"cpf": "123", "name": "Ana"})
        assert result == {"cpf": "[REDACTED]", "name": "Ana"}

    def test_redacts_nested(self) -> None:
        result = SensitiveFieldsFilter().redact_deep({"patient": {"Email": "a@b", "id": "p1"}})
        assert result == {"patient": {"Email": "[REDACTED]", "id": "p1"}}

    def test_custom_fields(self) -> None:
        result = SensitiveFieldsFilter(frozenset({"crm"})).redact({"crm": "1", "cpf": "2"})
        assert result == {"crm": "[REDACTED]", "cpf": "2"}

    def test_processor_signature(self) -> None:
        event = SensitiveFieldsFilter()(None, "info", {"event": "x", "token": "abc"})
        assert event["token"] == "[REDACTED]"

    def test_defaults_cover_patient_identifiers(self) -> None:
        assert {"cpf", "email", "phone", "token"} <= DEFAULT_SENSITIVE_FIELDS


class TestJsonLoggerFactory:
    @pytest.fixture(autouse=True)
    def _restore(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        structlog.reset_defaults()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_output_is_redacted(self, capsys: pytest.CaptureFixture[str]) -> None:
        JsonLoggerFactory.configure("info")
        get_logger("clinic.test", collection="patients").info("fetch_succeeded", cpf="123", count=2)
        line = capsys.readouterr().err.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "fetch_succeeded"
        assert payload["collection"] == "patients"
        assert payload["cpf"] == "[REDACTED]"
        assert payload["count"] == 2
        assert payload["level"] == "info"

    def test_level_filtering(self, capsys: pytest.CaptureFixture[str]) -> None:
        JsonLoggerFactory.from_settings(CollectionSettings(log_level="warning"))
        get_logger("clinic.test").info("hidden")
        assert capsys.readouterr().err == ""
