"""Observability – structured logging helpers."""
from clinic_collections.observability.logging.factory import JsonLoggerFactory
from clinic_collections.observability.logging.filters import (
    DEFAULT_SENSITIVE_FIELDS,
    SensitiveFieldsFilter,
)
from clinic_collections.observability.logging.processors import get_logger

__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "JsonLoggerFactory",
    "SensitiveFieldsFilter",
    "get_logger",
]
