"""Config settings – CollectionSettings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from clinic_collections.config.settings.base import Settings
from clinic_collections.config.validation import InvalidSettingValueError

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclasses.dataclass
class CollectionSettings(Settings):
    """Runtime knobs for collection views, read from ``CLINIC_*`` variables."""

    _prefix: ClassVar[str] = "CLINIC"

    debounce_ms: int = 300
    default_per_page: int = 50
    refresh_interval_seconds: float = 0.0
    api_base_url: str = "http://localhost:8080/api/v1"
    request_timeout: float = 10.0
    max_retries: int = 3
    retry_base_delay: float = 1.0
    cache_ttl_seconds: int = 300
    cache_max_size: int = 1000
    log_level: str = "INFO"

    def _validate(self) -> None:
        if self.debounce_ms < 0:
            self._reject("debounce_ms", "must be >= 0")
        if self.default_per_page <= 0:
            self._reject("default_per_page", "must be > 0")
        if self.refresh_interval_seconds < 0:
            self._reject("refresh_interval_seconds", "must be >= 0")
        if self.request_timeout <= 0:
            self._reject("request_timeout", "must be > 0")
        if self.max_retries < 0:
            self._reject("max_retries", "must be >= 0")
        if self.cache_ttl_seconds <= 0:
            self._reject("cache_ttl_seconds", "must be > 0")
        if self.cache_max_size <= 0:
            self._reject("cache_max_size", "must be > 0")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            self._reject("log_level", f"is not one of {', '.join(sorted(_LOG_LEVELS))}")

    def _reject(self, field_name: str, reason: str) -> None:
        raise InvalidSettingValueError(
            self.env_key(field_name),
            getattr(self, field_name),
            reason,
            settings=type(self).__name__,
        )

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def refresh_interval(self) -> float | None:
        return self.refresh_interval_seconds or None


__all__ = ["CollectionSettings"]
