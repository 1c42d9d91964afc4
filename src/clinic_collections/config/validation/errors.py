"""Errors raised while loading and validating ``CLINIC_*`` settings."""
from __future__ import annotations

from typing import Any

from clinic_collections.kernel.errors import ApplicationError

# Values of settings whose name contains one of these are never echoed.
_SECRET_MARKERS = ("token", "secret", "password", "key")


def _shown(setting_name: str, value: object) -> object:
    lowered = setting_name.lower()
    if any(marker in lowered for marker in _SECRET_MARKERS):
        return "***"
    return value


class ConfigError(ApplicationError):
    """Settings for a collection view could not be loaded."""

    default_code = "config_error"

    def __init__(
        self,
        message: str,
        *,
        settings: str | None = None,
        detail: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        detail = dict(detail or {})
        if settings is not None:
            detail["settings"] = settings
        super().__init__(message, detail=detail, **kwargs)
        self.settings = settings


class MissingRequiredSettingError(ConfigError):
    """A setting without a default was found in no loader."""

    default_code = "missing_required_setting"

    def __init__(self, setting_name: str, *, settings: str | None = None) -> None:
        where = f" by {settings}" if settings else ""
        super().__init__(
            f"{setting_name} is required{where}",
            settings=settings,
            detail={"setting": setting_name},
        )
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting is present but cannot drive a collection view, e.g. ``per_page=0``."""

    default_code = "invalid_setting_value"

    def __init__(
        self,
        setting_name: str,
        value: object,
        reason: str,
        *,
        settings: str | None = None,
    ) -> None:
        shown = _shown(setting_name, value)
        super().__init__(
            f"{setting_name}={shown!r} {reason}",
            settings=settings,
            detail={"setting": setting_name, "value": shown, "reason": reason},
        )
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
