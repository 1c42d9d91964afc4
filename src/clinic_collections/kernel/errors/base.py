"""BaseError – root of the taxonomy every gateway, controller and mutation raises."""

from __future__ import annotations

import json
from typing import Any


class BaseError(Exception):
    """Anything a list screen may need to show or log.

    ``code`` is what the UI switches on (``mutation_in_flight``,
    ``not_found``...), ``detail`` carries the context of the failed call
    (entity id, fields, status code) and ``retryable`` tells whether the
    same call may succeed later without any change from the user.

    Args:
        message: Human-readable description.
        code: Machine-readable slug (defaults to ``default_code``).
        detail: Extra context, must be JSON serialisable.
        cause: Lower-level exception this error wraps.
        retryable: Overrides the class default for this instance.
    """

    default_code: str = "base_error"
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
        retryable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if retryable is not None:
            self.retryable = retryable
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, retryable={self.retryable})"

    def to_dict(self) -> dict[str, Any]:
        """Payload for structured logs and error banners."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "detail": self.detail,
        }
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload


__all__ = ["BaseError"]
