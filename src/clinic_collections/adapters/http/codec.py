"""HTTP adapter – EntityCodec port and the pass-through JsonEntityCodec."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from clinic_collections.kernel.errors import ExternalServiceError, InvalidArgumentError
from clinic_collections.kernel.types import Entity


@runtime_checkable
class EntityCodec(Protocol):
    """Translate between wire payloads and :class:`Entity` records."""

    def decode(self, raw: Mapping[str, Any]) -> Entity: ...

    def encode(self, payload: Mapping[str, Any]) -> dict[str, Any]: ...


class JsonEntityCodec:
    """Identity mapping: wire keys are the entity's data keys."""

    def __init__(self, id_field: str = "id") -> None:
        self._id_field = id_field

    def decode(self, raw: Mapping[str, Any]) -> Entity:
        if not isinstance(raw, Mapping):
            raise ExternalServiceError(service="codec", message=f"Expected an object, got {type(raw).__name__}")
        try:
            return Entity.from_dict(raw, id_field=self._id_field)
        except InvalidArgumentError as exc:
            raise ExternalServiceError(service="codec", message=exc.message) from exc

    def encode(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in payload.items() if k != self._id_field}


__all__ = ["EntityCodec", "JsonEntityCodec"]
