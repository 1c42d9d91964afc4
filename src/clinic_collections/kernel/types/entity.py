"""Kernel types – Entity record and key-path helpers."""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from clinic_collections.kernel.errors import InvalidArgumentError

_MISSING = object()


def get_path(data: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted *path* (``"address.city"``) through nested mappings.

    Returns ``None`` when any segment is missing or traverses a non-mapping.
    """
    current: Any = data
    for segment in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(segment, _MISSING)
        if current is _MISSING:
            return None
    return current


def set_path(data: Mapping[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Return a copy of *data* with *path* set to *value*.

    Intermediate mappings are copied, never mutated in place.
    """
    head, _, rest = path.partition(".")
    if not head:
        raise InvalidArgumentError(f"Invalid key path: {path!r}")
    result = dict(data)
    if not rest:
        result[head] = value
        return result
    child = result.get(head)
    result[head] = set_path(child if isinstance(child, Mapping) else {}, rest, value)
    return result


@dataclasses.dataclass(frozen=True)
class Entity:
    """An opaque record managed by a collection view.

    ``id`` is unique and immutable within a view's lifetime.  ``token`` is the
    correlation token of an optimistically created entity and takes no part in
    equality.
    """

    id: str
    data: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    token: str | None = dataclasses.field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidArgumentError("Entity id must not be empty")

    def get(self, path: str, default: Any = None) -> Any:
        if path == "id":
            return self.id
        value = get_path(self.data, path)
        return default if value is None else value

    def __getitem__(self, path: str) -> Any:
        return self.get(path)

    def with_changes(self, patch: Mapping[str, Any]) -> "Entity":
        """Return a copy with *patch* merged over ``data`` (dotted keys allowed)."""
        data: Mapping[str, Any] = self.data
        for key, value in patch.items():
            data = set_path(data, key, value)
        return dataclasses.replace(self, data=data)

    def with_id(self, entity_id: str) -> "Entity":
        return dataclasses.replace(self, id=entity_id)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.data}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], *, id_field: str = "id") -> "Entity":
        """Split *raw* into ``id`` and payload."""
        if raw.get(id_field) in (None, ""):
            raise InvalidArgumentError(f"Record has no {id_field!r}: {dict(raw)!r}")
        data = {k: v for k, v in raw.items() if k != id_field}
        return cls(id=str(raw[id_field]), data=data)


__all__ = ["Entity", "get_path", "set_path"]
