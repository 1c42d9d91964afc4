"""Application session – SessionProvider port and in-memory implementation."""
from __future__ import annotations

import dataclasses
from typing import Callable, Protocol, runtime_checkable

from clinic_collections.kernel.errors import UnauthorizedError

SessionListener = Callable[["SessionSnapshot"], None]


@dataclasses.dataclass(frozen=True)
class SessionSnapshot:
    user_id: str | None
    is_loading: bool

    @property
    def is_ready(self) -> bool:
        return self.user_id is not None and not self.is_loading


@runtime_checkable
class SessionProvider(Protocol):
    """Port: the authenticated owner a collection view is scoped to."""

    @property
    def user_id(self) -> str | None: ...

    @property
    def is_loading(self) -> bool: ...

    def logout(self) -> None: ...

    def subscribe(self, listener: SessionListener) -> Callable[[], None]: ...


def snapshot(session: SessionProvider) -> SessionSnapshot:
    return SessionSnapshot(user_id=session.user_id, is_loading=session.is_loading)


def require_user(session: SessionProvider) -> str:
    """Return the current user id or raise ``UnauthorizedError``."""
    current = snapshot(session)
    if not current.is_ready:
        raise UnauthorizedError(
            "No authenticated user available",
            detail={"is_loading": current.is_loading},
        )
    return current.user_id  # type: ignore[return-value]


class InMemorySessionProvider:
    """Session holder driven explicitly by the host (or by tests)."""

    def __init__(self, user_id: str | None = None, *, is_loading: bool = False) -> None:
        self._user_id = user_id
        self._is_loading = is_loading
        self._listeners: list[SessionListener] = []

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def sign_in(self, user_id: str) -> None:
        self._user_id = user_id
        self._is_loading = False
        self._notify()

    def set_loading(self, is_loading: bool) -> None:
        self._is_loading = is_loading
        self._notify()

    def logout(self) -> None:
        self._user_id = None
        self._notify()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        current = snapshot(self)
        for listener in list(self._listeners):
            listener(current)


__all__ = [
    "InMemorySessionProvider",
    "SessionListener",
    "SessionProvider",
    "SessionSnapshot",
    "require_user",
    "snapshot",
]
