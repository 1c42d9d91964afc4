"""Application session – owner scope consumed by collection views."""
from clinic_collections.application.session.provider import (
    InMemorySessionProvider,
    SessionListener,
    SessionProvider,
    SessionSnapshot,
    require_user,
    snapshot,
)

__all__ = [
    "InMemorySessionProvider",
    "SessionListener",
    "SessionProvider",
    "SessionSnapshot",
    "require_user",
    "snapshot",
]
