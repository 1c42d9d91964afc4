"""Application controller – debounced query state machine."""
from clinic_collections.application.controller.query_controller import (
    DebouncedQueryController,
    ViewListener,
)
from clinic_collections.application.controller.state import (
    ControllerStatus,
    LocalCollection,
    ViewState,
)

__all__ = [
    "ControllerStatus",
    "DebouncedQueryController",
    "LocalCollection",
    "ViewListener",
    "ViewState",
]
