"""Kernel time – Clock protocol + implementations."""
from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Port: monotonic clock in seconds, swappable for deterministic tests."""

    def monotonic(self) -> float: ...


class SystemClock:
    """Production clock backed by ``time.monotonic``."""

    def monotonic(self) -> float:
        return time.monotonic()


class FrozenClock:
    """Test clock pinned to a fixed instant until advanced."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def monotonic(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


__all__ = ["Clock", "FrozenClock", "SystemClock"]
