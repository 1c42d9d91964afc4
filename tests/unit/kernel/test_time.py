"""Unit tests for the kernel clocks."""

from __future__ import annotations

from clinic_collections.kernel.time import FrozenClock, SystemClock
from clinic_collections.testing import FakeClock


class TestClocks:
    def test_frozen_clock_advances_only_on_demand(self) -> None:
        clock = FrozenClock(10.0)
        assert clock.monotonic() == 10.0
        clock.advance(2.5)
        assert clock.monotonic() == 12.5

    def test_system_clock_is_monotonic(self) -> None:
        clock = SystemClock()
        assert clock.monotonic() <= clock.monotonic()

    def test_fake_clock_factory(self) -> None:
        clock = FakeClock()
        assert isinstance(clock, FrozenClock)
        assert clock.monotonic() == 1_000.0
