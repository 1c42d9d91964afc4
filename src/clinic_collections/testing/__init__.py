"""Testing support – scripted gateway and deterministic clock."""

from clinic_collections.testing.fakes import FakeClock, ScriptedCall, ScriptedGateway

__all__ = ["FakeClock", "ScriptedCall", "ScriptedGateway"]
