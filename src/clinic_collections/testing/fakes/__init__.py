"""Testing fakes – in-memory doubles for application ports."""
from clinic_collections.kernel.time import FrozenClock
from clinic_collections.testing.fakes.clock import FakeClock
from clinic_collections.testing.fakes.gateway import ScriptedCall, ScriptedGateway

__all__ = ["FakeClock", "FrozenClock", "ScriptedCall", "ScriptedGateway"]
