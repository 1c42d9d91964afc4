"""Application mutations – optimistic changes with exact rollback."""
from clinic_collections.application.mutations.coordinator import (
    MutationKind,
    OptimisticMutationCoordinator,
    OptimisticPatch,
)

__all__ = ["MutationKind", "OptimisticMutationCoordinator", "OptimisticPatch"]
