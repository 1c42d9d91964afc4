"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError          (domain.py)
    │   ├── ValidationError
    │   ├── NotFoundError
    │   └── ConflictError
    ├── ApplicationError     (application.py)
    │   ├── InvalidArgumentError
    │   └── UnauthorizedError
    └── InfrastructureError  (infrastructure.py)
        ├── NetworkError
        └── ExternalServiceError
"""

from clinic_collections.kernel.errors.application import (
    ApplicationError,
    InvalidArgumentError,
    UnauthorizedError,
)
from clinic_collections.kernel.errors.base import BaseError
from clinic_collections.kernel.errors.domain import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from clinic_collections.kernel.errors.infrastructure import (
    ExternalServiceError,
    InfrastructureError,
    NetworkError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConflictError",
    "DomainError",
    "ExternalServiceError",
    "InfrastructureError",
    "InvalidArgumentError",
    "NetworkError",
    "NotFoundError",
    "UnauthorizedError",
    "ValidationError",
]
