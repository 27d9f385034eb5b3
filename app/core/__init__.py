"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks with no ledger-specific logic.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer (logger + atomic helper)

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes and HTTP status
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - ConflictError: State conflicts (duplicates, in-use records)
    - StorageError: Database failures surfaced to callers

Decorators (import from core.decorators):
    - retry_on_contention: Bounded retry of lock-contended database work
    - log_request: Request/response logging decorator

Note:
    Models are NOT imported here to avoid AppRegistryNotReady errors.
    Import them directly from core.models.
"""

from .exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .services import BaseService

__all__ = [
    # Services
    "BaseService",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
]
