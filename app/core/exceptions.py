"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the API
- Machine-readable error codes for client handling
- An HTTP status per error kind, so views never guess

Exception Hierarchy:
    BaseApplicationError (base, 400)
    ├── ValidationError - Malformed or semantically invalid input (400)
    ├── NotFoundError - Referenced resource does not exist (404)
    ├── ConflictError - State conflicts (duplicates, in-use records) (409)
    └── StorageError - Store unavailable, commit failure, lock timeout (500)

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("Amount must be positive")

    # Raise with error code and details
    raise NotFoundError(
        f"Account {account_id} not found",
        error_code="ACCOUNT_NOT_FOUND",
        details={"account_id": account_id},
    )

    # Convert to an API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.http_status)

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (ids, amounts, etc.)
        http_status: Status code the transport layer should answer with

    Example:
        try:
            LedgerService.transfer(source_id, target_id, 500)
        except BaseApplicationError as e:
            logger.warning(f"Transfer rejected: {e.error_code}")
            return Response(e.to_dict(), status=e.http_status)
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and (when present) details keys

        Example:
            {
                "error": "Account 7 not found",
                "error_code": "ACCOUNT_NOT_FOUND",
                "details": {"account_id": 7}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Non-positive or non-integer amounts
    - Business rule violations (self-transfer, out-of-range limits)

    Note:
        For DRF serializer validation, use DRF's built-in validation.
        Use this for service-layer validation logic.
    """

    default_error_code: str = "VALIDATION_ERROR"
    http_status: int = 400


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Note:
        Return empty results for list queries.
        Use NotFoundError for single-resource lookups where existence is expected.
    """

    default_error_code: str = "NOT_FOUND"
    http_status: int = 404


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Reused idempotency keys carrying a different request
    - Deleting records that are still referenced
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409


class StorageError(BaseApplicationError):
    """
    Raised when the relational store fails underneath an operation.

    Use for:
    - Database unavailable or connection dropped
    - Commit failures and constraint violations that slipped validation
    - Lock waits that exceeded the lock timeout, deadlocks that outlived retries

    The enclosing atomic block has always been rolled back by the time
    this reaches a caller.

    Example:
        try:
            ...
        except DatabaseError as exc:
            raise StorageError(
                "Ledger store rejected the operation",
                details={"reason": exc.__class__.__name__},
            ) from exc
    """

    default_error_code: str = "STORAGE_ERROR"
    http_status: int = 500
