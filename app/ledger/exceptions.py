"""
Ledger-specific exceptions for money-movement operations.

This module provides a hierarchy of exceptions for ledger operations,
inheriting from the core exception classes so every error carries an
error code and the HTTP status the API answers with.

Exception Hierarchy:
    LedgerError (base)
    ├── InvalidAmount - Amount is not a positive (or non-zero) integer
    ├── InvalidTransfer - Transfer request is malformed (self-transfer)
    ├── AccountNotFound - Account lookup failures
    ├── CategoryNotFound - Transaction category lookup failures
    ├── InsufficientFunds - Debit exceeds the available balance
    ├── IdempotencyConflict - Idempotency key reused for another operation
    └── AccountInUse - Account still referenced by ledger rows

Storage failures are raised as core.exceptions.StorageError.

Usage:
    from ledger.exceptions import InsufficientFunds, AccountNotFound

    if account.balance < amount:
        raise InsufficientFunds(account.pk, required=amount, available=account.balance)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from typing import Any


class LedgerError(BaseApplicationError):
    """
    Base exception for all ledger operations.

    Example:
        try:
            LedgerService.topup(account_id, amount)
        except LedgerError as e:
            logger.warning(f"Top-up rejected: {e}")
            return Response(e.to_dict(), status=e.http_status)
    """

    default_error_code: str = "LEDGER_ERROR"


class InvalidAmount(LedgerError, ValidationError):
    """Raised when an amount is not an integer of the required sign."""

    default_error_code: str = "INVALID_AMOUNT"


class InvalidTransfer(LedgerError, ValidationError):
    """Raised for transfer requests that can never succeed, such as self-transfers."""

    default_error_code: str = "INVALID_TRANSFER"


class AccountNotFound(LedgerError, NotFoundError):
    """
    Raised when a ledger account cannot be found.

    Example:
        raise AccountNotFound(
            f"Account {account_id} not found",
            details={"account_id": account_id},
        )
    """

    default_error_code: str = "ACCOUNT_NOT_FOUND"


class CategoryNotFound(LedgerError, NotFoundError):
    """Raised when a referenced transaction category does not exist."""

    default_error_code: str = "CATEGORY_NOT_FOUND"


class InsufficientFunds(LedgerError):
    """
    Raised when an account's balance cannot cover a debit.

    Attributes:
        account_id: The account with insufficient funds
        required: The amount that was required
        available: The balance that was available under lock

    Example:
        if account.balance < amount:
            raise InsufficientFunds(
                account.account_id,
                required=amount,
                available=account.balance,
            )
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"

    def __init__(
        self,
        account_id: int,
        required: int,
        available: int,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize with account details and amounts.

        Args:
            account_id: Account with insufficient funds
            required: Amount required in minor units
            available: Balance available in minor units
            error_code: Optional custom error code
            details: Optional additional error context
        """
        self.account_id = account_id
        self.required = required
        self.available = available

        full_details = {
            "account_id": account_id,
            "required": required,
            "available": available,
        }
        if details:
            full_details.update(details)

        super().__init__(
            message=(
                f"Account {account_id} has insufficient balance: "
                f"required {required}, available {available}"
            ),
            error_code=error_code,
            details=full_details,
        )


class IdempotencyConflict(LedgerError, ConflictError):
    """
    Raised when an idempotency key is replayed with a different request.

    A retry must repeat the original operation exactly (same kind, amount
    and counterparty). Anything else is a client bug, not a retry.
    """

    default_error_code: str = "IDEMPOTENCY_CONFLICT"


class AccountInUse(LedgerError, ConflictError):
    """Raised when deleting an account that still has ledger rows or a user."""

    default_error_code: str = "ACCOUNT_IN_USE"
