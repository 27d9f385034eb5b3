"""
Data types returned by ledger operations.

Types:
    TransferResult: Both rows written by a transfer
    AccountAudit: Stored balance compared with the ledger sum

Usage:
    from ledger.types import TransferResult

    result = LedgerService.transfer(source_id, target_id, 500)
    result.debit.amount   # -500
    result.credit.amount  # 500
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Transaction


@dataclass(frozen=True)
class TransferResult:
    """
    The two ledger rows of one transfer.

    Attributes:
        debit: Row on the source account (negative amount)
        credit: Row on the target account (positive amount)
        replayed: True when an idempotent retry returned existing rows
    """

    debit: Transaction
    credit: Transaction
    replayed: bool = False

    @property
    def amount(self) -> int:
        """Amount moved, in minor units."""
        return self.credit.amount


@dataclass(frozen=True)
class AccountAudit:
    """
    Result of reconciling an account's stored balance with its rows.

    Attributes:
        account_id: Audited account
        stored_balance: Value of Account.balance
        ledger_balance: Sum of the account's transaction amounts
    """

    account_id: int
    stored_balance: int
    ledger_balance: int

    @property
    def is_consistent(self) -> bool:
        """True when the denormalized balance matches the ledger."""
        return self.stored_balance == self.ledger_balance
