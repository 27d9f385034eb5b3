"""
Ledger models for account balances and their transaction history.

This module defines the models of the ledger store:
- Account: Holds a balance in minor currency units
- TransactionCategory: Optional classification for transactions
- Transaction: One signed line on one account's ledger

An account's stored balance is a denormalized copy of the sum of its
transaction amounts. Only LedgerService writes either side, and it always
writes both in the same database transaction.

A transfer is two Transaction rows (a debit on the source, a credit on the
target) that share from_account/to_account; there is no transfer entity.

Usage:
    from ledger.models import Account, Transaction

    account = Account.objects.create(name="Savings")
    account.get_ledger_balance()  # 0, computed from transaction rows
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.models import BaseModel

# Largest value a BigIntegerField balance or amount can hold
MAX_AMOUNT = 2**63 - 1


class Account(BaseModel):
    """
    A ledger account holding a balance in minor currency units.

    Fields:
        account_id: Auto-increment primary key
        name: Display label
        balance: Current balance (never written outside LedgerService)
        created_at / updated_at: From BaseModel

    Constraints:
        - balance >= 0 (backstop for the funds check in LedgerService)
    """

    account_id = models.BigAutoField(primary_key=True)
    name = models.CharField(
        max_length=255,
        help_text="Display label for this account",
    )
    balance = models.BigIntegerField(
        default=0,
        help_text="Balance in minor currency units, derived from transactions",
    )

    class Meta:
        ordering = ["account_id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(balance__gte=0),
                name="ledger_account_balance_non_negative",
            )
        ]

    def __str__(self) -> str:
        return f"{self.name} (#{self.account_id})"

    def get_ledger_balance(self) -> int:
        """
        Compute the balance from transaction rows.

        This is the audit value the stored balance must always equal.

        Returns:
            Sum of all transaction amounts for this account
        """
        result = Transaction.objects.filter(account=self).aggregate(
            total=Coalesce(
                Sum("amount"),
                Value(0),
                output_field=models.BigIntegerField(),
            )
        )
        return result["total"]


class TransactionCategory(BaseModel):
    """Classification label that transactions may reference."""

    transaction_category_id = models.BigAutoField(primary_key=True)
    name = models.CharField(max_length=100)

    class Meta:
        ordering = ["transaction_category_id"]
        verbose_name_plural = "transaction categories"

    def __str__(self) -> str:
        return self.name


class Transaction(models.Model):
    """
    A single signed ledger line on one account.

    Positive amounts credit the account, negative amounts debit it.
    Rows are append-only: created by LedgerService, never updated or deleted.

    Fields:
        transaction_id: Auto-increment primary key, secondary recency key
        account: Account this line affects
        transaction_category: Optional classification
        from_account / to_account: Both sides of a transfer (null otherwise)
        amount: Signed amount in minor currency units (never zero)
        transaction_date: When the movement happened (defaults to now)
        idempotency_key: Optional client key, unique per account

    Constraints:
        - amount != 0
        - (account, idempotency_key) unique
    """

    transaction_id = models.BigAutoField(primary_key=True)
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="transactions",
        help_text="Account this line affects",
    )
    transaction_category = models.ForeignKey(
        TransactionCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )
    from_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
        help_text="Source account when this line is part of a transfer",
    )
    to_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
        help_text="Target account when this line is part of a transfer",
    )
    amount = models.BigIntegerField(
        help_text="Signed amount: positive credits, negative debits",
    )
    transaction_date = models.DateTimeField(
        default=timezone.now,
        db_index=True,
    )
    idempotency_key = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Client-supplied key that makes retries safe",
    )

    class Meta:
        ordering = ["-transaction_date", "-transaction_id"]
        indexes = [
            models.Index(
                fields=["account", "-transaction_date", "-transaction_id"],
                name="ledger_txn_account_recent_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(amount=0),
                name="ledger_transaction_amount_non_zero",
            ),
            models.UniqueConstraint(
                fields=["account", "idempotency_key"],
                name="ledger_transaction_unique_idempotency_key",
            ),
        ]

    def __str__(self) -> str:
        return f"Transaction #{self.transaction_id}: {self.amount:+d} on account {self.account_id}"

    @property
    def is_transfer(self) -> bool:
        """True when this line is one side of a transfer."""
        return self.from_account_id is not None and self.to_account_id is not None
