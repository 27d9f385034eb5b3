"""
Ledger service layer for balance mutations and ledger queries.

This module provides the LedgerService class which encapsulates all
business logic that touches account balances. All balance writes must go
through this service: it is the only code that keeps Account.balance equal
to the sum of the account's Transaction rows.

Mutation protocol (top-up, transfer, signed transaction):
    1. Validate the request before touching the database
    2. Open one atomic block
    3. Lock every affected account row (SELECT ... FOR UPDATE, ascending pk)
    4. Replay check when an idempotency key is given
    5. Funds and overflow checks against the balances read under that lock
    6. Relative balance update (balance = balance + delta) and row inserts
    7. Commit; any exception rolls back every step above

Contention failures (deadlock, lock timeout) are retried by
core.decorators.retry_on_contention; other database failures surface as
StorageError.

Usage:
    from ledger.services import LedgerService

    LedgerService.topup(account_id, 5000)
    result = LedgerService.transfer(account_id, other_id, 2500)
    LedgerService.get_balance(account_id)          # 2500
    LedgerService.get_history(account_id, limit=10)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db.models import F, ProtectedError
from django.utils import timezone

from core.decorators import retry_on_contention
from core.exceptions import ValidationError
from core.services import BaseService

from .exceptions import (
    AccountInUse,
    AccountNotFound,
    CategoryNotFound,
    IdempotencyConflict,
    InsufficientFunds,
    InvalidAmount,
    InvalidTransfer,
)
from .models import MAX_AMOUNT, Account, Transaction, TransactionCategory
from .types import AccountAudit, TransferResult

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime


class LedgerService(BaseService):
    """
    Service class for ledger operations.

    Key features:
    - One atomic block per operation covering balance updates and row inserts
    - Row locks taken in a consistent order to prevent deadlocks
    - Funds checks made against balances read under lock
    - Optional idempotency keys (safe client retries)

    All methods are class methods - no instance state is maintained.
    """

    # =========================================================================
    # Accounts
    # =========================================================================

    @classmethod
    def create_account(cls, name: str) -> Account:
        """
        Open a new account with a zero balance.

        Args:
            name: Display label

        Returns:
            The created Account
        """
        account = Account.objects.create(name=name, balance=0)
        cls.get_logger().info(
            f"Opened account {account.account_id}",
            extra={"account_id": account.account_id},
        )
        return account

    @staticmethod
    def get_account(account_id: int) -> Account:
        """
        Get account by ID.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        try:
            return Account.objects.get(pk=account_id)
        except Account.DoesNotExist:
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": account_id},
            )

    @classmethod
    def rename_account(cls, account_id: int, name: str) -> Account:
        """
        Change an account's display label.

        Only the name is written, so a concurrent balance update is never
        overwritten by a stale in-memory copy.
        """
        account = cls.get_account(account_id)
        account.name = name
        account.save(update_fields=["name", "updated_at"])
        return account

    @classmethod
    def delete_account(cls, account_id: int) -> None:
        """
        Delete an account that has no ledger rows.

        Raises:
            AccountNotFound: If account doesn't exist
            AccountInUse: If any transaction references the account
        """
        account = cls.get_account(account_id)
        try:
            with cls.atomic():
                account.delete()
        except ProtectedError:
            raise AccountInUse(
                f"Account {account_id} is still referenced and cannot be deleted",
                details={"account_id": account_id},
            )
        cls.get_logger().info(
            f"Deleted account {account_id}",
            extra={"account_id": account_id},
        )

    # =========================================================================
    # Validation helpers
    # =========================================================================

    @staticmethod
    def _validate_amount(amount: int, signed: bool = False) -> None:
        """
        Check that an amount is an integer of the accepted sign.

        Args:
            amount: Amount in minor units
            signed: Accept negative amounts (zero is never accepted)

        Raises:
            InvalidAmount: If the amount is not acceptable
        """
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmount(
                "Amount must be an integer number of minor units",
                details={"amount": repr(amount)},
            )
        if amount == 0 or (amount < 0 and not signed):
            raise InvalidAmount(
                "Amount must be positive" if not signed else "Amount must not be zero",
                details={"amount": amount},
            )
        if abs(amount) > MAX_AMOUNT:
            raise InvalidAmount(
                f"Amount must not exceed {MAX_AMOUNT} in absolute value",
                details={"amount": amount},
            )

    @staticmethod
    def _resolve_category(category_id: int | None) -> int | None:
        """
        Confirm a referenced category exists.

        Raises:
            CategoryNotFound: If category_id is given but unknown
        """
        if category_id is None:
            return None
        if not TransactionCategory.objects.filter(pk=category_id).exists():
            raise CategoryNotFound(
                f"Transaction category {category_id} not found",
                details={"transaction_category_id": category_id},
            )
        return category_id

    @staticmethod
    def _lock_accounts(account_ids: Iterable[int]) -> dict[int, Account]:
        """
        Lock account rows for the rest of the current atomic block.

        Locks are acquired in ascending account_id order so that any two
        operations touching the same pair of accounts queue up instead of
        deadlocking.

        Must be called inside transaction.atomic().

        Returns:
            Mapping of account_id to the locked Account

        Raises:
            AccountNotFound: For the first requested id that doesn't exist
        """
        requested = list(account_ids)
        accounts = {
            account.account_id: account
            for account in Account.objects.select_for_update()
            .filter(pk__in=requested)
            .order_by("account_id")
        }
        for account_id in requested:
            if account_id not in accounts:
                raise AccountNotFound(
                    f"Account {account_id} not found",
                    details={"account_id": account_id},
                )
        return accounts

    @staticmethod
    def _apply_delta(account_id: int, delta: int) -> None:
        """Add delta to an account's balance with a relative UPDATE."""
        Account.objects.filter(pk=account_id).update(
            balance=F("balance") + delta,
            updated_at=timezone.now(),
        )

    @staticmethod
    def _ensure_funds(account: Account, amount: int) -> None:
        """
        Check that a locked account can cover a debit.

        Raises:
            InsufficientFunds: If balance < amount
        """
        if account.balance < amount:
            raise InsufficientFunds(
                account.account_id,
                required=amount,
                available=account.balance,
            )

    @staticmethod
    def _ensure_capacity(account: Account, amount: int) -> None:
        """
        Check that a locked account can take a credit without overflowing.

        Raises:
            InvalidAmount: If balance + amount > MAX_AMOUNT
        """
        if account.balance > MAX_AMOUNT - amount:
            raise InvalidAmount(
                f"Credit of {amount} would push account {account.account_id} "
                f"past the maximum balance",
                details={
                    "account_id": account.account_id,
                    "amount": amount,
                    "balance": account.balance,
                },
            )

    @staticmethod
    def _find_replay(account_id: int, idempotency_key: str | None) -> Transaction | None:
        """Return the row already recorded under this key on this account, if any."""
        if not idempotency_key:
            return None
        return Transaction.objects.filter(
            account_id=account_id,
            idempotency_key=idempotency_key,
        ).first()

    @staticmethod
    def _idempotency_conflict(idempotency_key: str, existing: Transaction) -> IdempotencyConflict:
        return IdempotencyConflict(
            f"Idempotency key {idempotency_key!r} was already used for a different operation",
            details={
                "idempotency_key": idempotency_key,
                "transaction_id": existing.transaction_id,
            },
        )

    # =========================================================================
    # Balance mutations
    # =========================================================================

    @classmethod
    def _post_entry(
        cls,
        account_id: int,
        amount: int,
        category_id: int | None,
        transaction_date: datetime | None,
        idempotency_key: str | None,
    ) -> tuple[Transaction, bool]:
        """
        Apply one signed entry to one account. Caller provides the atomic block.

        Returns:
            (transaction, replayed)
        """
        accounts = cls._lock_accounts([account_id])
        category_id = cls._resolve_category(category_id)

        existing = cls._find_replay(account_id, idempotency_key)
        if existing is not None:
            if existing.amount != amount or existing.is_transfer:
                raise cls._idempotency_conflict(idempotency_key, existing)
            return existing, True

        if amount < 0:
            cls._ensure_funds(accounts[account_id], -amount)
        else:
            cls._ensure_capacity(accounts[account_id], amount)

        cls._apply_delta(account_id, amount)
        entry = Transaction.objects.create(
            account_id=account_id,
            transaction_category_id=category_id,
            amount=amount,
            transaction_date=transaction_date or timezone.now(),
            idempotency_key=idempotency_key or None,
        )
        return entry, False

    @classmethod
    @retry_on_contention()
    def topup(
        cls,
        account_id: int,
        amount: int,
        *,
        transaction_date: datetime | None = None,
        category_id: int | None = None,
        idempotency_key: str | None = None,
    ) -> Transaction:
        """
        Credit an account and record the matching transaction.

        Args:
            account_id: Account to credit
            amount: Positive amount in minor units
            transaction_date: Optional date for the row (default: now)
            category_id: Optional transaction category
            idempotency_key: Optional key; a retry with the same key returns
                the original row without crediting again

        Returns:
            The recorded Transaction (amount == +amount)

        Raises:
            InvalidAmount: If amount is not a positive integer or the credit
                would overflow the balance
            AccountNotFound: If the account doesn't exist
            CategoryNotFound: If category_id is unknown
            IdempotencyConflict: If the key was used for another operation
            StorageError: If the database failed (nothing was applied)
        """
        cls._validate_amount(amount)

        with cls.atomic():
            entry, replayed = cls._post_entry(
                account_id, amount, category_id, transaction_date, idempotency_key
            )

        if replayed:
            cls.get_logger().info(
                f"Replayed top-up {entry.transaction_id} for key {idempotency_key!r}",
                extra={"account_id": account_id, "transaction_id": entry.transaction_id},
            )
        else:
            cls.get_logger().info(
                f"Top-up of {amount} to account {account_id}",
                extra={
                    "account_id": account_id,
                    "amount": amount,
                    "transaction_id": entry.transaction_id,
                },
            )
        return entry

    @classmethod
    @retry_on_contention()
    def record_transaction(
        cls,
        account_id: int,
        amount: int,
        *,
        category_id: int | None = None,
        transaction_date: datetime | None = None,
        idempotency_key: str | None = None,
    ) -> Transaction:
        """
        Record a signed single-account transaction and apply it to the balance.

        Positive amounts behave like a top-up. Negative amounts are debits and
        need funds exactly like the source side of a transfer.

        Returns:
            The recorded Transaction

        Raises:
            InvalidAmount: If amount is zero, not an integer, or a credit
                would overflow the balance
            AccountNotFound: If the account doesn't exist
            CategoryNotFound: If category_id is unknown
            InsufficientFunds: If a debit exceeds the balance
            IdempotencyConflict: If the key was used for another operation
            StorageError: If the database failed (nothing was applied)
        """
        cls._validate_amount(amount, signed=True)

        try:
            with cls.atomic():
                entry, replayed = cls._post_entry(
                    account_id, amount, category_id, transaction_date, idempotency_key
                )
        except InsufficientFunds as exc:
            cls.get_logger().warning(
                f"Debit of {-amount} on account {account_id} rejected: insufficient funds",
                extra={"account_id": account_id, "available": exc.available},
            )
            raise

        if not replayed:
            cls.get_logger().info(
                f"Recorded {amount:+d} on account {account_id}",
                extra={
                    "account_id": account_id,
                    "amount": amount,
                    "transaction_id": entry.transaction_id,
                },
            )
        return entry

    @classmethod
    @retry_on_contention()
    def transfer(
        cls,
        source_account_id: int,
        target_account_id: int,
        amount: int,
        *,
        category_id: int | None = None,
        idempotency_key: str | None = None,
    ) -> TransferResult:
        """
        Move money between two accounts.

        Within one atomic block: both rows are locked, the source balance is
        checked, the source is debited, the target credited, and a debit row
        and a credit row are inserted. Two transfers from the same source
        queue on the source row lock, so their check-then-debit sequences
        never interleave.

        Args:
            source_account_id: Account to debit (the authenticated caller)
            target_account_id: Account to credit
            amount: Positive amount in minor units
            category_id: Optional transaction category for both rows
            idempotency_key: Optional key; a retry with the same key returns
                the original pair without moving money again

        Returns:
            TransferResult with the debit and credit rows

        Raises:
            InvalidAmount: If amount is not a positive integer or the credit
                would overflow the target balance
            InvalidTransfer: If source and target are the same account
            AccountNotFound: If either account doesn't exist
            CategoryNotFound: If category_id is unknown
            InsufficientFunds: If the source balance is below amount
            IdempotencyConflict: If the key was used for another operation
            StorageError: If the database failed (nothing was applied)
        """
        cls._validate_amount(amount)
        if source_account_id == target_account_id:
            raise InvalidTransfer(
                "Cannot transfer to the same account",
                details={"account_id": source_account_id},
            )

        logger = cls.get_logger()

        try:
            with cls.atomic():
                accounts = cls._lock_accounts([source_account_id, target_account_id])
                category_id = cls._resolve_category(category_id)

                # The key is unique per account, so it must be free (or hold
                # this very transfer) on both sides.
                existing = cls._find_replay(source_account_id, idempotency_key)
                existing_credit = cls._find_replay(target_account_id, idempotency_key)
                if existing is not None:
                    if (
                        existing.amount != -amount
                        or existing.to_account_id != target_account_id
                    ):
                        raise cls._idempotency_conflict(idempotency_key, existing)
                    if (
                        existing_credit is None
                        or existing_credit.amount != amount
                        or existing_credit.from_account_id != source_account_id
                    ):
                        raise cls._idempotency_conflict(
                            idempotency_key, existing_credit or existing
                        )
                    return TransferResult(
                        debit=existing, credit=existing_credit, replayed=True
                    )
                if existing_credit is not None:
                    raise cls._idempotency_conflict(idempotency_key, existing_credit)

                cls._ensure_funds(accounts[source_account_id], amount)
                cls._ensure_capacity(accounts[target_account_id], amount)

                cls._apply_delta(source_account_id, -amount)
                cls._apply_delta(target_account_id, amount)

                now = timezone.now()
                debit = Transaction.objects.create(
                    account_id=source_account_id,
                    transaction_category_id=category_id,
                    from_account_id=source_account_id,
                    to_account_id=target_account_id,
                    amount=-amount,
                    transaction_date=now,
                    idempotency_key=idempotency_key or None,
                )
                credit = Transaction.objects.create(
                    account_id=target_account_id,
                    transaction_category_id=category_id,
                    from_account_id=source_account_id,
                    to_account_id=target_account_id,
                    amount=amount,
                    transaction_date=now,
                    idempotency_key=idempotency_key or None,
                )
        except InsufficientFunds as exc:
            logger.warning(
                f"Transfer of {amount} from account {source_account_id} "
                f"to {target_account_id} rejected: insufficient funds",
                extra={
                    "source_account_id": source_account_id,
                    "target_account_id": target_account_id,
                    "amount": amount,
                    "available": exc.available,
                },
            )
            raise

        logger.info(
            f"Transfer of {amount} from account {source_account_id} to {target_account_id}",
            extra={
                "source_account_id": source_account_id,
                "target_account_id": target_account_id,
                "amount": amount,
                "debit_id": debit.transaction_id,
                "credit_id": credit.transaction_id,
            },
        )
        return TransferResult(debit=debit, credit=credit)

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    def get_balance(account_id: int) -> int:
        """
        Get the current stored balance of an account.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        balance = (
            Account.objects.filter(pk=account_id)
            .values_list("balance", flat=True)
            .first()
        )
        if balance is None:
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": account_id},
            )
        return balance

    @staticmethod
    def get_history(
        account_id: int,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """
        Get the most recent transactions of an account, newest first.

        Ordered by transaction_date descending, ties broken by
        transaction_id descending so repeated calls return identical pages.

        Args:
            account_id: Account to read
            limit: Page size (default: settings.LEDGER_HISTORY_DEFAULT_LIMIT,
                at most settings.LEDGER_HISTORY_MAX_LIMIT)
            offset: Rows to skip (default: 0)

        Returns:
            List of Transaction objects (empty for an account with no rows)

        Raises:
            ValidationError: If limit or offset is out of range
            AccountNotFound: If account doesn't exist
        """
        if limit is None:
            limit = settings.LEDGER_HISTORY_DEFAULT_LIMIT
        max_limit = settings.LEDGER_HISTORY_MAX_LIMIT
        if not 1 <= limit <= max_limit or offset < 0:
            raise ValidationError(
                f"limit must be between 1 and {max_limit} and offset must not be negative",
                error_code="INVALID_PAGINATION",
                details={"limit": limit, "offset": offset},
            )

        if not Account.objects.filter(pk=account_id).exists():
            raise AccountNotFound(
                f"Account {account_id} not found",
                details={"account_id": account_id},
            )

        return list(
            Transaction.objects.filter(account_id=account_id)
            .select_related("transaction_category")
            .order_by("-transaction_date", "-transaction_id")[offset : offset + limit]
        )

    @classmethod
    def audit_account(cls, account_id: int) -> AccountAudit:
        """
        Compare an account's stored balance with the sum of its rows.

        Raises:
            AccountNotFound: If account doesn't exist
        """
        account = cls.get_account(account_id)
        audit = AccountAudit(
            account_id=account.account_id,
            stored_balance=account.balance,
            ledger_balance=account.get_ledger_balance(),
        )
        if not audit.is_consistent:
            cls.get_logger().error(
                f"Account {account_id} balance {audit.stored_balance} "
                f"does not match ledger sum {audit.ledger_balance}",
                extra={"account_id": account_id},
            )
        return audit

