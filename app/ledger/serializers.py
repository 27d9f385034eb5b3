"""
DRF serializers for the ledger app.

This module provides serializers for:
- Account and transaction category CRUD
- Ledger rows in API responses
- Top-up, transfer and transaction requests
- History query parameters

Request serializers only check shapes, types and storable ranges. Amount
and transfer rules are enforced by LedgerService so every caller gets the
same validation and error codes.

Related files:
    - models.py: Account, TransactionCategory, Transaction
    - services.py: LedgerService
    - views.py: Ledger API views
"""

from __future__ import annotations

from django.conf import settings
from rest_framework import serializers

from .models import MAX_AMOUNT, Account, Transaction, TransactionCategory


class AccountSerializer(serializers.ModelSerializer):
    """
    Account serializer for API responses and staff CRUD.

    The balance is read-only: it only ever changes through LedgerService.
    """

    class Meta:
        model = Account
        fields = ["account_id", "name", "balance", "created_at", "updated_at"]
        read_only_fields = ["account_id", "balance", "created_at", "updated_at"]


class TransactionCategorySerializer(serializers.ModelSerializer):
    """Transaction category serializer."""

    class Meta:
        model = TransactionCategory
        fields = ["transaction_category_id", "name", "created_at", "updated_at"]
        read_only_fields = ["transaction_category_id", "created_at", "updated_at"]


class TransactionSerializer(serializers.ModelSerializer):
    """
    Ledger row serializer for API responses.

    Foreign keys are exposed as plain ids; absent references are null.
    """

    account_id = serializers.IntegerField(read_only=True)
    transaction_category_id = serializers.IntegerField(read_only=True, allow_null=True)
    from_account_id = serializers.IntegerField(read_only=True, allow_null=True)
    to_account_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Transaction
        fields = [
            "transaction_id",
            "account_id",
            "transaction_category_id",
            "from_account_id",
            "to_account_id",
            "amount",
            "transaction_date",
        ]
        read_only_fields = fields


class TopUpSerializer(serializers.Serializer):
    """Request body for crediting the caller's account."""

    amount = serializers.IntegerField(
        max_value=MAX_AMOUNT,
        help_text="Positive amount in minor units",
    )
    transaction_date = serializers.DateTimeField(
        required=False,
        help_text="When the top-up happened (default: now)",
    )
    transaction_category_id = serializers.IntegerField(
        required=False,
        allow_null=True,
        help_text="Optional transaction category",
    )
    idempotency_key = serializers.CharField(
        required=False,
        max_length=255,
        help_text="Repeat with the same key to retry safely",
    )


class TransferSerializer(serializers.Serializer):
    """
    Request body for moving money out of the caller's account.

    The source account is always the authenticated caller; it is never
    read from the body.
    """

    target_account_id = serializers.IntegerField(help_text="Account to credit")
    amount = serializers.IntegerField(
        max_value=MAX_AMOUNT,
        help_text="Positive amount in minor units",
    )
    transaction_category_id = serializers.IntegerField(
        required=False,
        allow_null=True,
        help_text="Optional transaction category",
    )
    idempotency_key = serializers.CharField(
        required=False,
        max_length=255,
        help_text="Repeat with the same key to retry safely",
    )


class TransferResultSerializer(serializers.Serializer):
    """Response body of a transfer: both ledger rows."""

    debit = TransactionSerializer(read_only=True)
    credit = TransactionSerializer(read_only=True)


class RecordTransactionSerializer(serializers.Serializer):
    """Request body for a signed transaction on the caller's account."""

    amount = serializers.IntegerField(
        min_value=-MAX_AMOUNT,
        max_value=MAX_AMOUNT,
        help_text="Signed amount: positive credits, negative debits",
    )
    transaction_category_id = serializers.IntegerField(required=False, allow_null=True)
    transaction_date = serializers.DateTimeField(required=False)
    idempotency_key = serializers.CharField(required=False, max_length=255)


class HistoryQuerySerializer(serializers.Serializer):
    """Query parameters for transaction history."""

    limit = serializers.IntegerField(required=False, min_value=1)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)

    def validate_limit(self, value: int) -> int:
        max_limit = settings.LEDGER_HISTORY_MAX_LIMIT
        if value > max_limit:
            raise serializers.ValidationError(f"Ensure this value is at most {max_limit}.")
        return value
