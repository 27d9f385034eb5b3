"""
Django admin configuration for ledger models.

Key features:
- Transaction rows are immutable (no add/edit/delete permissions)
- Account balance is read-only and shown next to the ledger sum
"""

from django.contrib import admin

from .models import Account, Transaction, TransactionCategory


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    """
    Admin configuration for Account.

    The balance can only change through LedgerService, so it is read-only
    here. The detail page shows the sum of the account's rows for audit.
    """

    list_display = ["account_id", "name", "balance", "created_at"]
    search_fields = ["account_id", "name"]
    readonly_fields = ["account_id", "balance", "ledger_balance_display", "created_at", "updated_at"]
    ordering = ["account_id"]

    fieldsets = (
        (None, {"fields": ("account_id", "name")}),
        ("Balance", {"fields": ("balance", "ledger_balance_display")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )

    def ledger_balance_display(self, obj: Account) -> int:
        """Sum of transaction amounts; must equal the stored balance."""
        return obj.get_ledger_balance()

    ledger_balance_display.short_description = "Ledger sum"


@admin.register(TransactionCategory)
class TransactionCategoryAdmin(admin.ModelAdmin):
    list_display = ["transaction_category_id", "name", "created_at"]
    search_fields = ["name"]
    ordering = ["transaction_category_id"]


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """
    Admin configuration for Transaction.

    Ledger rows cannot be created, edited or deleted through the admin.
    Corrections are made by recording a new transaction.
    """

    list_display = [
        "transaction_id",
        "transaction_date",
        "account",
        "amount",
        "transaction_category",
        "from_account",
        "to_account",
    ]
    list_filter = ["transaction_category", "transaction_date"]
    search_fields = ["transaction_id", "idempotency_key"]
    readonly_fields = [
        "transaction_id",
        "account",
        "transaction_category",
        "from_account",
        "to_account",
        "amount",
        "transaction_date",
        "idempotency_key",
    ]
    date_hierarchy = "transaction_date"
    ordering = ["-transaction_date", "-transaction_id"]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
