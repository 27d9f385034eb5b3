"""
Ledger app configuration.

This app owns the money-movement subsystem:
- Accounts with a denormalized balance
- Append-only transaction rows whose sum per account is that balance
- The service layer that mutates both atomically
"""

from django.apps import AppConfig


class LedgerConfig(AppConfig):
    """Configuration for the ledger application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "ledger"
    verbose_name = "Ledger"
