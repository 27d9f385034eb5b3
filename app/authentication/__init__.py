"""
Authentication application.

This app provides email-based users, each bound to the ledger account it
operates, plus JWT login for the API.

Key components:
    - User model: Custom email-based user with a one-to-one ledger account
    - AuthService: Registration (user + account in one transaction)
    - HasLedgerAccount: Permission resolving "my account" for ledger views

Usage:
    from authentication.models import User
    from authentication.services import AuthService
"""
