"""
Service layer for user registration.

Registration creates the login identity and its ledger account together,
so there is never a user whose account is missing or an account nobody
can operate.

Usage:
    from authentication.services import AuthService

    user = AuthService.register(
        email="user@example.com",
        password="securepassword",
        account_name="Daily spending",
    )
    user.account.balance  # 0
"""

from __future__ import annotations

from core.services import BaseService
from ledger.services import LedgerService

from authentication.models import User


class AuthService(BaseService):
    """Registration and identity helpers."""

    @classmethod
    def register(cls, email: str, password: str, account_name: str) -> User:
        """
        Create a user and the ledger account it operates.

        Args:
            email: Login email (must be unique)
            password: Raw password, hashed by the manager
            account_name: Display label of the new account

        Returns:
            The created User with ``account`` set
        """
        with cls.atomic():
            account = LedgerService.create_account(name=account_name)
            user = User.objects.create_user(
                email=email,
                password=password,
                account=account,
            )

        cls.get_logger().info(
            f"Registered user {user.pk} with account {account.account_id}",
            extra={"user_id": user.pk, "account_id": account.account_id},
        )
        return user
