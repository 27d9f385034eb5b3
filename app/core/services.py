"""
Base service layer patterns for business logic encapsulation.

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.
    Expected failures are raised as core.exceptions subclasses and
    translated to responses by the view layer.

Usage:
    from core.services import BaseService

    class AccountService(BaseService):
        @classmethod
        def open_account(cls, name: str) -> Account:
            with cls.atomic():
                account = Account.objects.create(name=name)

            cls.get_logger().info(f"Opened account {account.pk}")
            return account

Related:
    - core.exceptions: Error hierarchy raised by services
    - core.decorators: Cross-cutting concerns (contention retry, request logging)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless; all durable state lives in the database
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.

        Returns:
            Logger instance for this service
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation raises, all
        changes are rolled back.

        Example:
            with cls.atomic():
                account = Account.objects.select_for_update().get(pk=pk)
                Transaction.objects.create(account=account, amount=100)
                # If the insert fails, the lock is released and nothing commits
        """
        with transaction.atomic():
            yield
