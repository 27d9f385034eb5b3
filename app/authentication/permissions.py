"""
Permission classes for ledger-facing API views.

This module provides DRF permission classes that resolve the caller's
identity to a ledger account:
- HasLedgerAccount: Authenticated user is bound to an account
- IsStaffOrReadOnly: Safe methods for everyone authenticated, writes for staff

Design Decisions:
    - "My account" is always request.user.account_id
    - Users without an account (e.g. admin-only users) get 403 on
      balance-affecting endpoints rather than a 404
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class HasLedgerAccount(permissions.BasePermission):
    """Allows access only to authenticated users bound to a ledger account."""

    message = "No ledger account is associated with this user."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "account_id", None) is not None
        )


class IsStaffOrReadOnly(permissions.BasePermission):
    """Read access for authenticated users, write access for staff only."""

    def has_permission(self, request: Request, view: APIView) -> bool:
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.is_staff
