"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager tests
- test_permissions.py: HasLedgerAccount / IsStaffOrReadOnly tests
- test_services.py: AuthService tests
- test_views.py: Registration, token and current-user endpoint tests

Usage:
    pytest app/authentication/tests/
"""
