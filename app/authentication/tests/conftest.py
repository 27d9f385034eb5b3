"""
Test configuration and fixtures for authentication tests.

This module provides:
- Users with and without a ledger account
- API client helpers for authenticated requests

Usage:
    def test_example(user, authenticated_client):
        response = authenticated_client.get('/api/v1/auth/me/')
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Active user operating its own empty ledger account."""
    return UserFactory()


@pytest.fixture
def user_without_account(db):
    """Active user that is not bound to any ledger account."""
    return UserFactory(account=None)


@pytest.fixture
def staff_user(db):
    return UserFactory(is_staff=True)


# =============================================================================
# API Client Fixtures
# =============================================================================


def client_for(user) -> APIClient:
    """Return API client authenticated with a JWT access token for user."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def api_client():
    """Return unauthenticated API client."""
    return APIClient()


@pytest.fixture
def authenticated_client(user):
    return client_for(user)


@pytest.fixture
def staff_client(staff_user):
    return client_for(staff_user)


@pytest.fixture
def accountless_client(user_without_account):
    return client_for(user_without_account)
