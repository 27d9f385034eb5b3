"""
Pytest fixtures for ledger tests.

Sections:
    - Account Fixtures: Empty and funded accounts
    - Test Data Fixtures: Categories and idempotency keys
    - API Client Fixtures: JWT-authenticated clients bound to accounts
"""

import uuid

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from ledger.services import LedgerService
from ledger.tests.factories import AccountFactory, TransactionCategoryFactory


# ==========================================================================
# Account Fixtures
# ==========================================================================


@pytest.fixture
def account(db):
    """Empty account."""
    return AccountFactory(name="Alice")


@pytest.fixture
def other_account(db):
    """Second empty account, usually the transfer target."""
    return AccountFactory(name="Bob")


@pytest.fixture
def third_account(db):
    return AccountFactory(name="Carol")


@pytest.fixture
def funded_account(db):
    """
    Account with a balance of 100, funded through a top-up.

    Funding through the service keeps balance == sum(transactions).
    """
    funded = AccountFactory(name="Funded")
    LedgerService.topup(funded.account_id, 100)
    funded.refresh_from_db()
    return funded


# ==========================================================================
# Test Data Fixtures
# ==========================================================================


@pytest.fixture
def category(db):
    return TransactionCategoryFactory(name="Groceries")


@pytest.fixture
def unique_idempotency_key():
    """Generate a unique idempotency key for testing."""
    return f"test-{uuid.uuid4()}"


# ==========================================================================
# API Client Fixtures
# ==========================================================================


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
def user(funded_account):
    """User operating funded_account (balance 100)."""
    return UserFactory(account=funded_account)


@pytest.fixture
def authenticated_client(user):
    return client_for(user)


@pytest.fixture
def staff_client(db):
    return client_for(UserFactory(is_staff=True, account=None))


@pytest.fixture
def accountless_client(db):
    return client_for(UserFactory(account=None))
