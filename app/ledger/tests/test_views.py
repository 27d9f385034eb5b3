"""
Tests for ledger API views.

The caller's account is funded_account (balance 100) unless stated
otherwise; other_account starts empty.
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework import status

from ledger.models import Account, Transaction, TransactionCategory
from ledger.services import LedgerService
from ledger.tests.factories import AccountFactory, TransactionFactory

MY_ACCOUNT_URL = "/api/v1/accounts/me/"
TOPUP_URL = "/api/v1/accounts/me/topup/"
BALANCE_URL = "/api/v1/accounts/me/balance/"
TRANSFER_URL = "/api/v1/accounts/me/transfer/"
MUTATIONS_URL = "/api/v1/accounts/me/mutations/"
TRANSACTIONS_URL = "/api/v1/transactions/"
ACCOUNTS_URL = "/api/v1/accounts/"
CATEGORIES_URL = "/api/v1/transaction-categories/"


class TestMyAccountView:
    def test_returns_callers_account(self, authenticated_client, funded_account):
        response = authenticated_client.get(MY_ACCOUNT_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["account_id"] == funded_account.account_id
        assert response.data["balance"] == 100

    def test_requires_authentication(self, api_client, db):
        response = api_client.get(MY_ACCOUNT_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_user_without_account_forbidden(self, accountless_client):
        response = accountless_client.get(MY_ACCOUNT_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestTopUpView:
    def test_tops_up_callers_account(self, authenticated_client, funded_account):
        response = authenticated_client.post(TOPUP_URL, {"amount": 50}, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["amount"] == 50
        assert response.data["account_id"] == funded_account.account_id
        funded_account.refresh_from_db()
        assert funded_account.balance == 150

    def test_ignores_account_id_in_body(
        self, authenticated_client, funded_account, other_account
    ):
        response = authenticated_client.post(
            TOPUP_URL,
            {"amount": 5, "account_id": other_account.account_id},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["account_id"] == funded_account.account_id
        other_account.refresh_from_db()
        assert other_account.balance == 0

    @pytest.mark.parametrize("amount", [0, -10])
    def test_non_positive_amount(self, authenticated_client, funded_account, amount):
        response = authenticated_client.post(TOPUP_URL, {"amount": amount}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_AMOUNT"
        funded_account.refresh_from_db()
        assert funded_account.balance == 100

    def test_non_integer_amount(self, authenticated_client):
        response = authenticated_client.post(TOPUP_URL, {"amount": "lots"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "amount" in response.data

    def test_amount_beyond_storage_range(self, authenticated_client, funded_account):
        response = authenticated_client.post(TOPUP_URL, {"amount": 2**63}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "amount" in response.data
        funded_account.refresh_from_db()
        assert funded_account.balance == 100

    def test_unknown_category(self, authenticated_client):
        response = authenticated_client.post(
            TOPUP_URL,
            {"amount": 5, "transaction_category_id": 99999},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "CATEGORY_NOT_FOUND"

    def test_idempotent_retry(self, authenticated_client, funded_account):
        payload = {"amount": 25, "idempotency_key": "topup-1"}

        first = authenticated_client.post(TOPUP_URL, payload, format="json")
        second = authenticated_client.post(TOPUP_URL, payload, format="json")

        assert first.data["transaction_id"] == second.data["transaction_id"]
        funded_account.refresh_from_db()
        assert funded_account.balance == 125

    def test_idempotency_conflict(self, authenticated_client):
        authenticated_client.post(
            TOPUP_URL, {"amount": 25, "idempotency_key": "k"}, format="json"
        )

        response = authenticated_client.post(
            TOPUP_URL, {"amount": 30, "idempotency_key": "k"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "IDEMPOTENCY_CONFLICT"

    def test_user_without_account_forbidden(self, accountless_client):
        response = accountless_client.post(TOPUP_URL, {"amount": 5}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestBalanceView:
    def test_returns_balance(self, authenticated_client, funded_account):
        response = authenticated_client.get(BALANCE_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            "account_id": funded_account.account_id,
            "balance": 100,
        }


class TestTransferView:
    def test_transfers(self, authenticated_client, funded_account, other_account):
        response = authenticated_client.post(
            TRANSFER_URL,
            {"target_account_id": other_account.account_id, "amount": 100},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["debit"]["amount"] == -100
        assert response.data["debit"]["account_id"] == funded_account.account_id
        assert response.data["credit"]["amount"] == 100
        assert response.data["credit"]["account_id"] == other_account.account_id
        funded_account.refresh_from_db()
        other_account.refresh_from_db()
        assert funded_account.balance == 0
        assert other_account.balance == 100

    def test_insufficient_funds(self, authenticated_client, funded_account, other_account):
        rows_before = Transaction.objects.count()

        response = authenticated_client.post(
            TRANSFER_URL,
            {"target_account_id": other_account.account_id, "amount": 101},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INSUFFICIENT_FUNDS"
        assert response.data["details"]["available"] == 100
        assert Transaction.objects.count() == rows_before

    def test_self_transfer(self, authenticated_client, funded_account):
        response = authenticated_client.post(
            TRANSFER_URL,
            {"target_account_id": funded_account.account_id, "amount": 10},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INVALID_TRANSFER"

    def test_unknown_target(self, authenticated_client):
        response = authenticated_client.post(
            TRANSFER_URL,
            {"target_account_id": 999999, "amount": 10},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "ACCOUNT_NOT_FOUND"

    def test_missing_target(self, authenticated_client):
        response = authenticated_client.post(TRANSFER_URL, {"amount": 10}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "target_account_id" in response.data

    def test_key_already_used_by_target(
        self, authenticated_client, funded_account, other_account
    ):
        LedgerService.topup(other_account.account_id, 5, idempotency_key="order-17")

        response = authenticated_client.post(
            TRANSFER_URL,
            {
                "target_account_id": other_account.account_id,
                "amount": 10,
                "idempotency_key": "order-17",
            },
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "IDEMPOTENCY_CONFLICT"
        funded_account.refresh_from_db()
        assert funded_account.balance == 100


class TestMutationView:
    def test_lists_recent_rows_newest_first(self, authenticated_client, funded_account):
        start = timezone.now() - timedelta(hours=1)
        for i in range(12):
            LedgerService.topup(
                funded_account.account_id, 1, transaction_date=start + timedelta(minutes=i)
            )

        response = authenticated_client.get(MUTATIONS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 10
        dates = [row["transaction_date"] for row in response.data]
        assert dates == sorted(dates, reverse=True)

    def test_limit_and_offset(self, authenticated_client, funded_account):
        for _ in range(4):
            LedgerService.topup(funded_account.account_id, 1)

        response = authenticated_client.get(MUTATIONS_URL, {"limit": 2, "offset": 1})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 2

    def test_invalid_limit(self, authenticated_client):
        response = authenticated_client.get(MUTATIONS_URL, {"limit": 0})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "limit" in response.data

    def test_limit_above_maximum(self, authenticated_client):
        response = authenticated_client.get(MUTATIONS_URL, {"limit": 1000})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_only_callers_rows(self, authenticated_client, funded_account, other_account):
        TransactionFactory(account=other_account)

        response = authenticated_client.get(MUTATIONS_URL)

        assert {row["account_id"] for row in response.data} == {funded_account.account_id}


class TestTransactionListCreateView:
    def test_list_matches_mutations(self, authenticated_client):
        mutations = authenticated_client.get(MUTATIONS_URL)
        transactions = authenticated_client.get(TRANSACTIONS_URL)

        assert transactions.status_code == status.HTTP_200_OK
        assert transactions.data == mutations.data

    def test_records_debit(self, authenticated_client, funded_account, category):
        response = authenticated_client.post(
            TRANSACTIONS_URL,
            {
                "amount": -30,
                "transaction_category_id": category.transaction_category_id,
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["amount"] == -30
        assert response.data["transaction_category_id"] == category.transaction_category_id
        funded_account.refresh_from_db()
        assert funded_account.balance == 70

    def test_debit_beyond_balance(self, authenticated_client):
        response = authenticated_client.post(
            TRANSACTIONS_URL, {"amount": -500}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error_code"] == "INSUFFICIENT_FUNDS"


class TestAccountViewSet:
    def test_list_for_authenticated_user(self, authenticated_client, funded_account):
        response = authenticated_client.get(ACCOUNTS_URL)

        assert response.status_code == status.HTTP_200_OK
        ids = [row["account_id"] for row in response.data["results"]]
        assert funded_account.account_id in ids

    def test_retrieve(self, authenticated_client, other_account):
        response = authenticated_client.get(f"{ACCOUNTS_URL}{other_account.account_id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["name"] == other_account.name

    def test_create_forbidden_for_regular_user(self, authenticated_client):
        response = authenticated_client.post(ACCOUNTS_URL, {"name": "Mine"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_staff_creates_account_with_zero_balance(self, staff_client):
        response = staff_client.post(
            ACCOUNTS_URL, {"name": "Ops", "balance": 1_000_000}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["balance"] == 0
        assert Account.objects.get(pk=response.data["account_id"]).balance == 0

    def test_staff_renames_account(self, staff_client, funded_account):
        response = staff_client.patch(
            f"{ACCOUNTS_URL}{funded_account.account_id}/",
            {"name": "Renamed", "balance": 5},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["name"] == "Renamed"
        assert response.data["balance"] == 100

    def test_staff_deletes_unused_account(self, staff_client):
        unused = AccountFactory()

        response = staff_client.delete(f"{ACCOUNTS_URL}{unused.account_id}/")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Account.objects.filter(pk=unused.pk).exists()

    def test_staff_cannot_delete_account_with_history(self, staff_client, funded_account):
        response = staff_client.delete(f"{ACCOUNTS_URL}{funded_account.account_id}/")

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error_code"] == "ACCOUNT_IN_USE"

    def test_unknown_account(self, staff_client):
        response = staff_client.get(f"{ACCOUNTS_URL}999999/")

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestTransactionCategoryViewSet:
    def test_list(self, authenticated_client, category):
        response = authenticated_client.get(CATEGORIES_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["results"][0]["name"] == "Groceries"

    def test_staff_creates_category(self, staff_client):
        response = staff_client.post(CATEGORIES_URL, {"name": "Rent"}, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert TransactionCategory.objects.filter(name="Rent").exists()

    def test_regular_user_cannot_create(self, authenticated_client):
        response = authenticated_client.post(CATEGORIES_URL, {"name": "Rent"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_staff_deletes_category_in_use(self, staff_client, funded_account, category):
        row = TransactionFactory(account=funded_account, transaction_category=category)

        response = staff_client.delete(
            f"{CATEGORIES_URL}{category.transaction_category_id}/"
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        row.refresh_from_db()
        assert row.transaction_category_id is None
