"""
DRF views for the ledger app.

This module provides API views for:
- Account listing and staff account management
- The caller's own account: top-up, balance, transfer, history
- Signed single-account transactions
- Transaction categories

Related files:
    - services.py: LedgerService
    - serializers.py: Request/response serializers
    - urls.py: URL routing

Endpoints:
    GET    /api/v1/accounts/                 - List accounts
    POST   /api/v1/accounts/                 - Open account (staff)
    GET    /api/v1/accounts/{id}/            - Get account
    PATCH  /api/v1/accounts/{id}/            - Rename account (staff)
    DELETE /api/v1/accounts/{id}/            - Delete unused account (staff)
    GET    /api/v1/accounts/me/              - Caller's account
    POST   /api/v1/accounts/me/topup/        - Top up caller's account
    GET    /api/v1/accounts/me/balance/      - Caller's balance
    POST   /api/v1/accounts/me/transfer/     - Transfer from caller's account
    GET    /api/v1/accounts/me/mutations/    - Caller's recent transactions
    GET    /api/v1/transactions/             - Caller's recent transactions
    POST   /api/v1/transactions/             - Record signed transaction
    *      /api/v1/transaction-categories/   - Category CRUD

Security:
    - All endpoints require authentication
    - "My account" is always request.user.account_id, never the body
    - Account and category writes are staff-only
"""

from __future__ import annotations

import logging

from django.utils.decorators import method_decorator
from drf_spectacular.utils import (
    OpenApiParameter,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import HasLedgerAccount, IsStaffOrReadOnly
from core.decorators import log_request
from core.exceptions import BaseApplicationError

from .models import Account, TransactionCategory
from .serializers import (
    AccountSerializer,
    HistoryQuerySerializer,
    RecordTransactionSerializer,
    TopUpSerializer,
    TransactionCategorySerializer,
    TransactionSerializer,
    TransferResultSerializer,
    TransferSerializer,
)
from .services import LedgerService

logger = logging.getLogger(__name__)

HISTORY_PARAMETERS = [
    OpenApiParameter("limit", int, description="Page size (default 10)"),
    OpenApiParameter("offset", int, description="Rows to skip (default 0)"),
]


def error_response(exc: BaseApplicationError) -> Response:
    """Render an application error with its own HTTP status."""
    return Response(exc.to_dict(), status=exc.http_status)


class LedgerAccountMixin:
    """Resolves the caller's account for "my account" views."""

    permission_classes = [IsAuthenticated, HasLedgerAccount]

    def get_account_id(self) -> int:
        return self.request.user.account_id

    def list_history(self, request) -> Response:
        query = HistoryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        try:
            rows = LedgerService.get_history(
                self.get_account_id(),
                limit=query.validated_data.get("limit"),
                offset=query.validated_data["offset"],
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(TransactionSerializer(rows, many=True).data)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_accounts",
        summary="List accounts",
        tags=["Accounts"],
    ),
    create=extend_schema(
        operation_id="create_account",
        summary="Open account",
        tags=["Accounts"],
    ),
    retrieve=extend_schema(
        operation_id="get_account",
        summary="Get account",
        tags=["Accounts"],
    ),
    update=extend_schema(
        operation_id="replace_account",
        summary="Replace account",
        tags=["Accounts"],
    ),
    partial_update=extend_schema(
        operation_id="update_account",
        summary="Rename account",
        tags=["Accounts"],
    ),
    destroy=extend_schema(
        operation_id="delete_account",
        summary="Delete account",
        tags=["Accounts"],
    ),
)
class AccountViewSet(viewsets.ModelViewSet):
    """
    ViewSet for account operations.

    list / retrieve:
        Any authenticated user.

    create / update / partial_update / destroy:
        Staff only. Only the name is writable; the balance changes
        exclusively through ledger operations. Accounts with ledger rows
        cannot be deleted.
    """

    queryset = Account.objects.all().order_by("account_id")
    serializer_class = AccountSerializer
    permission_classes = [IsStaffOrReadOnly]

    def create(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        account = LedgerService.create_account(name=serializer.validated_data["name"])
        return Response(
            self.get_serializer(account).data,
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None, partial=False):
        account = self.get_object()
        serializer = self.get_serializer(account, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        name = serializer.validated_data.get("name", account.name)
        try:
            account = LedgerService.rename_account(account.account_id, name)
        except BaseApplicationError as e:
            return error_response(e)

        return Response(self.get_serializer(account).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    def destroy(self, request, pk=None):
        account = self.get_object()
        try:
            LedgerService.delete_account(account.account_id)
        except BaseApplicationError as e:
            return error_response(e)

        return Response(status=status.HTTP_204_NO_CONTENT)


class MyAccountView(LedgerAccountMixin, APIView):
    """
    The caller's own account.

    GET /api/v1/accounts/me/
    """

    @extend_schema(
        operation_id="get_my_account",
        summary="Get my account",
        tags=["Accounts"],
        responses={200: AccountSerializer},
    )
    def get(self, request):
        try:
            account = LedgerService.get_account(self.get_account_id())
        except BaseApplicationError as e:
            return error_response(e)

        return Response(AccountSerializer(account).data)


class TopUpView(LedgerAccountMixin, APIView):
    """
    Credit the caller's account.

    POST /api/v1/accounts/me/topup/

    Request body:
        {"amount": 5000, "idempotency_key": "optional-client-key"}

    Returns:
        201 with the recorded transaction (the original row on an
        idempotent retry)
    """

    @extend_schema(
        operation_id="topup",
        summary="Top up my account",
        tags=["Ledger"],
        request=TopUpSerializer,
        responses={201: TransactionSerializer},
    )
    @method_decorator(log_request())
    def post(self, request):
        serializer = TopUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            entry = LedgerService.topup(
                self.get_account_id(),
                data["amount"],
                transaction_date=data.get("transaction_date"),
                category_id=data.get("transaction_category_id"),
                idempotency_key=data.get("idempotency_key"),
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(TransactionSerializer(entry).data, status=status.HTTP_201_CREATED)


class BalanceView(LedgerAccountMixin, APIView):
    """
    Current balance of the caller's account.

    GET /api/v1/accounts/me/balance/

    Returns:
        {"account_id": 1, "balance": 2500}
    """

    @extend_schema(
        operation_id="get_balance",
        summary="Get my balance",
        tags=["Ledger"],
    )
    def get(self, request):
        account_id = self.get_account_id()
        try:
            balance = LedgerService.get_balance(account_id)
        except BaseApplicationError as e:
            return error_response(e)

        return Response({"account_id": account_id, "balance": balance})


class TransferView(LedgerAccountMixin, APIView):
    """
    Move money from the caller's account to another account.

    POST /api/v1/accounts/me/transfer/

    Request body:
        {"target_account_id": 2, "amount": 2500}

    Returns:
        201 with {"debit": {...}, "credit": {...}}
    """

    @extend_schema(
        operation_id="transfer",
        summary="Transfer from my account",
        tags=["Ledger"],
        request=TransferSerializer,
        responses={201: TransferResultSerializer},
    )
    @method_decorator(log_request())
    def post(self, request):
        serializer = TransferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = LedgerService.transfer(
                self.get_account_id(),
                data["target_account_id"],
                data["amount"],
                category_id=data.get("transaction_category_id"),
                idempotency_key=data.get("idempotency_key"),
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(
            TransferResultSerializer(result).data,
            status=status.HTTP_201_CREATED,
        )


class MutationView(LedgerAccountMixin, APIView):
    """
    Recent transactions of the caller's account, newest first.

    GET /api/v1/accounts/me/mutations/?limit=10&offset=0
    """

    @extend_schema(
        operation_id="list_mutations",
        summary="List my recent transactions",
        tags=["Ledger"],
        parameters=HISTORY_PARAMETERS,
        responses={200: TransactionSerializer(many=True)},
    )
    def get(self, request):
        return self.list_history(request)


class TransactionListCreateView(LedgerAccountMixin, APIView):
    """
    The caller's ledger rows.

    GET  /api/v1/transactions/ - Same as accounts/me/mutations/
    POST /api/v1/transactions/ - Record a signed transaction on the caller's account
    """

    @extend_schema(
        operation_id="list_transactions",
        summary="List my transactions",
        tags=["Ledger"],
        parameters=HISTORY_PARAMETERS,
        responses={200: TransactionSerializer(many=True)},
    )
    def get(self, request):
        return self.list_history(request)

    @extend_schema(
        operation_id="create_transaction",
        summary="Record transaction",
        tags=["Ledger"],
        request=RecordTransactionSerializer,
        responses={201: TransactionSerializer},
    )
    @method_decorator(log_request())
    def post(self, request):
        serializer = RecordTransactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            entry = LedgerService.record_transaction(
                self.get_account_id(),
                data["amount"],
                category_id=data.get("transaction_category_id"),
                transaction_date=data.get("transaction_date"),
                idempotency_key=data.get("idempotency_key"),
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(TransactionSerializer(entry).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_transaction_categories",
        summary="List transaction categories",
        tags=["Transaction Categories"],
    ),
    create=extend_schema(
        operation_id="create_transaction_category",
        summary="Create transaction category",
        tags=["Transaction Categories"],
    ),
    retrieve=extend_schema(
        operation_id="get_transaction_category",
        summary="Get transaction category",
        tags=["Transaction Categories"],
    ),
    update=extend_schema(
        operation_id="replace_transaction_category",
        summary="Replace transaction category",
        tags=["Transaction Categories"],
    ),
    partial_update=extend_schema(
        operation_id="update_transaction_category",
        summary="Rename transaction category",
        tags=["Transaction Categories"],
    ),
    destroy=extend_schema(
        operation_id="delete_transaction_category",
        summary="Delete transaction category",
        tags=["Transaction Categories"],
    ),
)
class TransactionCategoryViewSet(viewsets.ModelViewSet):
    """
    ViewSet for transaction categories.

    Reads are open to authenticated users; writes are staff-only.
    Deleting a category keeps its transactions with a null category.
    """

    queryset = TransactionCategory.objects.all().order_by("transaction_category_id")
    serializer_class = TransactionCategorySerializer
    permission_classes = [IsStaffOrReadOnly]
