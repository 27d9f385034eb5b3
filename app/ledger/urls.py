"""
URL configuration for the ledger API.

URL Structure:
    Caller's account:
        /accounts/me/                 GET
        /accounts/me/topup/           POST
        /accounts/me/balance/         GET
        /accounts/me/transfer/        POST
        /accounts/me/mutations/       GET

    Accounts:
        /accounts/                    GET, POST
        /accounts/{id}/               GET, PATCH, DELETE

    Transactions:
        /transactions/                GET, POST

    Categories:
        /transaction-categories/      GET, POST
        /transaction-categories/{id}/ GET, PATCH, DELETE

All URLs are prefixed with /api/v1/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from ledger.views import (
    AccountViewSet,
    BalanceView,
    MutationView,
    MyAccountView,
    TopUpView,
    TransactionCategoryViewSet,
    TransactionListCreateView,
    TransferView,
)

router = DefaultRouter()
router.register(r"accounts", AccountViewSet, basename="account")
router.register(
    r"transaction-categories",
    TransactionCategoryViewSet,
    basename="transaction-category",
)

app_name = "ledger"

urlpatterns = [
    # "me" routes come before the router so "me" is never parsed as an id
    path("accounts/me/", MyAccountView.as_view(), name="my-account"),
    path("accounts/me/topup/", TopUpView.as_view(), name="topup"),
    path("accounts/me/balance/", BalanceView.as_view(), name="balance"),
    path("accounts/me/transfer/", TransferView.as_view(), name="transfer"),
    path("accounts/me/mutations/", MutationView.as_view(), name="mutations"),
    path("transactions/", TransactionListCreateView.as_view(), name="transactions"),
    path("", include(router.urls)),
]
