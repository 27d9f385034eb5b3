"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/register/ - Registration (user + ledger account)
    /api/v1/auth/login/    - Email/password login, returns JWT pair
    /api/v1/auth/refresh/  - Exchange refresh token for a new access token
    /api/v1/auth/me/       - Current user
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from authentication.views import CurrentUserView, RegisterView

app_name = "authentication"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", TokenObtainPairView.as_view(), name="login"),
    path("refresh/", TokenRefreshView.as_view(), name="refresh"),
    path("me/", CurrentUserView.as_view(), name="me"),
]
