"""
API views for the authentication app.

Endpoints:
    POST /api/v1/auth/register/ - Create user + ledger account
    POST /api/v1/auth/login/    - Obtain JWT pair (simplejwt)
    POST /api/v1/auth/refresh/  - Refresh access token (simplejwt)
    GET  /api/v1/auth/me/       - Current user and account
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.serializers import RegisterSerializer, UserSerializer
from authentication.services import AuthService

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    """
    Register a user together with a new ledger account.

    POST /api/v1/auth/register/

    Request body:
        {"email": "user@example.com", "password": "...", "account_name": "Main"}

    Returns:
        201 with the user, its account and a JWT pair
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        operation_id="register",
        summary="Register user and open account",
        tags=["Auth"],
        request=RegisterSerializer,
        responses={201: UserSerializer},
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = AuthService.register(
            email=serializer.validated_data["email"],
            password=serializer.validated_data["password"],
            account_name=serializer.validated_data["account_name"],
        )

        refresh = RefreshToken.for_user(user)
        data = UserSerializer(user).data
        data["tokens"] = {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
        }
        return Response(data, status=status.HTTP_201_CREATED)


class CurrentUserView(APIView):
    """
    Current user and the ledger account it operates.

    GET /api/v1/auth/me/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_current_user",
        summary="Get current user",
        tags=["Auth"],
        responses={200: UserSerializer},
    )
    def get(self, request):
        return Response(UserSerializer(request.user).data)
