"""
DRF serializers for the authentication app.

Related files:
    - services.py: AuthService.register
    - views.py: RegisterView
"""

from __future__ import annotations

from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from authentication.models import User
from ledger.serializers import AccountSerializer


class RegisterSerializer(serializers.Serializer):
    """
    Registration request.

    Fields:
        email: Login email, unique (case-insensitive)
        password: Checked against AUTH_PASSWORD_VALIDATORS
        account_name: Display label of the ledger account to open
    """

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={"input_type": "password"})
    account_name = serializers.CharField(max_length=255)

    def validate_email(self, value: str) -> str:
        value = User.objects.normalize_email(value)
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate_password(self, value: str) -> str:
        validate_password(value)
        return value


class UserSerializer(serializers.ModelSerializer):
    """Current user with the ledger account it operates."""

    account = AccountSerializer(read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "account", "date_joined"]
        read_only_fields = fields
