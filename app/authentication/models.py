"""
User model for the authentication app.

The authenticated user is the only source of "my account" identity: every
balance operation on the caller's behalf uses ``request.user.account_id``
and never an account id taken from the request body.

Related files:
    - managers.py: UserManager for email-based creation
    - permissions.py: HasLedgerAccount
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        account: The ledger account this user operates (null for staff-only users)
        is_active: Whether the user can log in
        is_staff: Whether the user can access Django admin and account CRUD
        date_joined: When the user was created

    Usage:
        user = User.objects.create_user(
            email='user@example.com',
            password='securepassword',
            account=account,
        )
        user.account_id  # id used by every "my account" endpoint
    """

    email = models.EmailField(
        unique=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    account = models.OneToOneField(
        "ledger.Account",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="user",
        help_text="Ledger account operated by this user",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user can log in. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user was created",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        """Return the user's email as string representation."""
        return self.email
