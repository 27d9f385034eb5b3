"""
Manager for the email-identified User model.

Related files:
    - models.py: User
    - services.py: AuthService.register (user + ledger account)
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Creates users keyed by email and looks them up case-insensitively.

    Registration rejects emails that differ only by case, so login matches
    the stored address with ``iexact`` as well.

    Usage:
        user = User.objects.create_user(
            email="user@example.com",
            password="securepassword",
            account=account,
        )
        admin = User.objects.create_superuser("admin@example.com", "pw")
    """

    use_in_migrations = True

    def get_by_natural_key(self, username):
        return self.get(**{f"{self.model.USERNAME_FIELD}__iexact": username})

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("Users must have an email address")

        user = self.model(email=self.normalize_email(email), **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        """
        Create a regular user; without a password the user cannot log in.

        Pass ``account`` to bind the user to the ledger account it operates.
        """
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create an admin user. Superusers usually have no ledger account.

        Raises:
            ValueError: If is_staff or is_superuser is overridden to False
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        for flag in ("is_staff", "is_superuser"):
            if extra_fields.get(flag) is not True:
                raise ValueError(f"Superuser must have {flag}=True.")

        return self._create_user(email, password, **extra_fields)
