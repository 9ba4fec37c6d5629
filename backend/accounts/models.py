"""
Accounts app models.

Defines the ``user_role`` / ``user_status`` enumerations and the custom
``User`` model.  Users log in with their e-mail address, which is unique
case-insensitively.  The role drives every authorization decision in the
complaint workflow: only ``authority`` and ``admin`` users may triage
complaints, and only ``authority`` users may be assigned to handle one.
"""

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.db.models.functions import Lower

from core.models import TimeStampedModel


class UserRole(models.TextChoices):
    """The ``user_role`` domain."""

    CITIZEN = "citizen", "Citizen"
    AUTHORITY = "authority", "Authority"
    ADMIN = "admin", "Admin"


class UserStatus(models.TextChoices):
    """The ``user_status`` domain."""

    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    SUSPENDED = "suspended", "Suspended"


#: Roles allowed to change complaint status and assign authorities.
STAFF_ROLES: frozenset[str] = frozenset({UserRole.AUTHORITY, UserRole.ADMIN})


class UserManager(BaseUserManager):
    """Manager keyed on the (lower-cased) e-mail address."""

    use_in_migrations = True

    @classmethod
    def normalize_email(cls, email):
        return (email or "").strip().lower()

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("Users must have an e-mail address.")
        user = self.model(email=self.normalize_email(email), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("role", UserRole.ADMIN)
        extra_fields.setdefault("status", UserStatus.ACTIVE)
        extra_fields.setdefault("is_superuser", True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin, TimeStampedModel):
    """
    Person interacting with the system: a citizen filing complaints, an
    authority handling them, or an admin running the platform.

    ``is_active`` is derived from ``status`` so that suspended accounts
    cannot authenticate; pending accounts may still log in and file
    complaints.
    """

    full_name = models.CharField(
        max_length=120,
        verbose_name="Full Name",
    )
    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CITIZEN,
        db_index=True,
        verbose_name="Role",
    )
    status = models.CharField(
        max_length=20,
        choices=UserStatus.choices,
        default=UserStatus.PENDING,
        db_index=True,
        verbose_name="Status",
    )

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = ["full_name"]

    class Meta:
        db_table = "users"
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(Lower("email"), name="uq_users_email_ci"),
        ]

    def __str__(self):
        return f"{self.email} ({self.role})"

    def save(self, *args, **kwargs):
        self.email = UserManager.normalize_email(self.email)
        super().save(*args, **kwargs)

    # ── Role predicates ──────────────────────────────────────────────

    @property
    def is_active(self) -> bool:
        return self.status != UserStatus.SUSPENDED

    @property
    def is_staff(self) -> bool:
        """Django admin site access."""
        return self.role == UserRole.ADMIN

    @property
    def is_authority(self) -> bool:
        return self.role == UserRole.AUTHORITY

    @property
    def can_triage(self) -> bool:
        """True for roles that may change status and assign complaints."""
        return self.role in STAFF_ROLES
