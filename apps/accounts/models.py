from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
import uuid


class UserRole(models.TextChoices):
    FRANCHISOR = 'FRANCHISOR', 'Franchisor'
    FRANCHISEE = 'FRANCHISEE', 'Franchisee'
    ESTABLISHMENT = 'ESTABLISHMENT', 'Establishment'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.FRANCHISOR)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Account acting for one organisation of the franchise network.

    The role decides which organisation link is meaningful: franchisor
    accounts point at a Franchisor, franchisee accounts at a Franchisee and
    establishment accounts at an Establishment.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    full_name = models.CharField(max_length=150, blank=True)
    role = models.CharField(max_length=20, choices=UserRole.choices)

    franchisor = models.ForeignKey(
        'franchises.Franchisor',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='users',
    )
    franchisee = models.ForeignKey(
        'franchises.Franchisee',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='users',
    )
    establishment = models.ForeignKey(
        'franchises.Establishment',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='users',
    )

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['role'], name='users_role_0ace22_idx'),
            models.Index(fields=['created_at'], name='users_created_6541e9_idx'),
        ]

    def __str__(self):
        return self.email

    def get_display_name(self):
        """Return full name or email prefix."""
        return self.full_name or self.email.split('@')[0]
