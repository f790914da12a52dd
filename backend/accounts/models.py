from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Marketplace user. Clippers earn from tracked views; admins run campaigns,
    review submissions and process payouts.
    """

    class Role(models.TextChoices):
        CLIPPER = "CLIPPER", "Clipper"
        CREATOR = "CREATOR", "Creator"
        ADMIN = "ADMIN", "Admin"

    email = models.EmailField(unique=True)
    is_active = models.BooleanField(default=True)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.CLIPPER, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    # Profile
    display_name = models.CharField(max_length=100, blank=True, default="", verbose_name="Display Name")
    bio = models.TextField(max_length=500, blank=True, null=True, verbose_name="Biography")
    avatar = models.URLField(blank=True, null=True, verbose_name="Avatar URL")
    paypal_email = models.EmailField(blank=True, null=True, verbose_name="PayPal Email")
    # Withdrawable balance and lifetime tracked views
    total_earnings = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_views = models.BigIntegerField(default=0)

    USERNAME_FIELD = 'username'
    REQUIRED_FIELDS = ['email']

    class Meta:
        db_table = 'user'
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    def __str__(self):
        return self.username

    @property
    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN or self.is_superuser
