from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """Application user.

    Attributes:
        revenuecat_customer_id (CharField): RevenueCat app user id for this
            account; vouchers assigned to a user are matched against it
        is_premium (BooleanField): Set once a voucher grants premium access
    """

    revenuecat_customer_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="RevenueCat app user id (appUserId) for this account.",
    )
    is_premium = models.BooleanField(default=False)
