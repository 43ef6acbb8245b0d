from django.conf import settings
from django.db import models
from django.utils import timezone


class Voucher(models.Model):
    """Redeemable code granting a premium entitlement.

    A voucher only moves forward: once redeemed it stays used.

    Attributes:
        code (CharField): Unique code typed by the user (e.g. BV-LZ3K9-4F7QXA)
        type (CharField): free_trial or discount
        duration_months (PositiveSmallIntegerField): Length of the granted entitlement
        is_used (BooleanField): Set on redemption, never cleared
        expiry_date (DateTimeField): Voucher cannot be redeemed after this time
        assigned_to (ForeignKey): Optional user the voucher is reserved for
        redeemed_at (DateTimeField): When the voucher was redeemed
        max_uses (PositiveIntegerField): Redemption limit
        current_uses (PositiveIntegerField): Redemptions so far
    """

    class Type(models.TextChoices):
        FREE_TRIAL = "free_trial", "Free trial"
        DISCOUNT = "discount", "Discount"

    code = models.CharField(max_length=64, unique=True)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.FREE_TRIAL)
    duration_months = models.PositiveSmallIntegerField(default=1)
    is_used = models.BooleanField(default=False)
    expiry_date = models.DateTimeField()
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_vouchers",
    )
    redeemed_at = models.DateTimeField(null=True, blank=True)
    max_uses = models.PositiveIntegerField(default=1)
    current_uses = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.code

    def validation_error(self, app_user_id=None):
        """Return why this voucher cannot be redeemed, or None if it can.

        Args:
            app_user_id: RevenueCat customer id of the redeemer; when given,
                vouchers assigned to someone else are rejected
        """
        if self.expiry_date < timezone.now():
            return "Voucher has expired"
        if self.is_used:
            return "Voucher has already been used"
        if self.current_uses >= self.max_uses:
            return "Voucher has reached maximum uses"
        if self.assigned_to_id and app_user_id:
            if self.assigned_to.revenuecat_customer_id != app_user_id:
                return "This voucher is assigned to a different user"
        return None
