"""REST API for voucher redemption backed by RevenueCat.

Endpoints (prefix /api/v1/):
    POST voucher-actions/redeem/    redeem a code and grant premium (anonymous)
    POST voucher-actions/validate/  check a code without redeeming (anonymous)
    POST voucher-actions/generate/  create a batch of codes (staff only)
"""

import logging
import secrets
import string
import time
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response

from babies.datetime_utils import isoformat_utc
from django_project.throttles import VoucherRedeemThrottle

from .models import Voucher
from .revenuecat import RevenueCatClient, RevenueCatError

logger = logging.getLogger(__name__)

User = get_user_model()

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def _base36(number):
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_voucher_code(prefix="BV"):
    """Build a code like BV-LZ3K9Q1A-4F7QXA (millisecond clock + random part)."""
    timestamp = _base36(int(time.time() * 1000))
    random_part = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(6))
    return f"{prefix}-{timestamp}-{random_part}".upper()


# --- Serializers ---


class RedeemVoucherSerializer(serializers.Serializer):
    voucherCode = serializers.CharField(max_length=64)
    appUserId = serializers.CharField(max_length=255)


class ValidateVoucherSerializer(serializers.Serializer):
    voucherCode = serializers.CharField(max_length=64)


class GenerateVouchersSerializer(serializers.Serializer):
    count = serializers.IntegerField(
        default=1,
        min_value=1,
        max_value=100,
        error_messages={
            "min_value": "Count must be between 1 and 100.",
            "max_value": "Count must be between 1 and 100.",
        },
    )
    type = serializers.ChoiceField(
        choices=Voucher.Type.choices, default=Voucher.Type.FREE_TRIAL.value
    )
    duration_months = serializers.IntegerField(default=1, min_value=1, max_value=120)
    expiry_days = serializers.IntegerField(default=30, min_value=1, max_value=3650)
    prefix = serializers.RegexField(
        r"^[A-Za-z0-9]{1,16}$",
        default="BV",
        error_messages={"invalid": "Prefix must be 1-16 letters or digits."},
    )


# --- ViewSet ---


class VoucherActionsViewSet(viewsets.ViewSet):
    """Voucher redemption and administration actions."""

    permission_classes = [AllowAny]

    def get_throttles(self):
        """Throttle the anonymous endpoints by client IP."""
        throttles = super().get_throttles()
        if self.action in ["redeem", "validate_code"]:
            throttles.append(VoucherRedeemThrottle())
        return throttles

    @action(detail=False, methods=["post"])
    def redeem(self, request):
        """Redeem a voucher and grant premium access via RevenueCat.

        The voucher is only marked used after RevenueCat accepted the grant,
        so a failed call leaves it redeemable.
        """
        serializer = RedeemVoucherSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        code = serializer.validated_data["voucherCode"]
        app_user_id = serializer.validated_data["appUserId"]

        voucher = Voucher.objects.select_related("assigned_to").filter(code=code).first()
        if voucher is None:
            return Response(
                {"detail": "Voucher not found"}, status=status.HTTP_404_NOT_FOUND
            )

        error = voucher.validation_error(app_user_id)
        if error:
            return Response({"detail": error}, status=status.HTTP_400_BAD_REQUEST)

        client = RevenueCatClient.from_settings()
        try:
            client.grant_promotional_entitlement(app_user_id, voucher.duration_months)
        except RevenueCatError as e:
            logger.error("RevenueCat grant failed for voucher %s: %s", code, e)
            return Response(
                {
                    "detail": "Failed to activate premium subscription. Please try again."
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        finally:
            client.close()

        activated_at = timezone.now()
        with transaction.atomic():
            Voucher.objects.filter(pk=voucher.pk).update(
                is_used=True,
                redeemed_at=activated_at,
                current_uses=F("current_uses") + 1,
            )
            premium_users = User.objects.filter(
                revenuecat_customer_id=app_user_id
            ).update(is_premium=True)

        if not premium_users:
            logger.warning(
                "No user linked to RevenueCat customer %s; premium flag not set",
                app_user_id,
            )
        logger.info("Voucher %s redeemed by user %s", code, app_user_id)

        return Response(
            {
                "success": True,
                "message": "Voucher redeemed successfully! Premium access has been activated.",
                "data": {
                    "duration_months": voucher.duration_months,
                    "voucher_type": voucher.type,
                    "activated_at": isoformat_utc(activated_at),
                },
            }
        )

    @action(detail=False, methods=["post"], url_path="validate", url_name="validate")
    def validate_code(self, request):
        """Check whether a voucher could be redeemed, without redeeming it."""
        serializer = ValidateVoucherSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        voucher = Voucher.objects.filter(
            code=serializer.validated_data["voucherCode"]
        ).first()
        if voucher is None:
            return Response({"valid": False, "error": "Voucher not found", "data": None})

        error = voucher.validation_error()
        return Response(
            {
                "valid": error is None,
                "error": error,
                "data": None
                if error
                else {
                    "type": voucher.type,
                    "duration_months": voucher.duration_months,
                    "expiry_date": isoformat_utc(voucher.expiry_date),
                },
            }
        )

    @action(detail=False, methods=["post"], permission_classes=[IsAdminUser])
    def generate(self, request):
        """Generate a batch of single-use voucher codes (staff only)."""
        serializer = GenerateVouchersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        expiry_date = timezone.now() + timedelta(days=params["expiry_days"])
        vouchers = [
            Voucher(
                code=generate_voucher_code(params["prefix"]),
                type=params["type"],
                duration_months=params["duration_months"],
                expiry_date=expiry_date,
                max_uses=1,
                current_uses=0,
            )
            for _ in range(params["count"])
        ]
        with transaction.atomic():
            Voucher.objects.bulk_create(vouchers)

        logger.info("User %s generated %d voucher(s)", request.user.id, len(vouchers))
        return Response(
            {
                "success": True,
                "message": f"Generated {len(vouchers)} voucher(s) successfully",
                "vouchers": [voucher.code for voucher in vouchers],
                "expiry_date": isoformat_utc(expiry_date),
            }
        )
