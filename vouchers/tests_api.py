"""API tests for voucher redemption, validation and generation."""

import re
from datetime import timedelta
from unittest.mock import patch

import httpx
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from django_project.test_constants import TEST_APP_USER_ID, TEST_PASSWORD

from .models import Voucher
from .revenuecat import RevenueCatClient

API_REDEEM_URL = "/api/v1/voucher-actions/redeem/"
API_VALIDATE_URL = "/api/v1/voucher-actions/validate/"
API_GENERATE_URL = "/api/v1/voucher-actions/generate/"

VOUCHER_CODE = "BV-LZ3K9Q1A-4F7QXA"


def fake_revenuecat(status_code=200, seen=None, text=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if text is not None:
            return httpx.Response(status_code, text=text)
        return httpx.Response(status_code, json={"subscriber": {}})

    return RevenueCatClient(
        api_key="rc-secret",
        base_url="https://rc.test/v1",
        entitlement="premium",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


class VoucherAPITestBase(APITestCase):
    @classmethod
    def setUpTestData(cls):
        user_model = get_user_model()
        cls.customer = user_model.objects.create_user(
            username="customer",
            email="customer@example.com",
            password=TEST_PASSWORD,
            revenuecat_customer_id=TEST_APP_USER_ID,
        )
        cls.staff = user_model.objects.create_user(
            username="staff",
            email="staff@example.com",
            password=TEST_PASSWORD,
            is_staff=True,
        )

    def make_voucher(self, **overrides):
        fields = {
            "code": VOUCHER_CODE,
            "duration_months": 3,
            "expiry_date": timezone.now() + timedelta(days=30),
        }
        fields.update(overrides)
        return Voucher.objects.create(**fields)


class RedeemVoucherTests(VoucherAPITestBase):
    def redeem(self, client, code=VOUCHER_CODE, app_user_id=TEST_APP_USER_ID):
        with patch.object(RevenueCatClient, "from_settings", return_value=client):
            return self.client.post(
                API_REDEEM_URL,
                {"voucherCode": code, "appUserId": app_user_id},
                format="json",
            )

    def test_redeem_grants_premium(self):
        voucher = self.make_voucher()
        seen = []
        response = self.redeem(fake_revenuecat(seen=seen))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["data"]["duration_months"], 3)
        self.assertEqual(response.data["data"]["voucher_type"], "free_trial")
        self.assertTrue(response.data["data"]["activated_at"].endswith("Z"))
        self.assertEqual(len(seen), 1)

        voucher.refresh_from_db()
        self.assertTrue(voucher.is_used)
        self.assertEqual(voucher.current_uses, 1)
        self.assertIsNotNone(voucher.redeemed_at)

        self.customer.refresh_from_db()
        self.assertTrue(self.customer.is_premium)

    def test_redeem_without_linked_user_still_succeeds(self):
        self.make_voucher()
        response = self.redeem(fake_revenuecat(), app_user_id="$RCAnonymousID:nobody")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertFalse(self.customer.is_premium)

    def test_redeem_twice_rejected(self):
        self.make_voucher()
        self.redeem(fake_revenuecat())
        response = self.redeem(fake_revenuecat())
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Voucher has already been used")

    def test_unknown_code(self):
        response = self.redeem(fake_revenuecat(), code="BV-NOPE")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["detail"], "Voucher not found")

    def test_expired_voucher_not_granted(self):
        self.make_voucher(expiry_date=timezone.now() - timedelta(days=1))
        seen = []
        response = self.redeem(fake_revenuecat(seen=seen))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Voucher has expired")
        self.assertEqual(seen, [])

    def test_voucher_assigned_to_someone_else(self):
        self.make_voucher(assigned_to=self.customer)
        response = self.redeem(fake_revenuecat(), app_user_id="$RCAnonymousID:other")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data["detail"], "This voucher is assigned to a different user"
        )

    def test_provider_failure_leaves_voucher_unused(self):
        voucher = self.make_voucher()
        response = self.redeem(fake_revenuecat(status_code=500))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(
            response.data["detail"],
            "Failed to activate premium subscription. Please try again.",
        )
        voucher.refresh_from_db()
        self.assertFalse(voucher.is_used)
        self.assertEqual(voucher.current_uses, 0)
        self.customer.refresh_from_db()
        self.assertFalse(self.customer.is_premium)

    def test_unreadable_provider_reply_leaves_voucher_unused(self):
        voucher = self.make_voucher()
        response = self.redeem(fake_revenuecat(text="<html>maintenance</html>"))

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        voucher.refresh_from_db()
        self.assertFalse(voucher.is_used)
        self.assertEqual(voucher.current_uses, 0)

    def test_missing_fields(self):
        response = self.client.post(API_REDEEM_URL, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("voucherCode", response.data)
        self.assertIn("appUserId", response.data)


class ValidateVoucherTests(VoucherAPITestBase):
    def test_valid_voucher(self):
        self.make_voucher()
        response = self.client.post(
            API_VALIDATE_URL, {"voucherCode": VOUCHER_CODE}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["valid"])
        self.assertIsNone(response.data["error"])
        self.assertEqual(response.data["data"]["type"], "free_trial")
        self.assertEqual(response.data["data"]["duration_months"], 3)

    def test_used_voucher(self):
        self.make_voucher(is_used=True)
        response = self.client.post(
            API_VALIDATE_URL, {"voucherCode": VOUCHER_CODE}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["valid"])
        self.assertEqual(response.data["error"], "Voucher has already been used")
        self.assertIsNone(response.data["data"])

    def test_unknown_voucher(self):
        response = self.client.post(
            API_VALIDATE_URL, {"voucherCode": "BV-NOPE"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["valid"])
        self.assertEqual(response.data["error"], "Voucher not found")

    def test_validate_does_not_redeem(self):
        voucher = self.make_voucher()
        self.client.post(API_VALIDATE_URL, {"voucherCode": VOUCHER_CODE}, format="json")
        voucher.refresh_from_db()
        self.assertFalse(voucher.is_used)


class GenerateVouchersTests(VoucherAPITestBase):
    def setUp(self):
        self.staff_token = Token.objects.create(user=self.staff)
        self.customer_token = Token.objects.create(user=self.customer)

    def test_generate_requires_staff(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.customer_token.key}")
        response = self.client.post(API_GENERATE_URL, {"count": 2}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_generate_requires_auth(self):
        response = self.client.post(API_GENERATE_URL, {"count": 2}, format="json")
        self.assertIn(
            response.status_code,
            (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN),
        )
        self.assertFalse(Voucher.objects.exists())

    def test_generate_defaults(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.staff_token.key}")
        response = self.client.post(API_GENERATE_URL, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(len(response.data["vouchers"]), 1)

        voucher = Voucher.objects.get()
        self.assertEqual(voucher.type, Voucher.Type.FREE_TRIAL)
        self.assertEqual(voucher.duration_months, 1)
        self.assertEqual(voucher.max_uses, 1)
        self.assertRegex(voucher.code, r"^BV-[0-9A-Z]+-[0-9A-Z]{6}$")
        self.assertAlmostEqual(
            voucher.expiry_date,
            timezone.now() + timedelta(days=30),
            delta=timedelta(minutes=1),
        )

    def test_generate_batch(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.staff_token.key}")
        response = self.client.post(
            API_GENERATE_URL,
            {
                "count": 5,
                "type": "discount",
                "duration_months": 12,
                "expiry_days": 90,
                "prefix": "gift",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        codes = response.data["vouchers"]
        self.assertEqual(len(set(codes)), 5)
        self.assertTrue(all(re.match(r"^GIFT-", code) for code in codes))
        self.assertEqual(
            Voucher.objects.filter(type="discount", duration_months=12).count(), 5
        )

    def test_generate_count_out_of_range(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.staff_token.key}")
        response = self.client.post(API_GENERATE_URL, {"count": 101}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            str(response.data["count"][0]), "Count must be between 1 and 100."
        )
