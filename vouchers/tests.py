from datetime import timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from django_project.test_constants import TEST_APP_USER_ID, TEST_PASSWORD

from .models import Voucher


class VoucherValidationTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = get_user_model().objects.create_user(
            username="holder",
            password=TEST_PASSWORD,
            revenuecat_customer_id=TEST_APP_USER_ID,
        )

    def make_voucher(self, **overrides):
        fields = {
            "code": "BV-TEST-000001",
            "expiry_date": timezone.now() + timedelta(days=30),
        }
        fields.update(overrides)
        return Voucher.objects.create(**fields)

    def test_fresh_voucher_is_redeemable(self):
        voucher = self.make_voucher()
        self.assertIsNone(voucher.validation_error())
        self.assertEqual(voucher.type, Voucher.Type.FREE_TRIAL)
        self.assertEqual(voucher.max_uses, 1)
        self.assertEqual(voucher.current_uses, 0)

    def test_expired(self):
        voucher = self.make_voucher(expiry_date=timezone.now() - timedelta(minutes=1))
        self.assertEqual(voucher.validation_error(), "Voucher has expired")

    def test_used(self):
        voucher = self.make_voucher(is_used=True)
        self.assertEqual(voucher.validation_error(), "Voucher has already been used")

    def test_max_uses_reached(self):
        voucher = self.make_voucher(max_uses=2, current_uses=2)
        self.assertEqual(
            voucher.validation_error(), "Voucher has reached maximum uses"
        )

    def test_expiry_checked_before_use(self):
        voucher = self.make_voucher(
            is_used=True, expiry_date=timezone.now() - timedelta(days=1)
        )
        self.assertEqual(voucher.validation_error(), "Voucher has expired")

    def test_assigned_to_other_customer(self):
        voucher = self.make_voucher(assigned_to=self.user)
        self.assertEqual(
            voucher.validation_error("$RCAnonymousID:someoneelse"),
            "This voucher is assigned to a different user",
        )

    def test_assigned_to_redeeming_customer(self):
        voucher = self.make_voucher(assigned_to=self.user)
        self.assertIsNone(voucher.validation_error(TEST_APP_USER_ID))

    def test_assignment_ignored_without_customer(self):
        voucher = self.make_voucher(assigned_to=self.user)
        self.assertIsNone(voucher.validation_error())
