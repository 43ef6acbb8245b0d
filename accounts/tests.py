from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase

from django_project.test_constants import TEST_APP_USER_ID, TEST_PASSWORD


class CustomUserTests(TestCase):
    def test_create_user(self):
        user_model = get_user_model()
        user = user_model.objects.create_user(
            username="will", email="will@email.com", password=TEST_PASSWORD
        )
        self.assertEqual(user.username, "will")
        self.assertEqual(user.email, "will@email.com")
        self.assertTrue(user.is_active)
        self.assertFalse(user.is_staff)
        self.assertFalse(user.is_superuser)

    def test_create_superuser(self):
        user_model = get_user_model()
        admin_user = user_model.objects.create_superuser(
            username="superadmin", email="superadmin@email.com", password=TEST_PASSWORD
        )
        self.assertEqual(admin_user.username, "superadmin")
        self.assertTrue(admin_user.is_active)
        self.assertTrue(admin_user.is_staff)
        self.assertTrue(admin_user.is_superuser)

    def test_new_user_is_not_premium(self):
        user = get_user_model().objects.create_user(
            username="free", password=TEST_PASSWORD
        )
        self.assertFalse(user.is_premium)
        self.assertIsNone(user.revenuecat_customer_id)

    def test_users_without_revenuecat_id_do_not_collide(self):
        user_model = get_user_model()
        user_model.objects.create_user(username="a", password=TEST_PASSWORD)
        user_model.objects.create_user(username="b", password=TEST_PASSWORD)
        self.assertEqual(
            user_model.objects.filter(revenuecat_customer_id__isnull=True).count(), 2
        )

    def test_revenuecat_id_is_unique(self):
        user_model = get_user_model()
        user_model.objects.create_user(
            username="a", password=TEST_PASSWORD, revenuecat_customer_id=TEST_APP_USER_ID
        )
        with self.assertRaises(IntegrityError):
            user_model.objects.create_user(
                username="b",
                password=TEST_PASSWORD,
                revenuecat_customer_id=TEST_APP_USER_ID,
            )
