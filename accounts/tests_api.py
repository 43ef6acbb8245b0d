"""API tests for account endpoints."""

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from django_project.test_constants import TEST_APP_USER_ID, TEST_PASSWORD

User = get_user_model()


class UserProfileAPITests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(
            username="testuser",
            email="test@example.com",
            password=TEST_PASSWORD,
            first_name="Test",
            last_name="User",
        )
        cls.other_user = User.objects.create_user(
            username="otheruser",
            email="other@example.com",
            password=TEST_PASSWORD,
            revenuecat_customer_id="$RCAnonymousID:taken",
        )

    def setUp(self):
        self.client = APIClient()
        self.token = Token.objects.create(user=self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.token.key}")

    def test_get_profile(self):
        response = self.client.get("/api/v1/account/profile/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], self.user.pk)
        self.assertEqual(response.data["email"], "test@example.com")
        self.assertEqual(response.data["first_name"], "Test")
        self.assertFalse(response.data["is_premium"])
        self.assertIsNone(response.data["revenuecat_customer_id"])

    def test_get_profile_unauthenticated(self):
        self.client.credentials()
        response = self.client.get("/api/v1/account/profile/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_first_name(self):
        response = self.client.patch(
            "/api/v1/account/profile/",
            {"first_name": "Updated"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, "Updated")

    def test_update_email_duplicate(self):
        response = self.client.patch(
            "/api/v1/account/profile/",
            {"email": "other@example.com"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.data)

    def test_update_email_same_as_current(self):
        """User can keep their current email."""
        response = self.client.patch(
            "/api/v1/account/profile/",
            {"email": "test@example.com"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_link_revenuecat_customer(self):
        response = self.client.patch(
            "/api/v1/account/profile/",
            {"revenuecat_customer_id": TEST_APP_USER_ID},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.revenuecat_customer_id, TEST_APP_USER_ID)

    def test_revenuecat_customer_linked_elsewhere(self):
        response = self.client.patch(
            "/api/v1/account/profile/",
            {"revenuecat_customer_id": "$RCAnonymousID:taken"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("revenuecat_customer_id", response.data)

    def test_blank_revenuecat_customer_unlinks(self):
        self.user.revenuecat_customer_id = TEST_APP_USER_ID
        self.user.save()
        response = self.client.patch(
            "/api/v1/account/profile/",
            {"revenuecat_customer_id": ""},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertIsNone(self.user.revenuecat_customer_id)

    def test_is_premium_is_read_only(self):
        response = self.client.patch(
            "/api/v1/account/profile/",
            {"is_premium": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_premium)


class AuthTokenAPITests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(
            username="tokenuser", email="token@example.com", password=TEST_PASSWORD
        )

    def test_obtain_token(self):
        response = APIClient().post(
            "/api/v1/auth/token/",
            {"username": "tokenuser", "password": TEST_PASSWORD},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["token"], Token.objects.get(user=self.user).key)

    def test_obtain_token_wrong_password(self):
        response = APIClient().post(
            "/api/v1/auth/token/",
            {"username": "tokenuser", "password": "wrongpassword"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
