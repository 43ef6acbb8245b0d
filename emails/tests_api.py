"""API tests for the staff email endpoints."""

from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from django_project.test_constants import TEST_PASSWORD

from .backends import EmailDeliveryError

API_SEND_TEST_URL = "/api/v1/email/send-test/"
API_SEND_REGISTRATION_URL = "/api/v1/email/send-registration/"


class EmailAPITests(APITestCase):
    @classmethod
    def setUpTestData(cls):
        user_model = get_user_model()
        cls.staff = user_model.objects.create_user(
            username="staff", email="staff@example.com", password=TEST_PASSWORD, is_staff=True
        )
        cls.parent = user_model.objects.create_user(
            username="parent", email="parent@example.com", password=TEST_PASSWORD
        )

    def setUp(self):
        self.staff_token = Token.objects.create(user=self.staff)
        self.parent_token = Token.objects.create(user=self.parent)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.staff_token.key}")

    def test_send_test_email(self):
        response = self.client.post(
            API_SEND_TEST_URL, {"to": "admin@example.com"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(
            response.data["message"], "Test email sent successfully to admin@example.com"
        )
        self.assertEqual(mail.outbox[0].to, ["admin@example.com"])

    def test_send_test_requires_address(self):
        response = self.client.post(API_SEND_TEST_URL, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(str(response.data["to"][0]), "Email address is required")
        self.assertEqual(mail.outbox, [])

    def test_send_registration(self):
        response = self.client.post(
            API_SEND_REGISTRATION_URL,
            {
                "to": "parent@example.com",
                "firstName": "Sam",
                "verificationLink": "https://babyvision.app/verify?token=abc",
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertIn("Sam", mail.outbox[0].subject)

    def test_send_registration_missing_fields(self):
        response = self.client.post(
            API_SEND_REGISTRATION_URL, {"to": "parent@example.com"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("firstName", response.data)
        self.assertIn("verificationLink", response.data)

    def test_provider_failure(self):
        with patch(
            "emails.services.send_test_email",
            side_effect=EmailDeliveryError("Resend API error 401"),
        ):
            response = self.client.post(
                API_SEND_TEST_URL, {"to": "admin@example.com"}, format="json"
            )
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(
            response.data, {"success": False, "error": "Resend API error 401"}
        )

    def test_non_staff_forbidden(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.parent_token.key}")
        response = self.client.post(
            API_SEND_TEST_URL, {"to": "admin@example.com"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_requires_auth(self):
        self.client.credentials()
        response = self.client.post(
            API_SEND_TEST_URL, {"to": "admin@example.com"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
