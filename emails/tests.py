"""Tests for email services and the auth template bootstrap."""

from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.template import TemplateDoesNotExist
from django.test import TestCase, override_settings

from django_project.test_constants import TEST_PASSWORD

from .bootstrap import CONFIRMATION_SUBJECT, RESET_PASSWORD_SUBJECT, sync_email_templates
from .models import AuthEmailTemplate
from .services import send_auth_email, send_registration_email, send_test_email

VERIFY_LINK = "https://babyvision.app/verify?token=abc"


@override_settings(
    DEFAULT_FROM_EMAIL="hello@babyvision.app",
    EMAIL_DEFAULT_REPLY_TO="support@babyvision.app",
)
class EmailServiceTests(TestCase):
    def test_registration_email(self):
        send_registration_email(
            to="parent@example.com", first_name="Sam", verification_link=VERIFY_LINK
        )

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ["parent@example.com"])
        self.assertEqual(message.from_email, "hello@babyvision.app")
        self.assertEqual(message.reply_to, ["support@babyvision.app"])
        self.assertEqual(
            message.subject, "Welcome to BabyVision, Sam — Please verify your email"
        )
        self.assertIn(VERIFY_LINK, message.body)
        html, mimetype = message.alternatives[0]
        self.assertEqual(mimetype, "text/html")
        self.assertIn("Welcome to BabyVision, Sam!", html)
        self.assertIn("parent@example.com", html)

    def test_registration_email_defaults_name(self):
        send_registration_email(
            to="parent@example.com", first_name="", verification_link=VERIFY_LINK
        )
        self.assertIn("Parent", mail.outbox[0].subject)

    @override_settings(APP_STORE_URL="https://apps.example/babyvision")
    def test_registration_email_store_links(self):
        send_registration_email(
            to="parent@example.com", first_name="Sam", verification_link=VERIFY_LINK
        )
        self.assertIn("https://apps.example/babyvision", mail.outbox[0].body)

    def test_test_email(self):
        send_test_email("admin@example.com")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "BabyVision Email Test ✅")
        self.assertIn("Resend", mail.outbox[0].alternatives[0][0])


class SendAuthEmailTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = get_user_model().objects.create_user(
            username="sammy", email="sammy@example.com", password=TEST_PASSWORD
        )

    def test_confirmation_uses_stored_template(self):
        sync_email_templates()
        send_auth_email(
            AuthEmailTemplate.Kind.EMAIL_CONFIRMATION,
            self.user,
            "https://api.babyvision.app/confirm",
            "tok123",
        )

        message = mail.outbox[0]
        self.assertEqual(message.to, ["sammy@example.com"])
        self.assertEqual(message.subject, CONFIRMATION_SUBJECT)
        html = message.alternatives[0][0]
        self.assertIn("Welcome to BabyVision, sammy!", html)
        self.assertIn("https://api.babyvision.app/confirm?confirmation=tok123", html)
        self.assertNotIn("{{", html)

    def test_reset_password_link(self):
        sync_email_templates()
        send_auth_email(
            AuthEmailTemplate.Kind.RESET_PASSWORD,
            self.user,
            "https://babyvision.app/reset",
            "code42",
        )
        html = mail.outbox[0].alternatives[0][0]
        self.assertIn("https://babyvision.app/reset?code=code42", html)

    def test_stored_sender_and_reply_to(self):
        AuthEmailTemplate.objects.update_or_create(
            kind=AuthEmailTemplate.Kind.RESET_PASSWORD,
            defaults={
                "from_email": "noreply@babyvision.app",
                "response_email": "help@babyvision.app",
                "subject": "Reset for {{ user.username }}",
                "message": "<a href='{{ url }}?code={{ token }}'>reset</a>",
            },
        )
        send_auth_email(
            AuthEmailTemplate.Kind.RESET_PASSWORD, self.user, "https://x.test", "c"
        )
        message = mail.outbox[0]
        self.assertEqual(message.from_email, "noreply@babyvision.app")
        self.assertEqual(message.reply_to, ["help@babyvision.app"])
        self.assertEqual(message.subject, "Reset for sammy")
        self.assertEqual(message.body, "reset")


@override_settings(
    DEFAULT_FROM_EMAIL="hello@babyvision.app",
    EMAIL_DEFAULT_REPLY_TO="support@babyvision.app",
)
class SyncEmailTemplatesTests(TestCase):
    def setUp(self):
        # Rows are also written by the post_migrate hook
        AuthEmailTemplate.objects.all().delete()

    def test_creates_both_templates(self):
        updated = sync_email_templates()
        self.assertEqual(
            sorted(updated),
            [
                AuthEmailTemplate.Kind.EMAIL_CONFIRMATION,
                AuthEmailTemplate.Kind.RESET_PASSWORD,
            ],
        )

        confirmation = AuthEmailTemplate.objects.get(
            kind=AuthEmailTemplate.Kind.EMAIL_CONFIRMATION
        )
        self.assertEqual(confirmation.subject, CONFIRMATION_SUBJECT)
        self.assertEqual(confirmation.from_email, "hello@babyvision.app")
        self.assertEqual(confirmation.response_email, "support@babyvision.app")
        self.assertIn("{{ user.username }}", confirmation.message)
        self.assertIn("{{ user.email }}", confirmation.message)
        self.assertIn("{{ url }}?confirmation={{ token }}", confirmation.message)

        reset = AuthEmailTemplate.objects.get(kind=AuthEmailTemplate.Kind.RESET_PASSWORD)
        self.assertEqual(reset.subject, RESET_PASSWORD_SUBJECT)
        self.assertIn("{{ url }}?code={{ token }}", reset.message)

    def test_second_run_changes_nothing(self):
        sync_email_templates()
        self.assertEqual(sync_email_templates(), [])

    def test_placeholder_sender_replaced(self):
        AuthEmailTemplate.objects.create(
            kind=AuthEmailTemplate.Kind.RESET_PASSWORD,
            from_email="no-reply@example.com",
            response_email="",
        )
        sync_email_templates()
        reset = AuthEmailTemplate.objects.get(kind=AuthEmailTemplate.Kind.RESET_PASSWORD)
        self.assertEqual(reset.from_email, "hello@babyvision.app")
        self.assertEqual(reset.response_email, "support@babyvision.app")

    def test_configured_sender_kept(self):
        AuthEmailTemplate.objects.create(
            kind=AuthEmailTemplate.Kind.RESET_PASSWORD,
            from_email="team@babyvision.app",
            response_email="team@babyvision.app",
        )
        sync_email_templates()
        reset = AuthEmailTemplate.objects.get(kind=AuthEmailTemplate.Kind.RESET_PASSWORD)
        self.assertEqual(reset.from_email, "team@babyvision.app")

    def test_edited_message_is_replaced(self):
        sync_email_templates()
        AuthEmailTemplate.objects.filter(
            kind=AuthEmailTemplate.Kind.EMAIL_CONFIRMATION
        ).update(message="old", subject="old subject")

        self.assertEqual(
            sync_email_templates(), [AuthEmailTemplate.Kind.EMAIL_CONFIRMATION]
        )
        confirmation = AuthEmailTemplate.objects.get(
            kind=AuthEmailTemplate.Kind.EMAIL_CONFIRMATION
        )
        self.assertEqual(confirmation.subject, CONFIRMATION_SUBJECT)
        self.assertNotEqual(confirmation.message, "old")

    def test_missing_template_file_skipped(self):
        AuthEmailTemplate.objects.create(
            kind=AuthEmailTemplate.Kind.RESET_PASSWORD,
            from_email="team@babyvision.app",
            message="keep me",
        )
        with patch(
            "emails.bootstrap.render_to_string",
            side_effect=TemplateDoesNotExist("emails/reset_password.html"),
        ), self.assertLogs("emails.bootstrap", level="WARNING"):
            sync_email_templates()

        reset = AuthEmailTemplate.objects.get(kind=AuthEmailTemplate.Kind.RESET_PASSWORD)
        self.assertEqual(reset.message, "keep me")

    def test_management_command(self):
        out = StringIO()
        call_command("sync_email_templates", stdout=out)
        self.assertIn("Updated email templates", out.getvalue())

        out = StringIO()
        call_command("sync_email_templates", stdout=out)
        self.assertIn("already up to date", out.getvalue())
