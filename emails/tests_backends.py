"""Tests for the Resend email backend using httpx.MockTransport."""

import json

import httpx
from django.core.mail import EmailMessage, EmailMultiAlternatives, get_connection
from django.test import SimpleTestCase, override_settings

from .backends import EmailDeliveryError

BACKEND = "emails.backends.ResendEmailBackend"


@override_settings(
    RESEND_API_KEY="re_test",
    RESEND_API_URL="https://resend.test",
    DEFAULT_FROM_EMAIL="hello@babyvision.app",
)
class ResendEmailBackendTests(SimpleTestCase):
    def connection(self, handler, **kwargs):
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        self.addCleanup(http_client.close)
        return get_connection(BACKEND, http_client=http_client, **kwargs)

    def test_sends_html_and_text(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "email-1"})

        message = EmailMultiAlternatives(
            subject="Hello",
            body="Plain body",
            to=["parent@example.com"],
            reply_to=["support@babyvision.app"],
            connection=self.connection(handler),
        )
        message.attach_alternative("<p>HTML body</p>", "text/html")

        self.assertEqual(message.send(), 1)
        request = seen[0]
        self.assertEqual(str(request.url), "https://resend.test/emails")
        self.assertEqual(request.headers["Authorization"], "Bearer re_test")
        self.assertEqual(
            json.loads(request.content),
            {
                "from": "hello@babyvision.app",
                "to": ["parent@example.com"],
                "subject": "Hello",
                "reply_to": ["support@babyvision.app"],
                "text": "Plain body",
                "html": "<p>HTML body</p>",
            },
        )

    def test_html_only_message(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"id": "email-2"})

        message = EmailMessage(
            subject="Hi",
            body="<b>bold</b>",
            to=["parent@example.com"],
            connection=self.connection(handler),
        )
        message.content_subtype = "html"
        message.send()
        self.assertEqual(seen[0]["html"], "<b>bold</b>")
        self.assertNotIn("text", seen[0])

    def test_provider_error_raises(self):
        connection = self.connection(lambda request: httpx.Response(422, text="bad from"))
        message = EmailMessage("Hi", "Body", to=["parent@example.com"], connection=connection)
        with self.assertRaisesRegex(EmailDeliveryError, "422"):
            message.send()

    def test_non_json_success_raises(self):
        connection = self.connection(lambda request: httpx.Response(200, text="OK"))
        message = EmailMessage("Hi", "Body", to=["parent@example.com"], connection=connection)
        with self.assertRaisesRegex(EmailDeliveryError, "invalid JSON"):
            message.send()

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        message = EmailMessage(
            "Hi", "Body", to=["parent@example.com"], connection=self.connection(handler)
        )
        with self.assertRaises(EmailDeliveryError):
            message.send()

    def test_fail_silently_counts_only_delivered(self):
        responses = iter([httpx.Response(200, json={}), httpx.Response(500)])
        connection = self.connection(lambda request: next(responses), fail_silently=True)
        messages = [
            EmailMessage("One", "Body", to=["a@example.com"]),
            EmailMessage("Two", "Body", to=["b@example.com"]),
        ]
        with self.assertLogs("emails.backends", level="ERROR"):
            self.assertEqual(connection.send_messages(messages), 1)

    @override_settings(RESEND_API_KEY="")
    def test_missing_api_key(self):
        seen = []
        message = EmailMessage(
            "Hi",
            "Body",
            to=["parent@example.com"],
            connection=self.connection(lambda request: seen.append(request)),
        )
        with self.assertRaises(EmailDeliveryError):
            message.send()
        self.assertEqual(seen, [])
