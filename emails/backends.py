"""Django email backend delivering through the Resend HTTP API.

Usage in settings.py:
    EMAIL_BACKEND = "emails.backends.ResendEmailBackend"
    RESEND_API_KEY = "re_..."
"""

import logging

import httpx
from django.conf import settings
from django.core.mail.backends.base import BaseEmailBackend

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when the email provider rejects or never receives a message."""


class ResendEmailBackend(BaseEmailBackend):
    """Send each EmailMessage as one POST to Resend's /emails endpoint.

    HTML alternatives (EmailMultiAlternatives) go out as `html`, the plain
    body as `text`.
    """

    def __init__(self, fail_silently=False, api_key=None, http_client=None, **kwargs):
        super().__init__(fail_silently=fail_silently, **kwargs)
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.base_url = settings.RESEND_API_URL.rstrip("/")
        self.timeout = settings.EMAIL_TIMEOUT
        self.http_client = http_client
        self._owns_client = http_client is None

    def open(self):
        if self.http_client is None:
            self.http_client = httpx.Client()
            return True
        return False

    def close(self):
        if self.http_client is not None and self._owns_client:
            self.http_client.close()
            self.http_client = None

    def send_messages(self, email_messages):
        if not email_messages:
            return 0

        new_connection = self.open()
        sent = 0
        try:
            for message in email_messages:
                try:
                    self._send(message)
                except EmailDeliveryError:
                    if not self.fail_silently:
                        raise
                    logger.exception("Failed to send email to %s", message.to)
                else:
                    sent += 1
        finally:
            if new_connection:
                self.close()
        return sent

    def _send(self, message):
        if not self.api_key:
            raise EmailDeliveryError("Resend API key not configured")

        try:
            response = self.http_client.post(
                f"{self.base_url}/emails",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=self._build_payload(message),
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Resend request failed: {e}") from e

        if response.is_error:
            raise EmailDeliveryError(
                f"Resend API error {response.status_code}: {response.text}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise EmailDeliveryError(f"Resend returned invalid JSON: {e}") from e

    def _build_payload(self, message):
        payload = {
            "from": message.from_email or settings.DEFAULT_FROM_EMAIL,
            "to": list(message.to),
            "subject": message.subject,
        }
        if message.cc:
            payload["cc"] = list(message.cc)
        if message.bcc:
            payload["bcc"] = list(message.bcc)
        if message.reply_to:
            payload["reply_to"] = list(message.reply_to)

        if message.content_subtype == "html":
            payload["html"] = message.body
        else:
            payload["text"] = message.body

        for content, mimetype in getattr(message, "alternatives", []):
            if mimetype == "text/html":
                payload["html"] = content
        return payload
