"""Transactional emails sent through Django's mail API.

Usage:
    from emails.services import send_registration_email

    send_registration_email(
        to="user@example.com",
        first_name="Sam",
        verification_link="https://...",
    )
"""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template import Context, Template
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import strip_tags

from .backends import EmailDeliveryError
from .models import AuthEmailTemplate

logger = logging.getLogger(__name__)

TEST_EMAIL_SUBJECT = "BabyVision Email Test ✅"
TEST_EMAIL_TEXT = "BabyVision email configuration is working correctly!"


def registration_context(
    first_name,
    email,
    verification_link,
    app_store_link=None,
    play_store_link=None,
    unsubscribe_link=None,
):
    """Template context for the registration confirmation email."""
    return {
        "first_name": first_name or "Parent",
        "email": email,
        "verification_link": verification_link,
        "app_store_link": app_store_link or settings.APP_STORE_URL,
        "play_store_link": play_store_link or settings.PLAY_STORE_URL,
        "unsubscribe_link": unsubscribe_link or "#",
        "year": timezone.now().year,
    }


def _send(to, subject, text, html, from_email=None, reply_to=None):
    message = EmailMultiAlternatives(
        subject=subject,
        body=text,
        from_email=from_email or settings.DEFAULT_FROM_EMAIL,
        to=[to],
        reply_to=[reply_to or settings.EMAIL_DEFAULT_REPLY_TO],
    )
    message.attach_alternative(html, "text/html")
    message.send()


def send_registration_email(
    to,
    first_name,
    verification_link,
    app_store_link=None,
    play_store_link=None,
    unsubscribe_link=None,
):
    """Send the registration confirmation email with a verification link.

    Raises:
        EmailDeliveryError: The provider rejected the message
    """
    context = registration_context(
        first_name,
        to,
        verification_link,
        app_store_link=app_store_link,
        play_store_link=play_store_link,
        unsubscribe_link=unsubscribe_link,
    )
    try:
        _send(
            to,
            f"Welcome to BabyVision, {context['first_name']} — Please verify your email",
            render_to_string("emails/registration_confirmation.txt", context),
            render_to_string("emails/registration_confirmation.html", context),
        )
    except EmailDeliveryError as e:
        logger.error("Failed to send registration email to %s: %s", to, e)
        raise

    logger.info("Registration email sent successfully to %s", to)


def send_test_email(to):
    """Send a short message confirming the email configuration works."""
    html = render_to_string(
        "emails/test_email.html", {"sent_at": timezone.now().isoformat()}
    )
    try:
        _send(to, TEST_EMAIL_SUBJECT, TEST_EMAIL_TEXT, html)
    except EmailDeliveryError as e:
        logger.error("Failed to send test email to %s: %s", to, e)
        raise

    logger.info("Test email sent successfully to %s", to)


def send_auth_email(kind, user, url, token):
    """Render a stored authentication email and send it to `user`.

    Args:
        kind: AuthEmailTemplate.Kind value
        user: Recipient; available as `user` in the templates
        url: Base link of the confirmation or reset page
        token: Confirmation token or reset code appended to `url`

    Raises:
        AuthEmailTemplate.DoesNotExist: No template stored for `kind`
        EmailDeliveryError: The provider rejected the message
    """
    stored = AuthEmailTemplate.objects.get(kind=kind)
    context = Context({"user": user, "url": url, "token": token})
    html = Template(stored.message).render(context)
    subject = Template(stored.subject).render(context)

    _send(
        user.email,
        subject,
        strip_tags(html),
        html,
        from_email=stored.from_email,
        reply_to=stored.response_email,
    )
    logger.info("Sent %s email to user %s", kind, user.pk)
