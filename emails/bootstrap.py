"""Write the bundled auth email templates into AuthEmailTemplate rows.

Runs after every `migrate` (see EmailsConfig.ready) and on demand through
`manage.py sync_email_templates`.
"""

import logging

from django.conf import settings
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string
from django.utils import timezone

from .models import AuthEmailTemplate

logger = logging.getLogger(__name__)

# Senders on these domains were never configured for production
PLACEHOLDER_SENDER_DOMAINS = ("localhost", "example.com", "example.org")

CONFIRMATION_SUBJECT = "Welcome to BabyVision — Please verify your email"
RESET_PASSWORD_SUBJECT = "Reset Your Password — BabyVision"


def _render_bundled(template_name, context):
    try:
        return render_to_string(template_name, context)
    except TemplateDoesNotExist:
        logger.warning("Email template %s not found, skipping", template_name)
        return ""


def render_confirmation_template():
    """Registration confirmation body, with auth-flow variables left in place."""
    return _render_bundled(
        "emails/registration_confirmation.html",
        {
            "first_name": "{{ user.username }}",
            "email": "{{ user.email }}",
            "verification_link": "{{ url }}?confirmation={{ token }}",
            "year": timezone.now().year,
            "app_store_link": settings.APP_STORE_URL,
            "play_store_link": settings.PLAY_STORE_URL,
            "unsubscribe_link": "#",
        },
    )


def render_reset_password_template():
    """Password reset body, with auth-flow variables left in place."""
    return _render_bundled(
        "emails/reset_password.html",
        {
            "reset_link": "{{ url }}?code={{ token }}",
            "year": timezone.now().year,
        },
    )


def _is_placeholder_sender(address):
    if not address:
        return True
    domain = address.rsplit("@", 1)[-1].strip(" >").lower()
    return domain in PLACEHOLDER_SENDER_DOMAINS


def _apply(stored, message, subject):
    changed = False

    if _is_placeholder_sender(stored.from_email):
        stored.from_email = settings.DEFAULT_FROM_EMAIL
        stored.response_email = settings.EMAIL_DEFAULT_REPLY_TO
        changed = True

    if message and stored.message != message:
        stored.message = message
        stored.subject = subject
        changed = True
        logger.info("Updated %s email template", stored.kind)

    return changed


def sync_email_templates():
    """Bring the stored auth emails in line with the bundled templates.

    Returns:
        list: Kinds whose rows were written
    """
    bundled = {
        AuthEmailTemplate.Kind.EMAIL_CONFIRMATION.value: (
            render_confirmation_template(),
            CONFIRMATION_SUBJECT,
        ),
        AuthEmailTemplate.Kind.RESET_PASSWORD.value: (
            render_reset_password_template(),
            RESET_PASSWORD_SUBJECT,
        ),
    }

    updated = []
    for kind, (message, subject) in bundled.items():
        stored, created = AuthEmailTemplate.objects.get_or_create(kind=kind)
        if _apply(stored, message, subject) or created:
            stored.save()
            updated.append(kind)

    if updated:
        logger.info("Email settings and templates updated: %s", ", ".join(updated))
    return updated
