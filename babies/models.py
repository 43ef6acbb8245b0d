from __future__ import annotations

import secrets
import string
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

if TYPE_CHECKING:
    from accounts.models import CustomUser

DOCUMENT_ID_LENGTH = 24
DOCUMENT_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_document_id() -> str:
    """Return a random opaque identifier (24 lowercase alphanumerics)."""
    return "".join(
        secrets.choice(DOCUMENT_ID_ALPHABET) for _ in range(DOCUMENT_ID_LENGTH)
    )


class BabyProfile(models.Model):
    """Baby profile owned by a single user.

    Owns BabyActivity records; deleting a profile removes its activities.

    Attributes:
        document_id (CharField): Opaque public identifier used in URLs
        user (ForeignKey): The owning user
        name (CharField): Baby's name (max 100 chars)
        birthdate (DateField): ISO format date (YYYY-MM-DD)
        avatar_url (URLField): Optional avatar image URL
        is_premature (BooleanField): Whether the baby was born premature
        premature_weeks (PositiveSmallIntegerField): Weeks early (1-20), only
            set when is_premature is true
        created_at (DateTimeField): When profile was created
        updated_at (DateTimeField): When profile was last modified
    """

    document_id = models.CharField(
        max_length=DOCUMENT_ID_LENGTH,
        unique=True,
        default=generate_document_id,
        editable=False,
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="baby_profiles",
    )
    name = models.CharField(max_length=100)
    birthdate = models.DateField()
    avatar_url = models.URLField(max_length=500, null=True, blank=True)
    is_premature = models.BooleanField(default=False)
    premature_weeks = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(20)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="babies_user_created_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    def is_owned_by(self, user: CustomUser) -> bool:
        """Check whether user owns this profile."""
        return user.is_authenticated and self.user_id == user.id
