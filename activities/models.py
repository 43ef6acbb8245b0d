from django.conf import settings
from django.db import models
from django.utils import timezone

from babies.models import DOCUMENT_ID_LENGTH, BabyProfile, generate_document_id


class BabyActivity(models.Model):
    """Activity log entry kept in sync with offline-first clients.

    Rows are reconciled by the client-assigned `local_id`, which is unique per
    owning user: pushing the same local_id again updates the existing row.
    Deletions made on a device travel as `deleted_at` (soft delete) so other
    devices learn about them on their next pull.

    Attributes:
        document_id (CharField): Opaque server identifier
        local_id (CharField): Client identifier, stable across devices
        user (ForeignKey): Owning user
        baby_profile (ForeignKey): Profile the activity belongs to
        type (CharField): feeding, sleep, pee, poop, weight or solid
        timestamp (DateTimeField): When the activity happened
        data (JSONField): Type-specific payload (camelCase keys from the app)
        deleted_at (DateTimeField): Soft-delete marker; null while live
        client_updated_at (DateTimeField): Client's own modification time
        synced_at (DateTimeField): Server time of the push that last wrote it
        created_at (DateTimeField): Server insert time
        updated_at (DateTimeField): Server update time, the pull cursor
    """

    class Type(models.TextChoices):
        FEEDING = "feeding", "Feeding"
        SLEEP = "sleep", "Sleep"
        PEE = "pee", "Pee"
        POOP = "poop", "Poop"
        WEIGHT = "weight", "Weight"
        SOLID = "solid", "Solid food"

    document_id = models.CharField(
        max_length=DOCUMENT_ID_LENGTH,
        unique=True,
        default=generate_document_id,
        editable=False,
    )
    local_id = models.CharField(max_length=255)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="baby_activities",
    )
    baby_profile = models.ForeignKey(
        BabyProfile,
        on_delete=models.CASCADE,
        related_name="activities",
    )
    type = models.CharField(max_length=10, choices=Type.choices)
    timestamp = models.DateTimeField(db_index=True)
    data = models.JSONField(default=dict, blank=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    client_updated_at = models.DateTimeField(null=True, blank=True)
    synced_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        verbose_name_plural = "baby activities"
        ordering = ["-timestamp"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "local_id"],
                name="unique_activity_local_id_per_user",
            ),
        ]
        indexes = [
            models.Index(
                fields=["baby_profile", "updated_at"],
                name="activity_profile_updated_idx",
            ),
            models.Index(
                fields=["baby_profile", "-timestamp"],
                name="activity_profile_ts_idx",
            ),
        ]

    def __str__(self):
        return f"{self.baby_profile.name} - {self.get_type_display()} ({self.local_id})"

    @property
    def is_deleted(self):
        return self.deleted_at is not None
