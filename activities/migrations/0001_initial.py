import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import babies.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("babies", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="BabyActivity",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "document_id",
                    models.CharField(
                        default=babies.models.generate_document_id,
                        editable=False,
                        max_length=24,
                        unique=True,
                    ),
                ),
                ("local_id", models.CharField(max_length=255)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("feeding", "Feeding"),
                            ("sleep", "Sleep"),
                            ("pee", "Pee"),
                            ("poop", "Poop"),
                            ("weight", "Weight"),
                            ("solid", "Solid food"),
                        ],
                        max_length=10,
                    ),
                ),
                ("timestamp", models.DateTimeField(db_index=True)),
                ("data", models.JSONField(blank=True, default=dict)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("client_updated_at", models.DateTimeField(blank=True, null=True)),
                ("synced_at", models.DateTimeField(blank=True, null=True)),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        db_index=True, default=django.utils.timezone.now
                    ),
                ),
                (
                    "baby_profile",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="activities",
                        to="babies.babyprofile",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="baby_activities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "baby activities",
                "ordering": ["-timestamp"],
                "indexes": [
                    models.Index(
                        fields=["baby_profile", "updated_at"],
                        name="activity_profile_updated_idx",
                    ),
                    models.Index(
                        fields=["baby_profile", "-timestamp"],
                        name="activity_profile_ts_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "local_id"),
                        name="unique_activity_local_id_per_user",
                    )
                ],
            },
        ),
    ]
