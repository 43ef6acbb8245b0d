"""Push/pull reconciliation between offline clients and the server copy.

Rows are matched by `(user, local_id)`. The server's `updated_at` is the only
clock that matters for ordering: every push stamps the rows it writes with a
single server time, and pulls return rows updated after the client's cursor.
Conflicts resolve as last writer wins.
"""

import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from .models import BabyActivity

logger = logging.getLogger(__name__)

MAX_PULL_LIMIT = 500
MAX_PUSH_BATCH = 500

# A push stamps its rows before it commits, so a pull cursor trails the server
# clock by this much. Rows in the overlap are sent again; clients upsert them
# by local_id.
CURSOR_OVERLAP = timedelta(seconds=30)


def pull_activities(user, profile, since=None, limit=MAX_PULL_LIMIT, offset=0):
    """Return one page of activities changed after `since`.

    Soft-deleted rows are included so deletions propagate to other devices.

    Args:
        user: Owner of the activities
        profile: BabyProfile the activities belong to
        since: Aware datetime cursor; None returns everything
        limit: Page size (1-500)
        offset: Rows to skip

    Returns:
        tuple[list[BabyActivity], int]: The page, and the total number of
        rows matching the cursor
    """
    queryset = BabyActivity.objects.filter(user=user, baby_profile=profile)
    if since is not None:
        queryset = queryset.filter(updated_at__gt=since)

    total = queryset.count()
    page = list(
        queryset.select_related("baby_profile").order_by("updated_at", "id")[
            offset : offset + limit
        ]
    )
    return page, total


def apply_push(user, profile, entries):
    """Upsert validated client entries in a single transaction.

    Each entry updates the row with the same `local_id` for this user, or
    inserts a new row under `profile`. If anything fails the whole batch is
    rolled back and the exception propagates.

    Args:
        user: Owner of the activities
        profile: BabyProfile new rows are attached to
        entries: Validated data from ActivityEntrySerializer

    Returns:
        dict: created, updated and softDeleted counts plus the server
        `synced_at` time stamped on every written row
    """
    synced_at = timezone.now()
    created = updated = soft_deleted = 0

    with transaction.atomic():
        for entry in entries:
            activity = BabyActivity.objects.filter(
                user=user, local_id=entry["local_id"]
            ).first()

            if activity is None:
                _insert(user, profile, entry, synced_at)
                created += 1
            else:
                _update(activity, entry, synced_at)
                updated += 1

            if entry.get("deleted_at"):
                soft_deleted += 1

    logger.info(
        "Sync completed for user %s: %d created, %d updated, %d soft-deleted",
        user.id,
        created,
        updated,
        soft_deleted,
    )
    return {
        "created": created,
        "updated": updated,
        "softDeleted": soft_deleted,
        "synced_at": synced_at,
    }


def _insert(user, profile, entry, synced_at):
    return BabyActivity.objects.create(
        user=user,
        baby_profile=profile,
        local_id=entry["local_id"],
        type=entry["type"],
        timestamp=entry["timestamp"],
        data=entry.get("data") or {},
        deleted_at=entry.get("deleted_at"),
        client_updated_at=entry.get("client_updated_at"),
        synced_at=synced_at,
        created_at=synced_at,
        updated_at=synced_at,
    )


def _update(activity, entry, synced_at):
    activity.type = entry["type"]
    activity.timestamp = entry["timestamp"]
    activity.synced_at = synced_at
    activity.updated_at = synced_at
    fields = ["type", "timestamp", "synced_at", "updated_at"]

    # A delete without a payload keeps the last known data
    if entry.get("data") is not None:
        activity.data = entry["data"]
        fields.append("data")

    # Explicit null restores a soft-deleted row; an absent key leaves it alone
    if "deleted_at" in entry:
        activity.deleted_at = entry["deleted_at"]
        fields.append("deleted_at")

    if entry.get("client_updated_at"):
        activity.client_updated_at = entry["client_updated_at"]
        fields.append("client_updated_at")

    activity.save(update_fields=fields)
    return activity


def hard_delete_by_local_ids(user, local_ids):
    """Permanently remove this user's rows with the given local ids.

    Returns:
        tuple[int, list[str]]: Rows deleted, and the requested ids that
        matched nothing (in request order)
    """
    with transaction.atomic():
        queryset = BabyActivity.objects.filter(user=user, local_id__in=local_ids)
        found = set(queryset.values_list("local_id", flat=True))
        deleted, _ = queryset.delete()

    not_found = [local_id for local_id in local_ids if local_id not in found]
    logger.info(
        "Bulk delete completed for user %s: %d deleted, %d not found",
        user.id,
        deleted,
        len(not_found),
    )
    return deleted, not_found
