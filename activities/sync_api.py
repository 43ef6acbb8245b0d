"""Sync API for offline-first clients.

Endpoints (prefix /api/v1/):
    GET  baby-activities/sync/         pull changes since a cursor
    POST baby-activities/sync/         push a batch of client changes
    POST baby-activities/bulk-delete/  hard delete by local id

Pull request:
    ?baby_profile_id=<documentId>&since=<ISO>&limit=500&offset=0

Pull response (200):
    {
        "data": [...activities, soft-deleted ones included...],
        "meta": {
            "pagination": {"offset": 0, "limit": 500, "total": 3, "hasMore": false},
            "serverTime": "2025-02-17T10:00:00.000Z",
            "lastSyncedAt": "2025-02-17T09:59:30.000Z"
        }
    }

Push request:
    {
        "baby_profile_id": "<documentId>",
        "activities": [
            {
                "local_id": "a1b2",
                "type": "feeding",
                "timestamp": "2025-02-17T09:30:00Z",
                "data": {"amountMl": 120, "feedingType": "bottle"},
                "deleted_at": null,
                "client_updated_at": "2025-02-17T09:31:00Z"
            }
        ]
    }

Push response (200):
    {"success": true, "created": 1, "updated": 0, "softDeleted": 0, "syncedAt": "..."}

Push response (400) when any entry is invalid, nothing is written:
    {
        "detail": "Validation failed",
        "errors": [{"index": 0, "local_id": "a1b2", "errors": {"data": {...}}}]
    }
"""

import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from babies.datetime_utils import isoformat_utc, now_iso, parse_iso_timestamp
from babies.mixins import OwnedProfileMixin
from django_project.throttles import SyncPushThrottle

from .serializers import (
    ActivityEntrySerializer,
    BabyActivitySerializer,
    BulkDeleteSerializer,
    SyncPushSerializer,
)
from .sync import (
    CURSOR_OVERLAP,
    MAX_PULL_LIMIT,
    apply_push,
    hard_delete_by_local_ids,
    pull_activities,
)

logger = logging.getLogger(__name__)


def _parse_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class ActivitySyncView(OwnedProfileMixin, APIView):
    """Pull (GET) and push (POST) activity changes for one baby profile."""

    permission_classes = [IsAuthenticated]

    def get_throttles(self):
        """Apply the push throttle to POST only; pulls use the default limits."""
        throttles = super().get_throttles()
        if self.request.method == "POST":
            throttles.append(SyncPushThrottle())
        return throttles

    def get(self, request, *args, **kwargs):
        """Pull activities updated after `since`, oldest change first."""
        params = request.query_params
        baby_profile_id = params.get("baby_profile_id")
        if not baby_profile_id:
            return Response(
                {"detail": "baby_profile_id is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        limit = _parse_int(params.get("limit"), MAX_PULL_LIMIT) or MAX_PULL_LIMIT
        limit = min(MAX_PULL_LIMIT, max(1, limit))
        offset = max(0, _parse_int(params.get("offset"), 0))

        profile = self.get_baby_profile(baby_profile_id)

        since = None
        if params.get("since"):
            since = parse_iso_timestamp(params["since"])
            if since is None:
                return Response(
                    {"detail": "Invalid since timestamp format. Use ISO format."},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        now = timezone.now()
        server_time = isoformat_utc(now)
        last_synced_at = isoformat_utc(now - CURSOR_OVERLAP)
        activities, total = pull_activities(
            request.user, profile, since=since, limit=limit, offset=offset
        )
        serializer = BabyActivitySerializer(activities, many=True)

        return Response(
            {
                "data": serializer.data,
                "meta": {
                    "pagination": {
                        "offset": offset,
                        "limit": limit,
                        "total": total,
                        "hasMore": offset + len(activities) < total,
                    },
                    "serverTime": server_time,
                    "lastSyncedAt": last_synced_at,
                },
            }
        )

    def post(self, request, *args, **kwargs):
        """Upsert a batch of client entries atomically."""
        request_serializer = SyncPushSerializer(data=request.data)
        if not request_serializer.is_valid():
            return Response(request_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        entries = request_serializer.validated_data["activities"]
        if not entries:
            return Response(
                {
                    "success": True,
                    "created": 0,
                    "updated": 0,
                    "softDeleted": 0,
                    "syncedAt": now_iso(),
                }
            )

        profile = self.get_baby_profile(
            request_serializer.validated_data["baby_profile_id"],
            denied_message="You are not authorized to sync to this baby profile",
        )

        # Validate every entry before writing anything
        entry_errors = []
        validated_entries = []
        for index, entry in enumerate(entries):
            serializer = ActivityEntrySerializer(data=entry)
            if serializer.is_valid():
                validated_entries.append(serializer.validated_data)
            else:
                entry_errors.append(
                    {
                        "index": index,
                        "local_id": entry.get("local_id") if isinstance(entry, dict) else None,
                        "errors": serializer.errors,
                    }
                )

        if entry_errors:
            return Response(
                {"detail": "Validation failed", "errors": entry_errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            result = apply_push(request.user, profile, validated_entries)
        except Exception as e:
            # Transaction rolled back automatically
            logger.exception("Error during activity sync for user %s", request.user.id)
            return Response(
                {
                    "detail": "Failed to sync activities. Transaction rolled back.",
                    "error": str(e),
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(
            {
                "success": True,
                "created": result["created"],
                "updated": result["updated"],
                "softDeleted": result["softDeleted"],
                "syncedAt": isoformat_utc(result["synced_at"]),
            }
        )


class BulkDeleteView(APIView):
    """Hard delete the caller's activities by local id (max 100 per request)."""

    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        serializer = BulkDeleteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        local_ids = serializer.validated_data["local_ids"]
        if not local_ids:
            return Response({"success": True, "deleted": 0})

        deleted, not_found = hard_delete_by_local_ids(request.user, local_ids)

        response_data = {"success": True, "deleted": deleted}
        if not_found:
            response_data["notFound"] = not_found
        return Response(response_data)
