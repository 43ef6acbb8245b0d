"""REST API for browsing and removing baby activities.

Endpoints (prefix /api/v1/):
    GET    baby-activities/?baby_profile_id=...   list live activities
    GET    baby-activities/{id}/                  retrieve one activity
    DELETE baby-activities/{id}/                  hard delete one activity

List query parameters:
    - baby_profile_id: (required) document id of the baby profile
    - type: filter by activity type (unknown types are ignored)
    - from / to: inclusive bounds on `timestamp` (unparseable values are ignored)
    - include_deleted: "true" to include soft-deleted rows
    - page / pageSize: 1-based page number and page size (max 100)

Clients that sync should delete through a soft-delete push instead of
DELETE, otherwise other devices never learn about the deletion.
"""

import logging
import math

from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from babies.api_permissions import IsRecordOwner
from babies.datetime_utils import now_iso, parse_iso_timestamp
from babies.mixins import OwnedProfileMixin

from .models import BabyActivity
from .serializers import BabyActivitySerializer

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100


def _positive_int(value, default):
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


class BabyActivityViewSet(
    OwnedProfileMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """ViewSet for reading and hard-deleting activity records."""

    serializer_class = BabyActivitySerializer
    permission_classes = [IsAuthenticated, IsRecordOwner]
    lookup_field = "document_id"
    lookup_url_kwarg = "pk"
    queryset = BabyActivity.objects.select_related("baby_profile")

    def list(self, request, *args, **kwargs):
        params = request.query_params
        baby_profile_id = params.get("baby_profile_id")
        if not baby_profile_id:
            return Response(
                {"detail": "baby_profile_id is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        profile = self.get_baby_profile(baby_profile_id)
        queryset = self._filter_activities(
            BabyActivity.objects.filter(baby_profile=profile, user=request.user)
            .select_related("baby_profile")
        )

        page = _positive_int(params.get("page"), 1)
        page_size = min(MAX_PAGE_SIZE, _positive_int(params.get("pageSize"), DEFAULT_PAGE_SIZE))
        total = queryset.count()
        start = (page - 1) * page_size
        activities = queryset.order_by("-timestamp", "-id")[start : start + page_size]

        serializer = self.get_serializer(activities, many=True)
        return Response(
            {
                "data": serializer.data,
                "meta": {
                    "pagination": {
                        "page": page,
                        "pageSize": page_size,
                        "pageCount": math.ceil(total / page_size),
                        "total": total,
                    }
                },
            }
        )

    def _filter_activities(self, queryset):
        """Apply the optional type, date range and soft-delete filters."""
        params = self.request.query_params

        if params.get("include_deleted") != "true":
            queryset = queryset.filter(deleted_at__isnull=True)

        activity_type = params.get("type")
        if activity_type in BabyActivity.Type.values:
            queryset = queryset.filter(type=activity_type)

        date_from = parse_iso_timestamp(params.get("from"))
        if date_from:
            queryset = queryset.filter(timestamp__gte=date_from)

        date_to = parse_iso_timestamp(params.get("to"))
        if date_to:
            queryset = queryset.filter(timestamp__lte=date_to)

        return queryset

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance)
        return Response({"data": serializer.data})

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        document_id = instance.document_id
        instance.delete()
        logger.info("Activity %s hard-deleted by user %s", document_id, request.user.id)
        return Response({"data": None, "meta": {"deletedAt": now_iso()}})
