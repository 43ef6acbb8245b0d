"""REST API for baby profiles.

Endpoints (prefix /api/v1/):
    GET    baby-profiles/me/          caller's profiles
    POST   baby-profiles/             create a profile for the caller
    GET    baby-profiles/{id}/        retrieve (owner only)
    PUT    baby-profiles/{id}/        update provided fields (owner only)
    PATCH  baby-profiles/{id}/        same as PUT
    DELETE baby-profiles/{id}/        delete profile and its activities (owner only)

`{id}` is the profile's opaque document id.
"""

import logging

from django.db import transaction
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .api_permissions import IsProfileOwner
from .datetime_utils import now_iso
from .models import BabyProfile

logger = logging.getLogger(__name__)

MAX_PREMATURE_WEEKS = 20


class BabyProfileSerializer(serializers.ModelSerializer):
    """BabyProfile serializer (owner is implied by the request, never exposed)."""

    documentId = serializers.CharField(source="document_id", read_only=True)
    birthdate = serializers.DateField(
        error_messages={"invalid": "Invalid birthdate format. Use YYYY-MM-DD."}
    )
    premature_weeks = serializers.IntegerField(required=False, allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = BabyProfile
        fields = [
            "id",
            "documentId",
            "name",
            "birthdate",
            "avatar_url",
            "is_premature",
            "premature_weeks",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id", "documentId", "createdAt", "updatedAt"]

    def validate(self, attrs):
        """Require 1-20 premature weeks for premature babies, clear them otherwise.

        For partial updates the stored values fill in whatever the request
        leaves out, so toggling only `is_premature` is checked against the
        weeks already on file.
        """
        instance = self.instance
        is_premature = attrs.get(
            "is_premature", instance.is_premature if instance else False
        )

        if not is_premature:
            attrs["premature_weeks"] = None
            return attrs

        weeks = attrs.get(
            "premature_weeks", instance.premature_weeks if instance else None
        )
        if weeks is None or weeks < 1 or weeks > MAX_PREMATURE_WEEKS:
            raise serializers.ValidationError(
                {
                    "premature_weeks": (
                        f"premature_weeks must be between 1 and {MAX_PREMATURE_WEEKS} "
                        "when is_premature is true."
                    )
                }
            )
        return attrs


class BabyProfileViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """ViewSet for BabyProfile CRUD.

    Other users' profiles are looked up like any other so the ownership check
    can answer 403 rather than 404.
    """

    serializer_class = BabyProfileSerializer
    permission_classes = [IsAuthenticated, IsProfileOwner]
    lookup_field = "document_id"
    lookup_url_kwarg = "pk"
    queryset = BabyProfile.objects.select_related("user")

    @action(detail=False, methods=["get"])
    def me(self, request):
        """List the current user's baby profiles."""
        profiles = BabyProfile.objects.filter(user=request.user)
        serializer = self.get_serializer(profiles, many=True)
        return Response({"data": serializer.data, "meta": {"count": len(serializer.data)}})

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        profile = serializer.save(user=request.user)
        logger.info("Baby profile created for user %s: %s", request.user.id, profile.name)
        return Response(
            {"data": serializer.data, "meta": {"createdAt": now_iso()}},
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance)
        return Response({"data": serializer.data})

    def update(self, request, *args, **kwargs):
        """Update only the provided fields (PUT behaves like PATCH)."""
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(
            "Baby profile %s updated by user %s", instance.document_id, request.user.id
        )
        return Response({"data": serializer.data, "meta": {"updatedAt": now_iso()}})

    def destroy(self, request, *args, **kwargs):
        """Delete the profile together with all of its activities."""
        instance = self.get_object()
        document_id = instance.document_id

        with transaction.atomic():
            activities_deleted, _ = instance.activities.all().delete()
            instance.delete()

        logger.info(
            "Baby profile %s and %d activities deleted by user %s",
            document_id,
            activities_deleted,
            request.user.id,
        )
        return Response(
            {
                "data": None,
                "meta": {
                    "deletedAt": now_iso(),
                    "activitiesDeleted": activities_deleted,
                },
            }
        )
