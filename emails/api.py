"""REST API for sending transactional emails (staff only).

Endpoints (prefix /api/v1/):
    POST email/send-test/          {"to"}
    POST email/send-registration/  {"to", "firstName", "verificationLink"}
"""

import logging

from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from . import services
from .backends import EmailDeliveryError

logger = logging.getLogger(__name__)


class SendTestEmailSerializer(serializers.Serializer):
    to = serializers.EmailField(
        error_messages={"required": "Email address is required"}
    )


class SendRegistrationEmailSerializer(serializers.Serializer):
    to = serializers.EmailField()
    firstName = serializers.CharField(max_length=150)
    verificationLink = serializers.URLField(max_length=2000)


def _failure(error):
    return Response(
        {"success": False, "error": str(error)},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class EmailViewSet(viewsets.ViewSet):
    """Manual email sends used to check the provider setup."""

    permission_classes = [IsAdminUser]

    @action(detail=False, methods=["post"], url_path="send-test", url_name="send-test")
    def send_test(self, request):
        serializer = SendTestEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        to = serializer.validated_data["to"]

        try:
            services.send_test_email(to)
        except EmailDeliveryError as e:
            return _failure(e)

        return Response(
            {"success": True, "message": f"Test email sent successfully to {to}"}
        )

    @action(
        detail=False,
        methods=["post"],
        url_path="send-registration",
        url_name="send-registration",
    )
    def send_registration(self, request):
        serializer = SendRegistrationEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        try:
            services.send_registration_email(
                to=params["to"],
                first_name=params["firstName"],
                verification_link=params["verificationLink"],
            )
        except EmailDeliveryError as e:
            return _failure(e)

        return Response(
            {
                "success": True,
                "message": f"Registration email sent successfully to {params['to']}",
            }
        )
