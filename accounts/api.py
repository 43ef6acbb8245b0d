from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

User = get_user_model()


class UserProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "revenuecat_customer_id",
            "is_premium",
        ]
        read_only_fields = ["id", "username", "is_premium"]

    def validate_email(self, value):
        if not value:
            return value
        user = self.context["request"].user
        if User.objects.exclude(pk=user.pk).filter(email=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate_revenuecat_customer_id(self, value):
        if not value:
            return None
        user = self.context["request"].user
        if (
            User.objects.exclude(pk=user.pk)
            .filter(revenuecat_customer_id=value)
            .exists()
        ):
            raise serializers.ValidationError(
                "This RevenueCat customer id is linked to another account."
            )
        return value


class UserProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = UserProfileSerializer(request.user, context={"request": request})
        return Response(serializer.data)

    def patch(self, request):
        serializer = UserProfileSerializer(
            request.user,
            data=request.data,
            partial=True,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
