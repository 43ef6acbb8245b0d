"""Serializers for baby activities.

Payload serializers validate the type-specific `data` object the mobile app
sends. Their field names follow the app's camelCase JSON keys.
"""

from rest_framework import serializers

from .models import BabyActivity

NOTES_MAX_LENGTH = 2000


class JSONNumberField(serializers.FloatField):
    """FloatField that rejects numeric strings and booleans."""

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail("invalid")
        return super().to_internal_value(data)


class JSONIntegerField(serializers.IntegerField):
    """IntegerField that rejects numeric strings and booleans."""

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail("invalid")
        return super().to_internal_value(data)


class FeedingDataSerializer(serializers.Serializer):
    amountMl = JSONNumberField(
        min_value=0,
        error_messages={"min_value": "amountMl must be a non-negative number."},
    )
    feedingType = serializers.ChoiceField(choices=["breast", "bottle", "formula"])
    duration = JSONIntegerField(required=False, allow_null=True, min_value=0)
    notes = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=NOTES_MAX_LENGTH
    )


class SleepDataSerializer(serializers.Serializer):
    endTime = serializers.DateTimeField(required=False, allow_null=True)
    durationMinutes = JSONIntegerField(required=False, allow_null=True, min_value=0)
    sleepType = serializers.ChoiceField(choices=["night", "nap"])
    quality = serializers.ChoiceField(
        choices=["poor", "fair", "good", "excellent"],
        required=False,
        allow_blank=True,
        allow_null=True,
    )
    notes = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=NOTES_MAX_LENGTH
    )


class PeeDataSerializer(serializers.Serializer):
    wetLevel = serializers.ChoiceField(choices=["light", "normal", "heavy"])
    notes = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=NOTES_MAX_LENGTH
    )


class PoopDataSerializer(serializers.Serializer):
    color = serializers.ChoiceField(
        choices=["yellow", "green", "brown", "black", "red", "white"]
    )
    consistency = serializers.ChoiceField(choices=["watery", "soft", "normal", "hard"])
    amount = serializers.ChoiceField(choices=["small", "normal", "large"])
    notes = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=NOTES_MAX_LENGTH
    )


class WeightDataSerializer(serializers.Serializer):
    weightKg = JSONNumberField()
    notes = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=NOTES_MAX_LENGTH
    )

    def validate_weightKg(self, value):
        if value <= 0:
            raise serializers.ValidationError("weightKg must be a positive number.")
        return value


class SolidDataSerializer(serializers.Serializer):
    mealType = serializers.ChoiceField(choices=["breakfast", "lunch", "dinner", "snack"])
    foodItems = serializers.ListField(child=serializers.CharField(), allow_empty=True)
    amount = serializers.ChoiceField(
        choices=["small", "medium", "large"],
        required=False,
        allow_blank=True,
        allow_null=True,
    )
    notes = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=NOTES_MAX_LENGTH
    )


PAYLOAD_SERIALIZERS = {
    BabyActivity.Type.FEEDING.value: FeedingDataSerializer,
    BabyActivity.Type.SLEEP.value: SleepDataSerializer,
    BabyActivity.Type.PEE.value: PeeDataSerializer,
    BabyActivity.Type.POOP.value: PoopDataSerializer,
    BabyActivity.Type.WEIGHT.value: WeightDataSerializer,
    BabyActivity.Type.SOLID.value: SolidDataSerializer,
}


class ActivityEntrySerializer(serializers.Serializer):
    """One client activity entry inside a sync push.

    The payload is only checked for live entries: a delete may carry whatever
    the device last had, or nothing at all.
    """

    local_id = serializers.CharField(max_length=255)
    type = serializers.ChoiceField(
        choices=BabyActivity.Type.choices,
        error_messages={"invalid_choice": "Invalid activity type."},
    )
    timestamp = serializers.DateTimeField()
    data = serializers.JSONField(required=False, allow_null=True)
    deleted_at = serializers.DateTimeField(required=False, allow_null=True)
    client_updated_at = serializers.DateTimeField(required=False, allow_null=True)

    def validate(self, attrs):
        data = attrs.get("data")
        if attrs.get("deleted_at"):
            # Keep the stored payload when a tombstone carries no usable object
            if not isinstance(data, dict):
                attrs.pop("data", None)
            return attrs

        if not isinstance(data, dict):
            raise serializers.ValidationError({"data": "data must be an object."})

        payload = PAYLOAD_SERIALIZERS[attrs["type"]](data=data)
        if not payload.is_valid():
            raise serializers.ValidationError({"data": payload.errors})
        return attrs


class BabyActivitySerializer(serializers.ModelSerializer):
    """Read serializer for activities as returned to the client.

    The owning user is never exposed.
    """

    documentId = serializers.CharField(source="document_id", read_only=True)
    baby_profile = serializers.CharField(source="baby_profile.document_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = BabyActivity
        fields = [
            "id",
            "documentId",
            "local_id",
            "baby_profile",
            "type",
            "timestamp",
            "data",
            "synced_at",
            "deleted_at",
            "client_updated_at",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class SyncPushSerializer(serializers.Serializer):
    """Outer shape of a push request; entries are validated one by one."""

    baby_profile_id = serializers.CharField(
        error_messages={"required": "baby_profile_id is required."}
    )
    activities = serializers.ListField(
        allow_empty=True,
        max_length=500,
        error_messages={
            "required": "activities must be an array.",
            "not_a_list": "activities must be an array.",
            "max_length": "Maximum 500 activities per sync request.",
        },
    )


class BulkDeleteSerializer(serializers.Serializer):
    local_ids = serializers.ListField(
        child=serializers.CharField(max_length=255),
        allow_empty=True,
        max_length=100,
        error_messages={
            "required": "local_ids must be an array.",
            "not_a_list": "local_ids must be an array.",
            "max_length": "Maximum 100 local_ids per bulk delete request.",
        },
    )
