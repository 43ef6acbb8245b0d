"""Tests for activity entry and payload validation."""

from django.test import SimpleTestCase

from django_project.test_constants import TEST_TIMESTAMP, TEST_TIMESTAMP_LATER

from .serializers import ActivityEntrySerializer, BulkDeleteSerializer

VALID_PAYLOADS = {
    "feeding": {"amountMl": 90, "feedingType": "breast", "duration": 15},
    "sleep": {"sleepType": "nap", "durationMinutes": 45, "quality": "good"},
    "pee": {"wetLevel": "normal"},
    "poop": {"color": "yellow", "consistency": "soft", "amount": "small"},
    "weight": {"weightKg": 4.2},
    "solid": {"mealType": "lunch", "foodItems": ["carrot", "rice"]},
}


def entry(activity_type, data, **extra):
    value = {
        "local_id": f"{activity_type}-1",
        "type": activity_type,
        "timestamp": TEST_TIMESTAMP,
        "data": data,
    }
    value.update(extra)
    return value


class ActivityEntrySerializerTests(SimpleTestCase):
    def test_valid_payload_for_every_type(self):
        for activity_type, data in VALID_PAYLOADS.items():
            with self.subTest(activity_type=activity_type):
                serializer = ActivityEntrySerializer(data=entry(activity_type, data))
                self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_extra_payload_keys_are_kept(self):
        data = {"wetLevel": "light", "diaperBrand": "acme"}
        serializer = ActivityEntrySerializer(data=entry("pee", data))
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data["data"], data)

    def test_missing_payload_rejected(self):
        value = entry("pee", None)
        del value["data"]
        serializer = ActivityEntrySerializer(data=value)
        self.assertFalse(serializer.is_valid())
        self.assertIn("data", serializer.errors)

    def test_negative_feeding_amount(self):
        serializer = ActivityEntrySerializer(
            data=entry("feeding", {"amountMl": -5, "feedingType": "bottle"})
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("amountMl", serializer.errors["data"])

    def test_numbers_must_be_json_numbers(self):
        cases = [
            ("feeding", {"amountMl": "120", "feedingType": "bottle"}, "amountMl"),
            ("feeding", {"amountMl": True, "feedingType": "bottle"}, "amountMl"),
            (
                "feeding",
                {"amountMl": 60, "feedingType": "breast", "duration": "15"},
                "duration",
            ),
            ("sleep", {"sleepType": "nap", "durationMinutes": "45"}, "durationMinutes"),
            ("weight", {"weightKg": "4.2"}, "weightKg"),
        ]
        for activity_type, data, field in cases:
            with self.subTest(activity_type=activity_type, field=field):
                serializer = ActivityEntrySerializer(data=entry(activity_type, data))
                self.assertFalse(serializer.is_valid())
                self.assertIn(field, serializer.errors["data"])

    def test_non_object_payload_rejected(self):
        for data in ("feeding", ["amountMl"], 42):
            with self.subTest(data=data):
                serializer = ActivityEntrySerializer(data=entry("feeding", data))
                self.assertFalse(serializer.is_valid())
                self.assertEqual(
                    str(serializer.errors["data"][0]), "data must be an object."
                )

    def test_unknown_feeding_type(self):
        serializer = ActivityEntrySerializer(
            data=entry("feeding", {"amountMl": 60, "feedingType": "juice"})
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("feedingType", serializer.errors["data"])

    def test_weight_must_be_positive(self):
        serializer = ActivityEntrySerializer(data=entry("weight", {"weightKg": 0}))
        self.assertFalse(serializer.is_valid())
        self.assertIn("weightKg", serializer.errors["data"])

    def test_poop_requires_all_fields(self):
        serializer = ActivityEntrySerializer(data=entry("poop", {"color": "green"}))
        self.assertFalse(serializer.is_valid())
        self.assertIn("consistency", serializer.errors["data"])
        self.assertIn("amount", serializer.errors["data"])

    def test_solid_food_items_must_be_list(self):
        serializer = ActivityEntrySerializer(
            data=entry("solid", {"mealType": "snack", "foodItems": "banana"})
        )
        self.assertFalse(serializer.is_valid())

    def test_deleted_entry_skips_payload_checks(self):
        serializer = ActivityEntrySerializer(
            data=entry("weight", {"weightKg": -1}, deleted_at=TEST_TIMESTAMP_LATER)
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)

    def test_deleted_entry_drops_non_object_payload(self):
        serializer = ActivityEntrySerializer(
            data=entry("feeding", "gone", deleted_at=TEST_TIMESTAMP_LATER)
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertNotIn("data", serializer.validated_data)

    def test_invalid_timestamp(self):
        serializer = ActivityEntrySerializer(
            data=entry("pee", VALID_PAYLOADS["pee"], timestamp="not-a-date")
        )
        self.assertFalse(serializer.is_valid())
        self.assertIn("timestamp", serializer.errors)

    def test_missing_local_id(self):
        value = entry("pee", VALID_PAYLOADS["pee"])
        del value["local_id"]
        serializer = ActivityEntrySerializer(data=value)
        self.assertFalse(serializer.is_valid())
        self.assertIn("local_id", serializer.errors)

    def test_explicit_null_deleted_at_is_kept(self):
        serializer = ActivityEntrySerializer(
            data=entry("pee", VALID_PAYLOADS["pee"], deleted_at=None)
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertIn("deleted_at", serializer.validated_data)
        self.assertIsNone(serializer.validated_data["deleted_at"])

    def test_absent_deleted_at_is_omitted(self):
        serializer = ActivityEntrySerializer(data=entry("pee", VALID_PAYLOADS["pee"]))
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertNotIn("deleted_at", serializer.validated_data)


class BulkDeleteSerializerTests(SimpleTestCase):
    def test_limit_message(self):
        serializer = BulkDeleteSerializer(
            data={"local_ids": [str(i) for i in range(101)]}
        )
        self.assertFalse(serializer.is_valid())
        self.assertEqual(
            str(serializer.errors["local_ids"][0]),
            "Maximum 100 local_ids per bulk delete request.",
        )
