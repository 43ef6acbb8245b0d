"""API tests for the activity sync endpoints (pull, push, bulk delete)."""

from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from babies.datetime_utils import parse_iso_timestamp
from babies.models import BabyProfile
from django_project.test_constants import (
    TEST_BIRTHDATE,
    TEST_PASSWORD,
    TEST_TIMESTAMP,
    TEST_TIMESTAMP_LATER,
)

from .models import BabyActivity
from .sync import CURSOR_OVERLAP

API_SYNC_URL = "/api/v1/baby-activities/sync/"
API_BULK_DELETE_URL = "/api/v1/baby-activities/bulk-delete/"

FEEDING_DATA = {"amountMl": 120, "feedingType": "bottle"}


def feeding_entry(local_id, **overrides):
    entry = {
        "local_id": local_id,
        "type": "feeding",
        "timestamp": TEST_TIMESTAMP,
        "data": dict(FEEDING_DATA),
    }
    entry.update(overrides)
    return entry


class SyncAPITestBase(APITestCase):
    @classmethod
    def setUpTestData(cls):
        user_model = get_user_model()
        cls.owner = user_model.objects.create_user(
            username="owner", email="owner@example.com", password=TEST_PASSWORD
        )
        cls.stranger = user_model.objects.create_user(
            username="stranger", email="stranger@example.com", password=TEST_PASSWORD
        )
        cls.profile = BabyProfile.objects.create(
            user=cls.owner, name="Sync Baby", birthdate=TEST_BIRTHDATE
        )

    def setUp(self):
        self.owner_token = Token.objects.create(user=self.owner)
        self.stranger_token = Token.objects.create(user=self.stranger)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.owner_token.key}")

    def push(self, entries, profile_id=None):
        return self.client.post(
            API_SYNC_URL,
            {
                "baby_profile_id": profile_id or self.profile.document_id,
                "activities": entries,
            },
            format="json",
        )

    def pull(self, **params):
        params.setdefault("baby_profile_id", self.profile.document_id)
        return self.client.get(API_SYNC_URL, params)


class SyncPushTests(SyncAPITestBase):
    def test_push_creates_activity(self):
        response = self.push([feeding_entry("local-1")])
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["created"], 1)
        self.assertEqual(response.data["updated"], 0)
        self.assertEqual(response.data["softDeleted"], 0)
        self.assertTrue(response.data["syncedAt"].endswith("Z"))

        activity = BabyActivity.objects.get(user=self.owner, local_id="local-1")
        self.assertEqual(activity.baby_profile, self.profile)
        self.assertEqual(activity.type, BabyActivity.Type.FEEDING)
        self.assertEqual(activity.data, FEEDING_DATA)
        self.assertEqual(activity.synced_at, activity.updated_at)
        self.assertEqual(len(activity.document_id), 24)

    def test_push_same_local_id_twice_updates(self):
        self.push([feeding_entry("local-1")])
        response = self.push(
            [feeding_entry("local-1", data={"amountMl": 150, "feedingType": "bottle"})]
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["created"], 0)
        self.assertEqual(response.data["updated"], 1)

        activities = BabyActivity.objects.filter(user=self.owner, local_id="local-1")
        self.assertEqual(activities.count(), 1)
        self.assertEqual(activities.get().data["amountMl"], 150)

    def test_duplicate_local_id_in_one_batch_last_wins(self):
        response = self.push(
            [
                feeding_entry("dup"),
                feeding_entry("dup", data={"amountMl": 99, "feedingType": "breast"}),
            ]
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["created"], 1)
        self.assertEqual(response.data["updated"], 1)

        activities = BabyActivity.objects.filter(user=self.owner, local_id="dup")
        self.assertEqual(activities.count(), 1)
        self.assertEqual(
            activities.get().data, {"amountMl": 99, "feedingType": "breast"}
        )

    def test_numeric_string_amount_rejected(self):
        response = self.push(
            [feeding_entry("local-1", data={"amountMl": "120", "feedingType": "bottle"})]
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("amountMl", response.data["errors"][0]["errors"]["data"])
        self.assertFalse(BabyActivity.objects.exists())

    def test_soft_delete_with_non_object_data_keeps_payload(self):
        self.push([feeding_entry("local-1")])
        response = self.push(
            [feeding_entry("local-1", data="gone", deleted_at=TEST_TIMESTAMP_LATER)]
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["softDeleted"], 1)

        activity = BabyActivity.objects.get(user=self.owner, local_id="local-1")
        self.assertTrue(activity.is_deleted)
        self.assertEqual(activity.data, FEEDING_DATA)

    def test_push_stamps_one_synced_at_per_batch(self):
        self.push([feeding_entry("local-1"), feeding_entry("local-2")])
        stamps = set(
            BabyActivity.objects.filter(user=self.owner).values_list(
                "synced_at", flat=True
            )
        )
        self.assertEqual(len(stamps), 1)

    def test_soft_delete_without_data_keeps_payload(self):
        self.push([feeding_entry("local-1")])
        response = self.push(
            [
                {
                    "local_id": "local-1",
                    "type": "feeding",
                    "timestamp": TEST_TIMESTAMP,
                    "deleted_at": TEST_TIMESTAMP_LATER,
                }
            ]
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["updated"], 1)
        self.assertEqual(response.data["softDeleted"], 1)

        activity = BabyActivity.objects.get(user=self.owner, local_id="local-1")
        self.assertTrue(activity.is_deleted)
        self.assertEqual(activity.data, FEEDING_DATA)

    def test_soft_delete_of_unknown_row_inserts_tombstone(self):
        response = self.push(
            [
                {
                    "local_id": "never-synced",
                    "type": "pee",
                    "timestamp": TEST_TIMESTAMP,
                    "deleted_at": TEST_TIMESTAMP_LATER,
                }
            ]
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["created"], 1)
        self.assertEqual(response.data["softDeleted"], 1)
        activity = BabyActivity.objects.get(user=self.owner, local_id="never-synced")
        self.assertEqual(activity.data, {})
        self.assertIsNotNone(activity.deleted_at)

    def test_explicit_null_deleted_at_restores(self):
        self.push([feeding_entry("local-1", deleted_at=TEST_TIMESTAMP_LATER)])
        self.push([feeding_entry("local-1", deleted_at=None)])
        activity = BabyActivity.objects.get(user=self.owner, local_id="local-1")
        self.assertIsNone(activity.deleted_at)

    def test_absent_deleted_at_leaves_deletion(self):
        self.push([feeding_entry("local-1", deleted_at=TEST_TIMESTAMP_LATER)])
        self.push([feeding_entry("local-1")])
        activity = BabyActivity.objects.get(user=self.owner, local_id="local-1")
        self.assertIsNotNone(activity.deleted_at)

    def test_invalid_entry_rejects_whole_batch(self):
        response = self.push(
            [
                feeding_entry("local-1"),
                feeding_entry("local-2", data={"feedingType": "bottle"}),
                feeding_entry("local-3"),
            ]
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["detail"], "Validation failed")
        self.assertEqual(len(response.data["errors"]), 1)
        error = response.data["errors"][0]
        self.assertEqual(error["index"], 1)
        self.assertEqual(error["local_id"], "local-2")
        self.assertIn("data", error["errors"])
        self.assertFalse(BabyActivity.objects.filter(user=self.owner).exists())

    def test_invalid_type_reported(self):
        response = self.push([feeding_entry("local-1", type="bath")])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            str(response.data["errors"][0]["errors"]["type"][0]), "Invalid activity type."
        )

    def test_entry_without_local_id_reports_null(self):
        entry = feeding_entry("x")
        del entry["local_id"]
        response = self.push([entry])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIsNone(response.data["errors"][0]["local_id"])

    def test_non_object_entry_rejected(self):
        response = self.push(["not-an-object"])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIsNone(response.data["errors"][0]["local_id"])

    def test_activities_must_be_list(self):
        response = self.client.post(
            API_SYNC_URL,
            {"baby_profile_id": self.profile.document_id, "activities": "nope"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("activities", response.data)

    def test_profile_id_required(self):
        response = self.client.post(
            API_SYNC_URL, {"activities": [feeding_entry("local-1")]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("baby_profile_id", response.data)

    def test_batch_limit(self):
        entries = [feeding_entry(f"local-{i}") for i in range(501)]
        response = self.push(entries)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(BabyActivity.objects.exists())

    def test_empty_batch(self):
        response = self.push([])
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["created"], 0)
        self.assertEqual(response.data["updated"], 0)

    def test_push_requires_auth(self):
        self.client.credentials()
        response = self.push([feeding_entry("local-1")])
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_push_to_other_users_profile_forbidden(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.stranger_token.key}")
        response = self.push([feeding_entry("local-1")])
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(BabyActivity.objects.exists())

    def test_push_to_unknown_profile(self):
        response = self.push([feeding_entry("local-1")], profile_id="missing")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_local_ids_are_scoped_per_user(self):
        stranger_profile = BabyProfile.objects.create(
            user=self.stranger, name="Other Baby", birthdate=TEST_BIRTHDATE
        )
        self.push([feeding_entry("shared-id")])
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.stranger_token.key}")
        response = self.push(
            [feeding_entry("shared-id")], profile_id=stranger_profile.document_id
        )
        self.assertEqual(response.data["created"], 1)
        self.assertEqual(BabyActivity.objects.filter(local_id="shared-id").count(), 2)

    def test_write_failure_rolls_back(self):
        with patch(
            "activities.sync._update", side_effect=RuntimeError("database went away")
        ):
            self.push([feeding_entry("local-1")])
            response = self.push([feeding_entry("local-2"), feeding_entry("local-1")])

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "database went away")
        self.assertFalse(
            BabyActivity.objects.filter(user=self.owner, local_id="local-2").exists()
        )


class SyncPullTests(SyncAPITestBase):
    def test_pull_returns_everything_without_cursor(self):
        self.push([feeding_entry("local-1"), feeding_entry("local-2")])
        response = self.pull()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 2)
        pagination = response.data["meta"]["pagination"]
        self.assertEqual(pagination["total"], 2)
        self.assertEqual(pagination["offset"], 0)
        self.assertEqual(pagination["limit"], 500)
        self.assertFalse(pagination["hasMore"])
        meta = response.data["meta"]
        self.assertEqual(
            parse_iso_timestamp(meta["serverTime"])
            - parse_iso_timestamp(meta["lastSyncedAt"]),
            CURSOR_OVERLAP,
        )

    def test_pull_includes_soft_deleted(self):
        self.push([feeding_entry("local-1", deleted_at=TEST_TIMESTAMP_LATER)])
        response = self.pull()
        self.assertEqual(len(response.data["data"]), 1)
        self.assertIsNotNone(response.data["data"][0]["deleted_at"])

    def test_pull_serialized_shape(self):
        self.push([feeding_entry("local-1")])
        item = self.pull().data["data"][0]
        self.assertEqual(item["local_id"], "local-1")
        self.assertEqual(item["baby_profile"], self.profile.document_id)
        self.assertEqual(item["data"], FEEDING_DATA)
        self.assertNotIn("user", item)
        for key in ("documentId", "createdAt", "updatedAt", "synced_at"):
            self.assertIn(key, item)

    def test_pull_since_cursor(self):
        self.push([feeding_entry("local-1")])
        cursor = self.pull().data["meta"]["serverTime"]
        BabyActivity.objects.filter(local_id="local-1").update(
            updated_at=timezone.now() - timedelta(minutes=5)
        )

        self.push([feeding_entry("local-2")])
        response = self.pull(since=cursor)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [item["local_id"] for item in response.data["data"]], ["local-2"]
        )

    def test_pull_cursor_covers_rows_committed_after_pull(self):
        meta = self.pull().data["meta"]
        server_time = parse_iso_timestamp(meta["serverTime"])
        # Stamped by a push before the pull ran, visible only once it commits
        BabyActivity.objects.create(
            local_id="in-flight",
            user=self.owner,
            baby_profile=self.profile,
            type=BabyActivity.Type.FEEDING,
            timestamp=server_time,
            data=dict(FEEDING_DATA),
            synced_at=server_time - timedelta(seconds=5),
            updated_at=server_time - timedelta(seconds=5),
        )

        response = self.pull(since=meta["lastSyncedAt"])
        self.assertEqual(
            [item["local_id"] for item in response.data["data"]], ["in-flight"]
        )

    def test_pull_orders_by_update_time(self):
        self.push([feeding_entry("local-1"), feeding_entry("local-2")])
        self.push([feeding_entry("local-1")])
        local_ids = [item["local_id"] for item in self.pull().data["data"]]
        self.assertEqual(local_ids, ["local-2", "local-1"])

    def test_pull_pagination(self):
        self.push([feeding_entry(f"local-{i}") for i in range(5)])
        response = self.pull(limit=2, offset=2)
        pagination = response.data["meta"]["pagination"]
        self.assertEqual(len(response.data["data"]), 2)
        self.assertEqual(pagination["total"], 5)
        self.assertTrue(pagination["hasMore"])

        response = self.pull(limit=2, offset=4)
        self.assertEqual(len(response.data["data"]), 1)
        self.assertFalse(response.data["meta"]["pagination"]["hasMore"])

    def test_pull_limit_is_capped(self):
        response = self.pull(limit=10000)
        self.assertEqual(response.data["meta"]["pagination"]["limit"], 500)

    def test_pull_invalid_since(self):
        response = self.pull(since="yesterday")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pull_requires_profile_id(self):
        response = self.client.get(API_SYNC_URL)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pull_other_users_profile_forbidden(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.stranger_token.key}")
        response = self.pull()
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_pull_unknown_profile(self):
        response = self.pull(baby_profile_id="missing")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_pull_requires_auth(self):
        self.client.credentials()
        response = self.pull()
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class BulkDeleteTests(SyncAPITestBase):
    def test_bulk_delete(self):
        self.push([feeding_entry("local-1"), feeding_entry("local-2")])
        response = self.client.post(
            API_BULK_DELETE_URL,
            {"local_ids": ["local-1", "missing"]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["deleted"], 1)
        self.assertEqual(response.data["notFound"], ["missing"])
        self.assertEqual(
            list(BabyActivity.objects.values_list("local_id", flat=True)), ["local-2"]
        )

    def test_bulk_delete_omits_not_found_when_all_matched(self):
        self.push([feeding_entry("local-1")])
        response = self.client.post(
            API_BULK_DELETE_URL, {"local_ids": ["local-1"]}, format="json"
        )
        self.assertEqual(response.data["deleted"], 1)
        self.assertNotIn("notFound", response.data)

    def test_bulk_delete_only_touches_own_rows(self):
        self.push([feeding_entry("local-1")])
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.stranger_token.key}")
        response = self.client.post(
            API_BULK_DELETE_URL, {"local_ids": ["local-1"]}, format="json"
        )
        self.assertEqual(response.data["deleted"], 0)
        self.assertEqual(response.data["notFound"], ["local-1"])
        self.assertTrue(BabyActivity.objects.filter(local_id="local-1").exists())

    def test_bulk_delete_empty(self):
        response = self.client.post(API_BULK_DELETE_URL, {"local_ids": []}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["deleted"], 0)

    def test_bulk_delete_limit(self):
        response = self.client.post(
            API_BULK_DELETE_URL,
            {"local_ids": [f"id-{i}" for i in range(101)]},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_delete_requires_list(self):
        response = self.client.post(
            API_BULK_DELETE_URL, {"local_ids": "local-1"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_delete_requires_auth(self):
        self.client.credentials()
        response = self.client.post(
            API_BULK_DELETE_URL, {"local_ids": ["local-1"]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
