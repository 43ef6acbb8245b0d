"""API tests for listing, retrieving and deleting activities."""

from datetime import datetime, timedelta, timezone

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from babies.models import BabyProfile
from django_project.test_constants import TEST_BIRTHDATE, TEST_PASSWORD

from .models import BabyActivity

API_ACTIVITIES_URL = "/api/v1/baby-activities/"
API_ACTIVITY_DETAIL = "/api/v1/baby-activities/{document_id}/"

BASE_TIME = datetime(2025, 2, 17, 8, 0, tzinfo=timezone.utc)


class BabyActivityAPITests(APITestCase):
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
            user=cls.owner, name="List Baby", birthdate=TEST_BIRTHDATE
        )
        cls.feeding = cls._activity("feed-1", BabyActivity.Type.FEEDING, hours=0)
        cls.pee = cls._activity("pee-1", BabyActivity.Type.PEE, hours=1)
        cls.sleep = cls._activity("sleep-1", BabyActivity.Type.SLEEP, hours=2)
        cls.deleted = cls._activity(
            "poop-1", BabyActivity.Type.POOP, hours=3, deleted_at=BASE_TIME
        )

    @classmethod
    def _activity(cls, local_id, activity_type, hours, **extra):
        return BabyActivity.objects.create(
            local_id=local_id,
            user=cls.owner,
            baby_profile=cls.profile,
            type=activity_type,
            timestamp=BASE_TIME + timedelta(hours=hours),
            **extra,
        )

    def setUp(self):
        self.owner_token = Token.objects.create(user=self.owner)
        self.stranger_token = Token.objects.create(user=self.stranger)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.owner_token.key}")

    def list_local_ids(self, **params):
        params.setdefault("baby_profile_id", self.profile.document_id)
        response = self.client.get(API_ACTIVITIES_URL, params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return [item["local_id"] for item in response.data["data"]]

    def test_list_newest_first_without_deleted(self):
        self.assertEqual(self.list_local_ids(), ["sleep-1", "pee-1", "feed-1"])

    def test_list_include_deleted(self):
        self.assertEqual(
            self.list_local_ids(include_deleted="true"),
            ["poop-1", "sleep-1", "pee-1", "feed-1"],
        )

    def test_list_filter_by_type(self):
        self.assertEqual(self.list_local_ids(type="pee"), ["pee-1"])

    def test_list_unknown_type_is_ignored(self):
        self.assertEqual(len(self.list_local_ids(type="bath")), 3)

    def test_list_date_range(self):
        self.assertEqual(
            self.list_local_ids(
                **{"from": "2025-02-17T08:30:00Z", "to": "2025-02-17T10:00:00Z"}
            ),
            ["sleep-1", "pee-1"],
        )

    def test_list_pagination(self):
        response = self.client.get(
            API_ACTIVITIES_URL,
            {"baby_profile_id": self.profile.document_id, "page": 2, "pageSize": 2},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [item["local_id"] for item in response.data["data"]], ["feed-1"]
        )
        self.assertEqual(
            response.data["meta"]["pagination"],
            {"page": 2, "pageSize": 2, "pageCount": 2, "total": 3},
        )

    def test_list_page_size_is_capped(self):
        response = self.client.get(
            API_ACTIVITIES_URL,
            {"baby_profile_id": self.profile.document_id, "pageSize": 1000},
        )
        self.assertEqual(response.data["meta"]["pagination"]["pageSize"], 100)

    def test_list_requires_profile_id(self):
        response = self.client.get(API_ACTIVITIES_URL)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_other_users_profile_forbidden(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.stranger_token.key}")
        response = self.client.get(
            API_ACTIVITIES_URL, {"baby_profile_id": self.profile.document_id}
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_requires_auth(self):
        self.client.credentials()
        response = self.client.get(
            API_ACTIVITIES_URL, {"baby_profile_id": self.profile.document_id}
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_retrieve(self):
        response = self.client.get(
            API_ACTIVITY_DETAIL.format(document_id=self.feeding.document_id)
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["local_id"], "feed-1")
        self.assertEqual(response.data["data"]["documentId"], self.feeding.document_id)

    def test_retrieve_other_users_activity_forbidden(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.stranger_token.key}")
        response = self.client.get(
            API_ACTIVITY_DETAIL.format(document_id=self.feeding.document_id)
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_retrieve_unknown(self):
        response = self.client.get(API_ACTIVITY_DETAIL.format(document_id="missing"))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_destroy(self):
        response = self.client.delete(
            API_ACTIVITY_DETAIL.format(document_id=self.pee.document_id)
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["data"])
        self.assertIn("deletedAt", response.data["meta"])
        self.assertFalse(BabyActivity.objects.filter(pk=self.pee.pk).exists())

    def test_destroy_other_users_activity_forbidden(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.stranger_token.key}")
        response = self.client.delete(
            API_ACTIVITY_DETAIL.format(document_id=self.pee.document_id)
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(BabyActivity.objects.filter(pk=self.pee.pk).exists())

    def test_create_not_allowed(self):
        response = self.client.post(API_ACTIVITIES_URL, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
