"""API tests for baby profiles."""

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from activities.models import BabyActivity
from django_project.test_constants import TEST_BIRTHDATE, TEST_PASSWORD

from .models import BabyProfile

TEST_BABY_NAME = "Test Baby"
API_PROFILES_URL = "/api/v1/baby-profiles/"
API_PROFILES_ME_URL = "/api/v1/baby-profiles/me/"
API_PROFILE_DETAIL = "/api/v1/baby-profiles/{document_id}/"


class BabyProfileAPITestBase(APITestCase):
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
            user=cls.owner, name=TEST_BABY_NAME, birthdate=TEST_BIRTHDATE
        )

    def setUp(self):
        self.owner_token = Token.objects.create(user=self.owner)
        self.stranger_token = Token.objects.create(user=self.stranger)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.owner_token.key}")

    def as_stranger(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.stranger_token.key}")

    def detail_url(self, profile=None):
        return API_PROFILE_DETAIL.format(
            document_id=(profile or self.profile).document_id
        )


class BabyProfileCreateTests(BabyProfileAPITestBase):
    def test_create_requires_auth(self):
        self.client.credentials()
        response = self.client.post(
            API_PROFILES_URL,
            {"name": "Nora", "birthdate": TEST_BIRTHDATE},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_profile(self):
        response = self.client.post(
            API_PROFILES_URL,
            {"name": "Nora", "birthdate": TEST_BIRTHDATE},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data["data"]
        self.assertEqual(data["name"], "Nora")
        self.assertEqual(data["birthdate"], TEST_BIRTHDATE)
        self.assertFalse(data["is_premature"])
        self.assertIsNone(data["premature_weeks"])
        self.assertEqual(len(data["documentId"]), 24)
        self.assertIn("createdAt", response.data["meta"])

        profile = BabyProfile.objects.get(document_id=data["documentId"])
        self.assertEqual(profile.user, self.owner)

    def test_owner_is_taken_from_request(self):
        response = self.client.post(
            API_PROFILES_URL,
            {"name": "Nora", "birthdate": TEST_BIRTHDATE, "user": self.stranger.pk},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        profile = BabyProfile.objects.get(document_id=response.data["data"]["documentId"])
        self.assertEqual(profile.user, self.owner)

    def test_create_premature(self):
        response = self.client.post(
            API_PROFILES_URL,
            {
                "name": "Nora",
                "birthdate": TEST_BIRTHDATE,
                "is_premature": True,
                "premature_weeks": 6,
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["premature_weeks"], 6)

    def test_premature_requires_weeks(self):
        response = self.client.post(
            API_PROFILES_URL,
            {"name": "Nora", "birthdate": TEST_BIRTHDATE, "is_premature": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("premature_weeks", response.data)

    def test_premature_weeks_out_of_range(self):
        for weeks in (0, 21):
            response = self.client.post(
                API_PROFILES_URL,
                {
                    "name": "Nora",
                    "birthdate": TEST_BIRTHDATE,
                    "is_premature": True,
                    "premature_weeks": weeks,
                },
                format="json",
            )
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_weeks_dropped_when_not_premature(self):
        response = self.client.post(
            API_PROFILES_URL,
            {
                "name": "Nora",
                "birthdate": TEST_BIRTHDATE,
                "is_premature": False,
                "premature_weeks": 4,
            },
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data["data"]["premature_weeks"])

    def test_invalid_birthdate(self):
        response = self.client.post(
            API_PROFILES_URL,
            {"name": "Nora", "birthdate": "15/01/2025"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            str(response.data["birthdate"][0]), "Invalid birthdate format. Use YYYY-MM-DD."
        )

    def test_missing_name(self):
        response = self.client.post(
            API_PROFILES_URL, {"birthdate": TEST_BIRTHDATE}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("name", response.data)


class BabyProfileReadTests(BabyProfileAPITestBase):
    def test_me_lists_only_own_profiles(self):
        BabyProfile.objects.create(
            user=self.stranger, name="Other Baby", birthdate=TEST_BIRTHDATE
        )
        response = self.client.get(API_PROFILES_ME_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["meta"]["count"], 1)
        self.assertEqual(
            response.data["data"][0]["documentId"], self.profile.document_id
        )

    def test_me_empty(self):
        self.as_stranger()
        response = self.client.get(API_PROFILES_ME_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"], [])
        self.assertEqual(response.data["meta"]["count"], 0)

    def test_me_requires_auth(self):
        self.client.credentials()
        response = self.client.get(API_PROFILES_ME_URL)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_retrieve_own_profile(self):
        response = self.client.get(self.detail_url())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["name"], TEST_BABY_NAME)

    def test_retrieve_other_users_profile_forbidden(self):
        self.as_stranger()
        response = self.client.get(self.detail_url())
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_retrieve_unknown_profile(self):
        response = self.client.get(
            API_PROFILE_DETAIL.format(document_id="doesnotexist0000000000000")
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class BabyProfileUpdateTests(BabyProfileAPITestBase):
    def test_patch_name(self):
        response = self.client.patch(
            self.detail_url(), {"name": "Renamed"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["name"], "Renamed")
        self.assertIn("updatedAt", response.data["meta"])
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.name, "Renamed")

    def test_put_updates_only_provided_fields(self):
        response = self.client.put(
            self.detail_url(), {"name": "Renamed"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.name, "Renamed")
        self.assertEqual(str(self.profile.birthdate), TEST_BIRTHDATE)

    def test_mark_premature_without_weeks_rejected(self):
        response = self.client.patch(
            self.detail_url(), {"is_premature": True}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_weeks_checked_against_stored_flag(self):
        self.profile.is_premature = True
        self.profile.premature_weeks = 4
        self.profile.save()

        response = self.client.patch(
            self.detail_url(), {"premature_weeks": 30}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(
            self.detail_url(), {"premature_weeks": 8}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.premature_weeks, 8)

    def test_clearing_premature_clears_weeks(self):
        self.profile.is_premature = True
        self.profile.premature_weeks = 4
        self.profile.save()

        response = self.client.patch(
            self.detail_url(), {"is_premature": False}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.profile.refresh_from_db()
        self.assertIsNone(self.profile.premature_weeks)

    def test_update_other_users_profile_forbidden(self):
        self.as_stranger()
        response = self.client.patch(
            self.detail_url(), {"name": "Hijacked"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.profile.refresh_from_db()
        self.assertEqual(self.profile.name, TEST_BABY_NAME)


class BabyProfileDeleteTests(BabyProfileAPITestBase):
    def _add_activity(self, local_id):
        return BabyActivity.objects.create(
            local_id=local_id,
            user=self.owner,
            baby_profile=self.profile,
            type=BabyActivity.Type.PEE,
            timestamp=timezone.now(),
        )

    def test_delete_removes_profile_and_activities(self):
        self._add_activity("a1")
        self._add_activity("a2")

        response = self.client.delete(self.detail_url())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["data"])
        self.assertEqual(response.data["meta"]["activitiesDeleted"], 2)
        self.assertIn("deletedAt", response.data["meta"])
        self.assertFalse(BabyProfile.objects.filter(pk=self.profile.pk).exists())
        self.assertFalse(BabyActivity.objects.filter(user=self.owner).exists())

    def test_delete_without_activities(self):
        response = self.client.delete(self.detail_url())
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["meta"]["activitiesDeleted"], 0)

    def test_delete_other_users_profile_forbidden(self):
        self._add_activity("a1")
        self.as_stranger()
        response = self.client.delete(self.detail_url())
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(BabyProfile.objects.filter(pk=self.profile.pk).exists())
        self.assertEqual(BabyActivity.objects.filter(user=self.owner).count(), 1)
