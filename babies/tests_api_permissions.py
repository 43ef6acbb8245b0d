"""Tests for API permission edge cases."""

from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase
from django.utils import timezone

from activities.models import BabyActivity
from django_project.test_constants import TEST_BIRTHDATE, TEST_PASSWORD

from .api_permissions import IsProfileOwner, IsRecordOwner
from .models import BabyProfile


class ProfileOwnershipPermissionTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        user_model = get_user_model()
        cls.user = user_model.objects.create_user(
            username="permuser", email="perm@example.com", password=TEST_PASSWORD
        )
        cls.other = user_model.objects.create_user(
            username="otherperm", email="otherperm@example.com", password=TEST_PASSWORD
        )
        cls.profile = BabyProfile.objects.create(
            user=cls.user, name="Perm Baby", birthdate=TEST_BIRTHDATE
        )
        cls.activity = BabyActivity.objects.create(
            local_id="perm-1",
            user=cls.user,
            baby_profile=cls.profile,
            type=BabyActivity.Type.POOP,
            timestamp=timezone.now(),
        )

    def setUp(self):
        self.factory = RequestFactory()

    def _request(self, user):
        request = self.factory.get("/")
        request.user = user
        return request

    def test_owner_has_access_to_profile(self):
        permission = IsProfileOwner()
        self.assertTrue(
            permission.has_object_permission(self._request(self.user), None, self.profile)
        )

    def test_other_user_denied_profile(self):
        permission = IsProfileOwner()
        self.assertFalse(
            permission.has_object_permission(self._request(self.other), None, self.profile)
        )

    def test_profile_resolved_from_activity(self):
        """IsProfileOwner works with objects that have a baby_profile attribute."""
        permission = IsProfileOwner()
        self.assertTrue(
            permission.has_object_permission(self._request(self.user), None, self.activity)
        )
        self.assertFalse(
            permission.has_object_permission(self._request(self.other), None, self.activity)
        )

    def test_unrelated_object_denied(self):
        """IsProfileOwner returns False for objects without a baby profile."""
        permission = IsProfileOwner()
        self.assertFalse(
            permission.has_object_permission(self._request(self.user), None, object())
        )

    def test_record_owner(self):
        permission = IsRecordOwner()
        self.assertTrue(
            permission.has_object_permission(self._request(self.user), None, self.activity)
        )
        self.assertFalse(
            permission.has_object_permission(self._request(self.other), None, self.activity)
        )

    def test_record_without_owner_denied(self):
        permission = IsRecordOwner()
        self.assertFalse(
            permission.has_object_permission(self._request(self.user), None, object())
        )
