"""DRF permission classes for baby profile ownership.

Every profile and activity record belongs to exactly one user; these wrap
the ownership check so views fail with 403 instead of leaking records.
"""

from typing import Any

from rest_framework.permissions import BasePermission

from .models import BabyProfile


class IsProfileOwner(BasePermission):
    """Permission: user owns the baby profile (or the record's profile).

    Used for: retrieve, update, delete profiles and activity records.
    """

    message = "You are not authorized to access this baby profile."

    def has_object_permission(self, request: Any, view: Any, obj: Any) -> bool:
        profile = self._get_profile(obj)
        if profile is None:
            return False
        return profile.is_owned_by(request.user)

    def _get_profile(self, obj: Any) -> BabyProfile | None:
        """Extract BabyProfile from object (handles profiles and activities)."""
        if isinstance(obj, BabyProfile):
            return obj
        if hasattr(obj, "baby_profile"):
            return obj.baby_profile
        return None


class IsRecordOwner(BasePermission):
    """Permission: user is the owner recorded on the object itself."""

    message = "You are not authorized to access this record."

    def has_object_permission(self, request: Any, view: Any, obj: Any) -> bool:
        owner_id = getattr(obj, "user_id", None)
        return owner_id is not None and owner_id == request.user.id
