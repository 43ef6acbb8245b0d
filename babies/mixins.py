"""Ownership mixin for API views scoped to one baby profile.

Activity endpoints receive the profile as a `baby_profile_id` parameter
(query string or body) rather than in the URL, so they resolve and check it
explicitly before touching any activity rows.

Security model:
- Missing profile returns 404
- Profile owned by someone else returns 403
"""

from rest_framework.exceptions import NotFound, PermissionDenied

from .models import BabyProfile


class OwnedProfileMixin:
    """Resolve a baby profile by document id and enforce ownership.

    Example:
        class SyncView(OwnedProfileMixin, APIView):
            def get(self, request):
                profile = self.get_baby_profile(request.query_params["baby_profile_id"])
    """

    profile_denied_message = "You are not authorized to access this baby profile"

    def get_baby_profile(self, document_id, denied_message=None):
        """Return the caller's profile.

        Raises:
            NotFound: If no profile has this document id
            PermissionDenied: If the profile belongs to another user
        """
        profile = (
            BabyProfile.objects.select_related("user")
            .filter(document_id=document_id)
            .first()
        )
        if profile is None:
            raise NotFound("Baby profile not found")
        if not profile.is_owned_by(self.request.user):
            raise PermissionDenied(denied_message or self.profile_denied_message)
        return profile
