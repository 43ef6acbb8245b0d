"""API URL configuration for BabyVision.

All API endpoints are prefixed with /api/v1/.
"""

from django.urls import include, path
from rest_framework.authtoken.views import obtain_auth_token
from rest_framework.routers import DefaultRouter

from accounts.api import UserProfileView
from activities.api import BabyActivityViewSet
from activities.sync_api import ActivitySyncView, BulkDeleteView
from babies.api import BabyProfileViewSet
from emails.api import EmailViewSet
from vouchers.api import VoucherActionsViewSet

router = DefaultRouter()
router.register("baby-profiles", BabyProfileViewSet, basename="baby-profile")
router.register("baby-activities", BabyActivityViewSet, basename="baby-activity")
router.register("voucher-actions", VoucherActionsViewSet, basename="voucher-actions")
router.register("email", EmailViewSet, basename="email")

urlpatterns = [
    # Account management
    path(
        "account/profile/",
        UserProfileView.as_view(),
        name="account-profile",
    ),
    # Exchange username/password for an API token
    path("auth/token/", obtain_auth_token, name="auth-token"),
    # DRF browsable API login (for browser testing)
    path("api-auth/", include("rest_framework.urls")),
    # Sync routes must precede the router, whose detail route would match them
    path(
        "baby-activities/sync/",
        ActivitySyncView.as_view(),
        name="baby-activity-sync",
    ),
    path(
        "baby-activities/bulk-delete/",
        BulkDeleteView.as_view(),
        name="baby-activity-bulk-delete",
    ),
    path("", include(router.urls)),
]
