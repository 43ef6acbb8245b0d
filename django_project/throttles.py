"""Custom DRF throttle classes for rate limiting API endpoints."""

from rest_framework.throttling import AnonRateThrottle, UserRateThrottle


class SyncPushThrottle(UserRateThrottle):
    """Rate limiting for activity sync pushes.

    Each push can carry up to 500 entries applied in one transaction, so
    pushes are limited separately from the default read traffic.
    """

    scope = "sync_push"


class VoucherRedeemThrottle(AnonRateThrottle):
    """Rate limiting for voucher redemption and validation.

    These endpoints are reachable without authentication, so they are keyed
    by client IP to slow down code guessing.
    """

    scope = "voucher_redeem"
