"""RevenueCat promotional entitlement client."""

import logging
import time
from dataclasses import dataclass
from urllib.parse import quote

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)

# Voucher duration (months) -> RevenueCat promotional duration
DURATION_BY_MONTHS = {
    1: "monthly",
    2: "two_month",
    3: "three_month",
    6: "six_month",
    12: "yearly",
}
DEFAULT_DURATION = "monthly"


class RevenueCatError(Exception):
    """Raised when an entitlement could not be granted."""


def duration_for_months(months):
    return DURATION_BY_MONTHS.get(months, DEFAULT_DURATION)


@dataclass
class RevenueCatClient:
    """HTTPX-backed client for the RevenueCat REST API (v1)."""

    api_key: str
    base_url: str
    entitlement: str
    http_client: httpx.Client
    timeout: float = 15

    @classmethod
    def from_settings(cls, http_client=None):
        """Create a client from Django settings."""
        return cls(
            api_key=settings.REVENUECAT_SECRET_API_KEY,
            base_url=settings.REVENUECAT_API_URL.rstrip("/"),
            entitlement=settings.REVENUECAT_ENTITLEMENT_IDENTIFIER,
            http_client=http_client or httpx.Client(),
            timeout=settings.REVENUECAT_TIMEOUT,
        )

    def grant_promotional_entitlement(self, app_user_id, duration_months):
        """Grant the configured entitlement to a subscriber.

        Args:
            app_user_id: RevenueCat app user id
            duration_months: Voucher duration, mapped to a RevenueCat duration

        Returns:
            dict: Decoded subscriber payload from RevenueCat

        Raises:
            RevenueCatError: Missing API key, transport failure or non-2xx reply
        """
        if not self.api_key:
            raise RevenueCatError("RevenueCat API key not configured")

        url = (
            f"{self.base_url}/subscribers/{quote(app_user_id, safe='')}"
            f"/entitlements/{quote(self.entitlement, safe='')}/promotional"
        )
        try:
            response = self.http_client.post(
                url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "X-Platform": "stripe",
                },
                json={
                    "duration": duration_for_months(duration_months),
                    "start_time_ms": int(time.time() * 1000),
                },
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise RevenueCatError(f"RevenueCat request failed: {e}") from e

        if response.is_error:
            logger.error(
                "RevenueCat API response: %s %s", response.status_code, response.text
            )
            raise RevenueCatError(f"RevenueCat API error: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            logger.error("RevenueCat API response is not JSON: %s", response.text)
            raise RevenueCatError("RevenueCat API returned invalid JSON") from e

    def close(self):
        self.http_client.close()
