"""Tests for the RevenueCat client using httpx.MockTransport."""

import json

import httpx
from django.test import SimpleTestCase, override_settings

from django_project.test_constants import TEST_APP_USER_ID

from .revenuecat import RevenueCatClient, RevenueCatError, duration_for_months


def make_client(handler, api_key="rc-secret"):
    return RevenueCatClient(
        api_key=api_key,
        base_url="https://rc.test/v1",
        entitlement="premium",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


class DurationMappingTests(SimpleTestCase):
    def test_known_durations(self):
        self.assertEqual(duration_for_months(1), "monthly")
        self.assertEqual(duration_for_months(2), "two_month")
        self.assertEqual(duration_for_months(3), "three_month")
        self.assertEqual(duration_for_months(6), "six_month")
        self.assertEqual(duration_for_months(12), "yearly")

    def test_unknown_duration_falls_back_to_monthly(self):
        self.assertEqual(duration_for_months(5), "monthly")


class GrantPromotionalEntitlementTests(SimpleTestCase):
    def test_grant_request(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"subscriber": {"entitlements": {}}})

        client = make_client(handler)
        result = client.grant_promotional_entitlement(TEST_APP_USER_ID, 3)

        self.assertEqual(result, {"subscriber": {"entitlements": {}}})
        request = seen[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(
            request.url.path,
            f"/v1/subscribers/{TEST_APP_USER_ID}/entitlements/premium/promotional",
        )
        self.assertEqual(request.headers["Authorization"], "Bearer rc-secret")
        self.assertEqual(request.headers["X-Platform"], "stripe")
        body = json.loads(request.content)
        self.assertEqual(body["duration"], "three_month")
        self.assertIsInstance(body["start_time_ms"], int)

    def test_error_status_raises(self):
        client = make_client(lambda request: httpx.Response(404, json={"code": 7259}))
        with self.assertRaises(RevenueCatError):
            client.grant_promotional_entitlement(TEST_APP_USER_ID, 1)

    def test_non_json_success_raises(self):
        client = make_client(
            lambda request: httpx.Response(200, text="<html>maintenance</html>")
        )
        with self.assertLogs("vouchers.revenuecat", level="ERROR"):
            with self.assertRaisesRegex(RevenueCatError, "invalid JSON"):
                client.grant_promotional_entitlement(TEST_APP_USER_ID, 1)

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        with self.assertRaises(RevenueCatError):
            client.grant_promotional_entitlement(TEST_APP_USER_ID, 1)

    def test_missing_api_key_raises_without_request(self):
        seen = []
        client = make_client(lambda request: seen.append(request), api_key="")
        with self.assertRaises(RevenueCatError):
            client.grant_promotional_entitlement(TEST_APP_USER_ID, 1)
        self.assertEqual(seen, [])

    @override_settings(
        REVENUECAT_SECRET_API_KEY="from-settings",
        REVENUECAT_API_URL="https://rc.example/v1/",
        REVENUECAT_ENTITLEMENT_IDENTIFIER="gold",
    )
    def test_from_settings(self):
        client = RevenueCatClient.from_settings()
        self.addCleanup(client.close)
        self.assertEqual(client.api_key, "from-settings")
        self.assertEqual(client.base_url, "https://rc.example/v1")
        self.assertEqual(client.entitlement, "gold")
