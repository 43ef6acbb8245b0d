"""Tests for babies.datetime_utils (ISO formatting and parsing)."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase

from .datetime_utils import isoformat_utc, now_iso, parse_iso_timestamp


class IsoformatUtcTests(SimpleTestCase):
    def test_none(self):
        self.assertIsNone(isoformat_utc(None))

    def test_utc_uses_z_suffix_and_milliseconds(self):
        value = datetime(2025, 2, 17, 10, 0, 0, 123456, tzinfo=timezone.utc)
        self.assertEqual(isoformat_utc(value), "2025-02-17T10:00:00.123Z")

    def test_other_timezone_converted_to_utc(self):
        value = datetime(2025, 2, 17, 5, 0, tzinfo=ZoneInfo("America/New_York"))
        self.assertEqual(isoformat_utc(value), "2025-02-17T10:00:00.000Z")

    def test_now_iso(self):
        fixed = datetime(2025, 2, 17, 10, 0, tzinfo=timezone.utc)
        with patch("babies.datetime_utils.django_tz.now", return_value=fixed):
            self.assertEqual(now_iso(), "2025-02-17T10:00:00.000Z")


class ParseIsoTimestampTests(SimpleTestCase):
    def test_z_suffix(self):
        self.assertEqual(
            parse_iso_timestamp("2025-02-17T10:00:00Z"),
            datetime(2025, 2, 17, 10, 0, tzinfo=timezone.utc),
        )

    def test_offset_normalized_to_utc(self):
        parsed = parse_iso_timestamp("2025-02-17T12:00:00+02:00")
        self.assertEqual(parsed, datetime(2025, 2, 17, 10, 0, tzinfo=timezone.utc))
        self.assertEqual(parsed.utcoffset(), timedelta(0))

    def test_naive_treated_as_utc(self):
        self.assertEqual(
            parse_iso_timestamp("2025-02-17T10:00:00"),
            datetime(2025, 2, 17, 10, 0, tzinfo=timezone.utc),
        )

    def test_bare_date_is_midnight_utc(self):
        parsed = parse_iso_timestamp("2025-02-17")
        self.assertEqual(parsed, datetime(2025, 2, 17, tzinfo=timezone.utc))
        self.assertEqual(parsed.date(), date(2025, 2, 17))

    def test_invalid_values(self):
        for value in ("", None, "yesterday", "2025-13-45T99:00:00Z", 12345):
            with self.subTest(value=value):
                self.assertIsNone(parse_iso_timestamp(value))
