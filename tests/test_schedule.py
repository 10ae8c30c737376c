"""Tests for readlater.schedule (due predicate, watermark parse/advance/format)."""

import unittest
from datetime import date, datetime, timedelta, timezone

from readlater.schedule import (
    EPOCH,
    advance_watermark,
    default_watermark,
    format_watermark,
    is_due,
    parse_watermark,
    resolve_watermark,
)

UTC = timezone.utc
HOUR = timedelta(hours=1)


class IsDueTests(unittest.TestCase):
    def test_two_hours_after_watermark_is_due(self) -> None:
        watermark = datetime(2024, 1, 1, tzinfo=UTC)
        now = datetime(2024, 1, 1, 2, 0, tzinfo=UTC)
        self.assertTrue(is_due(now, watermark, HOUR))

    def test_within_interval_is_not_due(self) -> None:
        watermark = datetime(2024, 1, 1, tzinfo=UTC)
        now = datetime(2024, 1, 1, 0, 30, tzinfo=UTC)
        self.assertFalse(is_due(now, watermark, HOUR))

    def test_exact_boundary_is_due(self) -> None:
        watermark = datetime(2024, 1, 1, tzinfo=UTC)
        self.assertTrue(is_due(watermark + HOUR, watermark, HOUR))

    def test_missing_watermark_is_always_due(self) -> None:
        self.assertTrue(is_due(datetime(2024, 1, 1, tzinfo=UTC), None, HOUR))

    def test_naive_values_are_treated_as_utc(self) -> None:
        self.assertTrue(is_due(datetime(2024, 1, 1, 2), datetime(2024, 1, 1, tzinfo=UTC), HOUR))


class ParseWatermarkTests(unittest.TestCase):
    def test_iso_minute_precision(self) -> None:
        self.assertEqual(parse_watermark("2024-01-01T10:00"), datetime(2024, 1, 1, 10, 0, tzinfo=UTC))

    def test_iso_with_offset_is_converted_to_utc(self) -> None:
        self.assertEqual(
            parse_watermark("2024-01-01T10:00:00+02:00"),
            datetime(2024, 1, 1, 8, 0, tzinfo=UTC),
        )

    def test_epoch_milliseconds_int_and_string(self) -> None:
        expected = datetime(2024, 1, 1, tzinfo=UTC)
        self.assertEqual(parse_watermark(1704067200000), expected)
        self.assertEqual(parse_watermark("1704067200000"), expected)

    def test_date_value(self) -> None:
        self.assertEqual(parse_watermark(date(2024, 1, 1)), datetime(2024, 1, 1, tzinfo=UTC))

    def test_unusable_values_return_none(self) -> None:
        for value in (None, "", "   ", "not a date", True, []):
            with self.subTest(value=value):
                self.assertIsNone(parse_watermark(value))

    def test_resolve_defaults_to_lookback(self) -> None:
        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        lookback = timedelta(days=365)
        self.assertEqual(resolve_watermark(None, now, lookback), now - lookback)
        self.assertEqual(resolve_watermark("garbage", now, lookback), default_watermark(now, lookback))
        self.assertEqual(
            resolve_watermark("2024-05-01T00:00", now, lookback),
            datetime(2024, 5, 1, tzinfo=UTC),
        )


class AdvanceWatermarkTests(unittest.TestCase):
    def test_truncates_now_to_minute(self) -> None:
        now = datetime(2024, 1, 2, 12, 34, 56, 789, tzinfo=UTC)
        self.assertEqual(advance_watermark(None, now), datetime(2024, 1, 2, 12, 34, tzinfo=UTC))

    def test_never_moves_backwards(self) -> None:
        previous = datetime(2030, 1, 1, tzinfo=UTC)
        now = datetime(2024, 1, 1, tzinfo=UTC)
        self.assertEqual(advance_watermark(previous, now), previous)

    def test_monotonic_over_many_cycles(self) -> None:
        watermark = None
        start = datetime(2024, 1, 1, tzinfo=UTC)
        for offset in (0, 5, 3, 61, 60, 125):
            before = watermark
            watermark = advance_watermark(watermark, start + timedelta(minutes=offset))
            if before is not None:
                self.assertGreaterEqual(watermark, before)


class FormatWatermarkTests(unittest.TestCase):
    def test_minute_format(self) -> None:
        self.assertEqual(format_watermark(datetime(2024, 1, 2, 9, 5, tzinfo=UTC)), "2024-01-02T09:05")

    def test_seconds_are_kept_when_present(self) -> None:
        value = datetime(2024, 1, 2, 9, 5, 7, tzinfo=UTC)
        self.assertEqual(format_watermark(value), "2024-01-02T09:05:07")
        self.assertEqual(parse_watermark(format_watermark(value)), value)

    def test_epoch_round_trip(self) -> None:
        self.assertEqual(parse_watermark(format_watermark(EPOCH)), EPOCH)


if __name__ == "__main__":
    unittest.main()
