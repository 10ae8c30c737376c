"""Per-document refresh policy and the watermark's storage format."""

from __future__ import annotations

from datetime import date, datetime, time as dt_time, timedelta, timezone
from typing import Any

from dateutil import parser as dtparser

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
WATERMARK_FORMAT = "%Y-%m-%dT%H:%M"


def as_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime; naive values are taken to be UTC already."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_watermark(value: Any) -> datetime | None:
    """Parse a stored watermark: ISO-8601 text, epoch milliseconds, or a date/datetime. None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, dt_time(0, 0), tzinfo=timezone.utc)
    if isinstance(value, (int, float)):
        try:
            return EPOCH + timedelta(milliseconds=value)
        except OverflowError:
            return None
    text = str(value).strip()
    if not text:
        return None
    if text.lstrip("-").isdigit() and len(text.lstrip("-")) > 8:
        return parse_watermark(int(text))
    try:
        return as_utc(dtparser.isoparse(text))
    except (ValueError, OverflowError):
        pass
    try:
        return as_utc(dtparser.parse(text))
    except (ValueError, OverflowError):
        return None


def default_watermark(now: datetime, lookback: timedelta) -> datetime:
    return as_utc(now) - lookback


def resolve_watermark(value: Any, now: datetime, lookback: timedelta) -> datetime:
    """Stored watermark, or now - lookback when the document has none (or an unparseable one)."""
    parsed = parse_watermark(value)
    if parsed is None:
        return default_watermark(now, lookback)
    return parsed


def is_due(now: datetime, watermark: datetime | None, interval: timedelta) -> bool:
    """True when at least one interval has elapsed since watermark. A missing watermark is always due."""
    if watermark is None:
        return True
    return as_utc(now) >= as_utc(watermark) + interval


def advance_watermark(previous: datetime | None, now: datetime) -> datetime:
    """Next watermark: now truncated to the minute, never earlier than previous."""
    candidate = as_utc(now).replace(second=0, microsecond=0)
    if previous is not None and as_utc(previous) > candidate:
        return as_utc(previous)
    return candidate


def format_watermark(dt: datetime) -> str:
    """Render in UTC as YYYY-MM-DDTHH:MM, widening to seconds/microseconds only when needed to stay exact."""
    value = as_utc(dt)
    if value.microsecond:
        return value.replace(tzinfo=None).isoformat(timespec="microseconds")
    if value.second:
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    return value.strftime(WATERMARK_FORMAT)
