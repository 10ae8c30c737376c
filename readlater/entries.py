"""Fetch a feed and normalize its items into CandidateEntry records (link, title, published, source_domain)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO

import feedparser
import requests
from dateutil import parser as dtparser

from readlater.errors import FetchError, ParseError
from readlater.schedule import EPOCH
from readlater.utils import html_to_plain_text, is_http_url, url_domain

DEFAULT_FETCH_TIMEOUT = 10.0
DEFAULT_REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; readlater/0.1; feed sync)",
    "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8",
}


@dataclass(frozen=True)
class CandidateEntry:
    """One feed item in canonical shape. link is the dedup key and is never rewritten."""

    link: str
    title: str
    published: datetime
    source_domain: str
    dated: bool = True


def parse_entry_date(entry) -> datetime | None:
    """Return datetime (UTC) for a feed entry from published/updated fields, or None."""
    for attr in ("published_parsed", "updated_parsed"):
        t = getattr(entry, attr, None)
        if t:
            try:
                return datetime(*t[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    for key in ("published", "updated", "created"):
        val = entry.get(key)
        if val:
            try:
                dt = dtparser.parse(val)
                return dt.astimezone(timezone.utc) if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
            except (ValueError, OverflowError):
                pass
    return None


def feed_source_domain(parsed_feed, feed_url: str) -> str:
    """Domain of the feed's self-declared link when it is a URL, else of the fetch URL; 'www.' stripped."""
    meta = getattr(parsed_feed, "feed", None) or {}
    declared = (meta.get("link") or "").strip()
    if is_http_url(declared):
        domain = url_domain(declared)
        if domain:
            return domain
    return url_domain(feed_url) or feed_url


def fetch_feed_bytes(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> bytes:
    """GET url once with a fixed timeout. Any network, timeout or HTTP status failure raises FetchError."""
    try:
        resp = requests.get(url, timeout=timeout, headers=DEFAULT_REQUEST_HEADERS)
        resp.raise_for_status()
    except requests.Timeout as e:
        raise FetchError(url, f"timed out after {timeout:g}s") from e
    except requests.RequestException as e:
        raise FetchError(url, str(e) or e.__class__.__name__) from e
    return resp.content


def normalize_feed(payload: bytes, feed_url: str) -> list[CandidateEntry]:
    """Parse payload as RSS/Atom and return its entries in native order.

    Entries without a link are dropped. Entries without a usable timestamp get the Unix epoch
    and dated=False. Raises ParseError when the payload is not a feed at all.
    """
    d = feedparser.parse(BytesIO(payload))
    entries = list(getattr(d, "entries", None) or [])
    has_channel = bool(getattr(d, "feed", None)) or bool(getattr(d, "version", ""))
    if not entries and not has_channel:
        reason = getattr(d, "bozo_exception", None) or "no feed channel or entries found"
        raise ParseError(feed_url, str(reason))

    domain = feed_source_domain(d, feed_url)
    items: list[CandidateEntry] = []
    for e in entries:
        link = (e.get("link") or "").strip()
        if not link:
            continue
        title = html_to_plain_text(e.get("title") or "")
        dt = parse_entry_date(e)
        items.append(
            CandidateEntry(
                link=link,
                title=title,
                published=dt or EPOCH,
                source_domain=domain,
                dated=dt is not None,
            )
        )
    return items


def fetch_entries(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> list[CandidateEntry]:
    """Fetch one feed URL and return its normalized entries. Raises FetchError or ParseError."""
    return normalize_feed(fetch_feed_bytes(url, timeout=timeout), url)
