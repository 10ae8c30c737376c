"""Shared text and URL helpers used by the normalizer and the checklist renderer."""

import html
import re
from urllib.parse import urlparse

from lxml import etree
from lxml import html as lxml_html

_HTML_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def single_line(text: str) -> str:
    """Collapse all whitespace runs (newlines included) to single spaces and strip."""
    return _WS_RE.sub(" ", text or "").strip()


def html_to_plain_text(s: str) -> str:
    """Visible text of an HTML fragment such as a feed title, on one line.

    Text without markup or entities is only whitespace-collapsed. Fragments lxml rejects
    have their tags stripped by regex instead.
    """
    raw = str(s or "")
    if not raw.strip():
        return ""
    if "<" not in raw and "&" not in raw:
        return single_line(raw)
    try:
        text = lxml_html.fromstring(raw).text_content()
    except (etree.ParserError, etree.XMLSyntaxError, ValueError):
        text = html.unescape(_HTML_TAG_RE.sub(" ", raw))
    return single_line(text)


def is_http_url(url: str) -> bool:
    candidate = str(url or "").strip()
    if not candidate:
        return False
    parsed = urlparse(candidate)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def url_domain(url: str) -> str:
    """Return the lowercased host of url without port and without a leading 'www.'; '' when not a URL."""
    parsed = urlparse(str(url or "").strip())
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host
