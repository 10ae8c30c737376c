"""YAML-like frontmatter for target documents: parse, render, and the typed sync metadata view."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from readlater.errors import MalformedHeaderError
from readlater.schedule import parse_watermark

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)", re.DOTALL | re.MULTILINE)

SYNCED_KEY = "synced"
FEEDS_KEY = "feeds"
LEGACY_SYNCED_KEY = "xml_synced"
LEGACY_FEEDS_KEY = "xml_feeds"
BOM = "\ufeff"


class FrontmatterSyntaxError(ValueError):
    """Raised by strict parsing; callers that know the document path wrap it in MalformedHeaderError."""


def _parse_scalar(raw: str, *, strict: bool = False) -> Any:
    value = raw.strip()
    if value == "":
        return ""
    if value in ("null", "~"):
        return None
    if value == "true":
        return True
    if value == "false":
        return False
    if value.startswith('"'):
        if value.endswith('"') and len(value) >= 2:
            inner = value[1:-1]
            return inner.replace(r"\\", "\\").replace(r'\"', '"')
        if strict:
            raise FrontmatterSyntaxError(f"Unterminated double-quoted value: {value}")
        return value
    if value.startswith("'"):
        if value.endswith("'") and len(value) >= 2:
            return value[1:-1].replace("''", "'")
        if strict:
            raise FrontmatterSyntaxError(f"Unterminated single-quoted value: {value}")
        return value
    if re.fullmatch(r"-?\d+", value):
        try:
            return int(value)
        except ValueError:
            return value
    if re.fullmatch(r"-?\d+\.\d+", value):
        try:
            return float(value)
        except ValueError:
            return value
    return value


def _parse_flow_list(raw: str, *, strict: bool) -> list[Any]:
    inner = raw.strip()[1:-1].strip()
    if not inner:
        return []
    return [_parse_scalar(part, strict=strict) for part in inner.split(",") if part.strip()]


def parse_frontmatter(text: str, *, strict: bool = False) -> dict[str, Any]:
    """Parse YAML-like frontmatter text (key: value, - list items, [a, b] flow lists) into a dict.

    Lenient mode skips lines it does not understand, nested mapping entries included. Strict mode
    raises FrontmatterSyntaxError instead, so a header that would be mangled by a rewrite is never written back.
    """
    data: dict[str, Any] = {}
    current_list_key: str | None = None
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.rstrip()
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if stripped.startswith("- ") or stripped == "-":
            if current_list_key is None:
                if strict:
                    raise FrontmatterSyntaxError(f"line {lineno}: list item without a key")
                continue
            data.setdefault(current_list_key, [])
            if not isinstance(data[current_list_key], list):
                data[current_list_key] = []
            data[current_list_key].append(_parse_scalar(stripped[2:], strict=strict))
            continue

        if ":" not in stripped:
            if strict:
                raise FrontmatterSyntaxError(f"line {lineno}: expected 'key: value', got {stripped!r}")
            current_list_key = None
            continue

        key, raw_value = stripped.split(":", 1)
        key = key.strip()
        if line != line.lstrip() or not key:
            if strict:
                raise FrontmatterSyntaxError(f"line {lineno}: unsupported mapping entry {stripped!r}")
            current_list_key = None
            continue
        value = raw_value.strip()
        if value == "[]":
            data[key] = []
            current_list_key = None
            continue
        if value.startswith("[") and value.endswith("]"):
            data[key] = _parse_flow_list(value, strict=strict)
            current_list_key = None
            continue
        if strict and value.startswith("[") != value.endswith("]"):
            raise FrontmatterSyntaxError(f"line {lineno}: unterminated flow list for {key!r}")
        if value == "":
            data[key] = []
            current_list_key = key
            continue
        data[key] = _parse_scalar(value, strict=strict)
        current_list_key = None

    return data


def split_frontmatter_and_body(markdown: str, *, strict: bool = False) -> tuple[dict[str, Any], str]:
    """Split markdown into (frontmatter dict, body). Returns ({}, markdown) if no leading --- block.

    In strict mode an opening '---' with no closing delimiter is an error rather than body text.
    """
    if not markdown.startswith("---"):
        return {}, markdown
    match = _FRONTMATTER_RE.match(markdown)
    if not match:
        if strict and markdown.split("\n", 1)[0].rstrip() == "---":
            raise FrontmatterSyntaxError("frontmatter block is not closed with '---'")
        return {}, markdown
    return parse_frontmatter(match.group(1), strict=strict), markdown[match.end() :]


def has_frontmatter(markdown: str) -> bool:
    return bool(_FRONTMATTER_RE.match(markdown))


def _yaml_quote(value: str) -> str:
    escaped = value.replace("\\", r"\\").replace('"', r'\"')
    return f'"{escaped}"'


def _yaml_scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return _yaml_quote(str(value))


def render_frontmatter(data: dict[str, Any]) -> str:
    """Serialize a dict to YAML frontmatter (--- ... ---), keeping the dict's key order."""
    lines = ["---"]
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                lines.append(f"{key}: []")
                continue
            lines.append(f"{key}:")
            for item in value:
                lines.append(f"  - {_yaml_scalar(item)}")
            continue
        lines.append(f"{key}: {_yaml_scalar(value)}")
    lines.append("---")
    return "\n".join(lines)


@dataclass(frozen=True)
class DocumentMeta:
    """Typed view of the sync keys of one document's frontmatter."""

    feeds: tuple[str, ...] = ()
    synced: datetime | None = None
    synced_key: str = SYNCED_KEY

    @property
    def has_feeds(self) -> bool:
        return bool(self.feeds)


def _feed_list(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return ()
    out: list[str] = []
    for item in value:
        url = str(item or "").strip()
        if url and url not in out:
            out.append(url)
    return tuple(out)


def document_meta_from_dict(data: dict[str, Any]) -> DocumentMeta:
    """Validate a parsed frontmatter dict into DocumentMeta. Legacy xml_* keys are honoured when the plain keys are absent."""
    feeds_value = data.get(FEEDS_KEY)
    if feeds_value is None:
        feeds_value = data.get(LEGACY_FEEDS_KEY)
    if SYNCED_KEY in data or LEGACY_SYNCED_KEY not in data:
        synced_key = SYNCED_KEY
    else:
        synced_key = LEGACY_SYNCED_KEY
    return DocumentMeta(
        feeds=_feed_list(feeds_value),
        synced=parse_watermark(data.get(synced_key)),
        synced_key=synced_key,
    )


def _split_bom(markdown: str) -> tuple[str, str]:
    if markdown.startswith(BOM):
        return BOM, markdown[len(BOM) :]
    return "", markdown


def read_document_meta(markdown: str, *, path: str = "<document>") -> DocumentMeta | None:
    """Return DocumentMeta for a document, or None when it has no frontmatter block.

    Only the sync keys are needed here, so the header is parsed leniently; nested mappings and
    other YAML the writer cannot round-trip are ignored. An opening '---' that is never closed
    raises MalformedHeaderError.
    """
    _, text = _split_bom(markdown)
    if not text.startswith("---"):
        return None
    match = _FRONTMATTER_RE.match(text)
    if not match:
        if text.split("\n", 1)[0].rstrip() == "---":
            raise MalformedHeaderError(path, "frontmatter block is not closed with '---'")
        return None
    return document_meta_from_dict(parse_frontmatter(match.group(1)))


def update_frontmatter(
    markdown: str,
    mutator: Callable[[dict[str, Any]], None],
    *,
    path: str = "<document>",
) -> str:
    """Return markdown with its frontmatter rewritten by mutator (which edits the dict in place).

    Raises MalformedHeaderError when the existing header cannot be parsed strictly.
    A document without a header gets a new one. A leading byte order mark is kept.
    """
    bom, text = _split_bom(markdown)
    try:
        data, body = split_frontmatter_and_body(text, strict=True)
    except FrontmatterSyntaxError as exc:
        raise MalformedHeaderError(path, str(exc)) from exc
    if not has_frontmatter(text):
        body = text
    mutator(data)
    out = bom + render_frontmatter(data) + "\n"
    if body:
        out += body
    return out
