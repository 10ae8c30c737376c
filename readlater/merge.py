"""Append eligible entries to a document as checklist lines, skipping links the document already contains."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime

from readlater.checklist import CREATED_SIGN, INCOMPLETE_MARKER, as_date, escape_title
from readlater.entries import CandidateEntry
from readlater.schedule import as_utc


@dataclass(frozen=True)
class MergeResult:
    content: str
    inserted: int = 0
    inserted_links: tuple[str, ...] = field(default_factory=tuple)

    @property
    def changed(self) -> bool:
        return self.inserted > 0


def render_checklist_line(entry: CandidateEntry, today: date | datetime) -> str:
    """Render one incomplete checklist line; an empty title falls back to the entry's ISO date."""
    title = escape_title(entry.title) or as_utc(entry.published).date().isoformat()
    return (
        f"{INCOMPLETE_MARKER} [{title}]({entry.link}) "
        f"[site:: {entry.source_domain}] {CREATED_SIGN} {as_date(today).isoformat()}"
    )


def chronological(entries: Sequence[CandidateEntry]) -> list[CandidateEntry]:
    """Oldest first. Native newest-first order is reversed before a stable sort, so equal timestamps read oldest-first too."""
    return sorted(reversed(list(entries)), key=lambda e: as_utc(e.published))


def merge_entries(
    content: str,
    entries: Sequence[CandidateEntry],
    today: date | datetime,
) -> MergeResult:
    """Append one checklist line per entry whose link is not already a substring of content.

    The check runs against the growing content, so duplicate links within entries are inserted once.
    Existing text is kept verbatim apart from trailing whitespace when something is appended.
    """
    out = content
    inserted: list[str] = []
    for entry in chronological(entries):
        if not entry.link or entry.link in out:
            continue
        line = render_checklist_line(entry, today)
        head = out.rstrip()
        out = f"{head}\n{line}" if head else line
        inserted.append(entry.link)
    if not inserted:
        return MergeResult(content=content)
    return MergeResult(content=out + "\n", inserted=len(inserted), inserted_links=tuple(inserted))
