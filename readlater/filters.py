"""Watermark cutoff and blacklist policy applied to normalized entries."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from readlater.entries import CandidateEntry
from readlater.schedule import as_utc


@dataclass(frozen=True)
class Blacklist:
    """Case-insensitive substrings; a match on link (urls) or title (titles) excludes the entry."""

    urls: tuple[str, ...] = ()
    titles: tuple[str, ...] = ()

    @classmethod
    def from_lists(cls, urls: Iterable[str] = (), titles: Iterable[str] = ()) -> "Blacklist":
        return cls(
            urls=tuple(u.strip().lower() for u in urls if u and u.strip()),
            titles=tuple(t.strip().lower() for t in titles if t and t.strip()),
        )


def is_blacklisted(entry: CandidateEntry, blacklist: Blacklist) -> bool:
    link = entry.link.lower()
    if any(u.lower() in link for u in blacklist.urls if u):
        return True
    title = entry.title.lower()
    return any(t.lower() in title for t in blacklist.titles if t)


def filter_entries(
    entries: Iterable[CandidateEntry],
    watermark: datetime,
    blacklist: Blacklist | None = None,
) -> list[CandidateEntry]:
    """Keep entries published at or after watermark and not blacklisted; order preserved.

    Undated entries always pass the cutoff; dedup by link in the merge keeps them from repeating.
    """
    cutoff = as_utc(watermark)
    blacklist = blacklist or Blacklist()
    out: list[CandidateEntry] = []
    for entry in entries:
        if entry.dated and as_utc(entry.published) < cutoff:
            continue
        if is_blacklisted(entry, blacklist):
            continue
        out.append(entry)
    return out
