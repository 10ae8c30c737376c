"""Pull new feed items into read-later checklists, dedup by link and prune completed items."""

from readlater.cleanup import CleanupResult, cleanup_completed
from readlater.entries import CandidateEntry, fetch_entries, normalize_feed
from readlater.errors import FetchError, MalformedHeaderError, MissingFolderError, ParseError, ReadLaterError
from readlater.filters import Blacklist, filter_entries
from readlater.merge import MergeResult, merge_entries, render_checklist_line
from readlater.schedule import is_due, resolve_watermark

__all__ = [
    "CleanupResult",
    "cleanup_completed",
    "CandidateEntry",
    "fetch_entries",
    "normalize_feed",
    "FetchError",
    "MalformedHeaderError",
    "MissingFolderError",
    "ParseError",
    "ReadLaterError",
    "Blacklist",
    "filter_entries",
    "MergeResult",
    "merge_entries",
    "render_checklist_line",
    "is_due",
    "resolve_watermark",
]
