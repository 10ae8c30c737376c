"""Prune completed checklist lines whose completion date is not today."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from readlater.checklist import done_token, is_complete_line


@dataclass(frozen=True)
class CleanupResult:
    content: str
    removed: int = 0

    @property
    def changed(self) -> bool:
        return self.removed > 0


def is_stale_completed_line(line: str, today: date | datetime) -> bool:
    """True for a '- [x]' line without today's '✅ YYYY-MM-DD' token. Other lines are never stale."""
    return is_complete_line(line) and done_token(today) not in line


def cleanup_completed(content: str, today: date | datetime) -> CleanupResult:
    """Drop stale completed lines. Returns the input untouched when nothing was removed."""
    lines = content.split("\n")
    kept = [line for line in lines if not is_stale_completed_line(line, today)]
    removed = len(lines) - len(kept)
    if not removed:
        return CleanupResult(content=content)
    return CleanupResult(content="\n".join(kept), removed=removed)
