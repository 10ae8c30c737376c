"""Checklist line format shared by the merge and cleanup steps.

    - [ ] [<title>](<link>) [site:: <domain>] ➕ <YYYY-MM-DD>
    - [x] ... ✅ <YYYY-MM-DD>
"""

from datetime import date, datetime

INCOMPLETE_MARKER = "- [ ]"
COMPLETE_MARKER = "- [x]"
CREATED_SIGN = "➕"
DONE_SIGN = "✅"


def as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def done_token(day: date | datetime) -> str:
    """Completion token for day, e.g. '✅ 2024-01-02'."""
    return f"{DONE_SIGN} {as_date(day).isoformat()}"


def _brackets_balanced(text: str) -> bool:
    depth = 0
    for ch in text:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def escape_title(title: str) -> str:
    """Keep a title on one line, escaping brackets only when they would close the link text early.

    Balanced brackets are valid link text and stay as they are.
    """
    text = " ".join((title or "").split())
    if _brackets_balanced(text):
        return text
    return text.replace("[", "\\[").replace("]", "\\]")


def is_complete_line(line: str) -> bool:
    return line.startswith(COMPLETE_MARKER)
