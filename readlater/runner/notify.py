"""User-visible notices and diagnostic log lines."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from tqdm import tqdm

DEFAULT_NOTICE_MS = 4000
HISTORY_LIMIT = 200


@dataclass(frozen=True)
class Notice:
    message: str
    duration_ms: int = DEFAULT_NOTICE_MS
    level: str = "info"


def log(message: str, level: str = "info") -> None:
    """Diagnostic line in the runner's '[LEVEL] message' format."""
    tqdm.write(f"[{level.upper()}] {message}")


@dataclass
class ConsoleNotifier:
    """Fire-and-forget notices written to the console. The most recent HISTORY_LIMIT are kept in history."""

    prefix: str = "Read Later"
    quiet: bool = False
    history: deque[Notice] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))

    def __call__(self, message: str, duration_ms: int = DEFAULT_NOTICE_MS, level: str = "info") -> None:
        self.notify(message, duration_ms=duration_ms, level=level)

    def notify(self, message: str, duration_ms: int = DEFAULT_NOTICE_MS, level: str = "info") -> None:
        notice = Notice(message=message, duration_ms=duration_ms, level=level)
        self.history.append(notice)
        if not self.quiet:
            tqdm.write(f"[{level.upper()}] {self.prefix} - {message}")
