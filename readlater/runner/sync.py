"""One sync cycle over the target folder: schedule gate, fetch + filter per feed, merge, cleanup, watermark."""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path

from readlater.cleanup import cleanup_completed
from readlater.config import SyncConfig
from readlater.entries import CandidateEntry, fetch_entries
from readlater.errors import FetchError, MalformedHeaderError, MissingFolderError, ParseError
from readlater.filters import Blacklist, filter_entries
from readlater.merge import merge_entries
from readlater.runner.notify import ConsoleNotifier, log
from readlater.runner.vault import FileVault
from readlater.schedule import advance_watermark, as_utc, default_watermark, format_watermark, is_due

Fetcher = Callable[[str, float], list[CandidateEntry]]
Notify = Callable[..., None]

STATUS_SYNCED = "synced"
STATUS_NO_FEEDS = "no-feeds"
STATUS_NOT_DUE = "not-due"
STATUS_BAD_HEADER = "malformed-header"
STATUS_ERROR = "error"


@dataclass
class FeedOutcome:
    url: str
    entries: list[CandidateEntry] = field(default_factory=list)
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


@dataclass
class DocumentResult:
    path: str
    status: str
    inserted: int = 0
    removed: int = 0
    written: bool = False
    watermark: datetime | None = None
    watermark_written: bool = False
    feeds: list[FeedOutcome] = field(default_factory=list)
    error: str = ""

    @property
    def feed_errors(self) -> list[str]:
        return [f.error for f in self.feeds if f.error]


@dataclass
class SyncSummary:
    """Outcome of one cycle. The inserted counter lives here, so every cycle starts from zero."""

    started_at: datetime
    documents: list[DocumentResult] = field(default_factory=list)
    aborted: str = ""

    @property
    def inserted(self) -> int:
        return sum(d.inserted for d in self.documents)

    @property
    def removed(self) -> int:
        return sum(d.removed for d in self.documents)

    @property
    def synced(self) -> list[DocumentResult]:
        return [d for d in self.documents if d.status == STATUS_SYNCED]


def local_today(now: datetime) -> date:
    """Calendar date of now in the machine's local timezone (the date the user sees on checklist lines)."""
    return as_utc(now).astimezone().date()


def fetch_document_entries(
    feeds: Sequence[str],
    *,
    fetch: Fetcher = fetch_entries,
    timeout: float = 10.0,
    workers: int = 4,
    notify: Notify | None = None,
    notice_ms: int = 4000,
) -> list[FeedOutcome]:
    """Fetch every feed of one document concurrently; results come back in feed order.

    FetchError and ParseError are recorded on the feed's outcome and reported; siblings are unaffected.
    Each wave of workers gets timeout seconds of wall clock. A fetch still running past its
    deadline is abandoned and recorded as timed out; its thread is not waited for.
    """
    if not feeds:
        return []
    max_workers = max(1, min(workers, len(feeds)))
    deadline = time.monotonic() + timeout * math.ceil(len(feeds) / max_workers)
    outcomes: list[FeedOutcome] = []
    executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="readlater-fetch")
    try:
        futures = [executor.submit(fetch, url, timeout) for url in feeds]
        for url, fut in zip(feeds, futures):
            try:
                entries = fut.result(timeout=max(0.0, deadline - time.monotonic()))
                outcomes.append(FeedOutcome(url=url, entries=list(entries)))
                continue
            except FuturesTimeoutError:
                fut.cancel()
                error = str(FetchError(url, f"timed out after {timeout:g}s"))
            except (FetchError, ParseError) as e:
                error = str(e)
            except Exception as e:
                error = f"{url}: unexpected {e.__class__.__name__}: {e}"
            log(f"Feed failed {error}", "warn")
            if notify is not None:
                notify(f"Feed failed: {error}", duration_ms=notice_ms, level="warn")
            outcomes.append(FeedOutcome(url=url, error=error))
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return outcomes


def sync_document(
    vault: FileVault,
    path: Path,
    config: SyncConfig,
    *,
    now: datetime,
    today: date,
    fetch: Fetcher = fetch_entries,
    notify: Notify | None = None,
) -> DocumentResult:
    """Sync one document. Content and watermark are written separately; a failed header write does not undo content."""
    rel = vault.relpath(path)
    try:
        meta = vault.read_meta(path)
    except MalformedHeaderError as e:
        message = f"Skipped because of malformed frontmatter: {e}"
        log(message, "warn")
        if notify is not None:
            notify(message, duration_ms=config.notice_ms, level="warn")
        return DocumentResult(path=rel, status=STATUS_BAD_HEADER, error=str(e))

    if meta is None or not meta.has_feeds:
        return DocumentResult(path=rel, status=STATUS_NO_FEEDS)

    watermark = meta.synced or default_watermark(now, config.lookback)
    if not is_due(now, watermark, config.refresh_interval):
        return DocumentResult(path=rel, status=STATUS_NOT_DUE, watermark=meta.synced)

    outcomes = fetch_document_entries(
        meta.feeds,
        fetch=fetch,
        timeout=config.fetch_timeout,
        workers=config.fetch_workers,
        notify=notify,
        notice_ms=config.notice_ms,
    )
    blacklist = Blacklist.from_lists(config.blacklist_urls, config.blacklist_titles)
    eligible: list[CandidateEntry] = []
    for outcome in outcomes:
        eligible.extend(filter_entries(outcome.entries, watermark, blacklist))

    # Read after the fetches so edits made while they ran are kept.
    content = vault.read(path)
    merged = merge_entries(content, eligible, today)
    cleaned = cleanup_completed(merged.content, today)
    written = cleaned.content != content
    if written:
        vault.modify(path, cleaned.content)

    result = DocumentResult(
        path=rel,
        status=STATUS_SYNCED,
        inserted=merged.inserted,
        removed=cleaned.removed,
        written=written,
        feeds=outcomes,
    )

    new_watermark = advance_watermark(meta.synced, now)

    def _set_synced(frontmatter: dict) -> None:
        frontmatter[meta.synced_key] = format_watermark(new_watermark)

    try:
        vault.process_frontmatter(path, _set_synced)
    except MalformedHeaderError as e:
        message = f"Timestamp failed to update because of malformed frontmatter on this file : {e}"
        log(message, "warn")
        if notify is not None:
            notify(message, duration_ms=config.notice_ms, level="warn")
        result.error = str(e)
        result.watermark = meta.synced
        return result
    result.watermark = new_watermark
    result.watermark_written = True
    return result


def run_cycle(
    vault: FileVault,
    config: SyncConfig,
    *,
    now: datetime | None = None,
    today: date | None = None,
    fetch: Fetcher = fetch_entries,
    notify: Notify | None = None,
) -> SyncSummary:
    """Run one cycle over every document in config.folder. No failure here escapes to the caller's timer."""
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    today = today or local_today(now)
    notify = notify if notify is not None else ConsoleNotifier()
    summary = SyncSummary(started_at=now)

    try:
        documents = vault.list_documents(config.folder)
    except MissingFolderError as e:
        log(str(e), "error")
        notify(str(e), duration_ms=config.notice_ms, level="error")
        summary.aborted = "missing-folder"
        return summary

    if config.require_storage_synced and not vault.is_fully_synced():
        summary.aborted = "storage-not-synced"
        return summary

    log(f"Syncing feeds for {len(documents)} documents in {config.folder!r}")
    for path in documents:
        try:
            result = sync_document(vault, path, config, now=now, today=today, fetch=fetch, notify=notify)
        except Exception as e:
            message = f"Sync failed for {vault.relpath(path)}: {e.__class__.__name__}: {e}"
            log(message, "error")
            notify(message, duration_ms=config.notice_ms, level="error")
            result = DocumentResult(path=vault.relpath(path), status=STATUS_ERROR, error=str(e))
        summary.documents.append(result)

    if summary.inserted > 0:
        notify(f"Added {summary.inserted} new items", duration_ms=config.notice_ms, level="info")
    return summary
