"""Vault access, notices, the repeating timer and the sync cycle."""

from readlater.runner.notify import ConsoleNotifier, Notice
from readlater.runner.sync import DocumentResult, FeedOutcome, SyncSummary, run_cycle, sync_document
from readlater.runner.timer import SyncTimer
from readlater.runner.vault import FileVault

__all__ = [
    "ConsoleNotifier",
    "Notice",
    "DocumentResult",
    "FeedOutcome",
    "SyncSummary",
    "run_cycle",
    "sync_document",
    "SyncTimer",
    "FileVault",
]
