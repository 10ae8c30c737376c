"""Error taxonomy for the feed-sync engine. Every error here is recoverable by the sync cycle."""

from __future__ import annotations


class ReadLaterError(Exception):
    """Base class for sync errors."""


class FetchError(ReadLaterError):
    """Feed retrieval failed (network error, HTTP error status, or timeout)."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url


class ParseError(ReadLaterError):
    """Retrieved payload is not a feed document."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url


class MalformedHeaderError(ReadLaterError):
    """A document's frontmatter block cannot be parsed."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class MissingFolderError(ReadLaterError):
    """The configured target folder does not exist in the vault."""

    def __init__(self, folder: str):
        super().__init__(f"Folder does not exist: {folder}")
        self.folder = folder
