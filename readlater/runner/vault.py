"""Filesystem-backed vault: target documents are Markdown files directly under one folder of the vault root."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from readlater.errors import MissingFolderError
from readlater.frontmatter import DocumentMeta, read_document_meta, update_frontmatter

DOCUMENT_SUFFIX = ".md"


class FileVault:
    """Host collaborator over a directory tree. Writes are whole-file atomic replacements."""

    def __init__(self, root: Path, *, sync_lock_name: str = ".sync-in-progress"):
        self.root = Path(root)
        self.sync_lock_name = sync_lock_name

    def folder_path(self, folder: str) -> Path:
        return self.root / folder

    def relpath(self, path: Path) -> str:
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return str(path)

    def list_documents(self, folder: str) -> list[Path]:
        """Markdown files directly inside folder, sorted by name. Subfolders are not descended into."""
        base = self.folder_path(folder)
        if not base.is_dir():
            raise MissingFolderError(folder)
        return sorted(
            (p for p in base.iterdir() if p.is_file() and p.suffix.lower() == DOCUMENT_SUFFIX),
            key=lambda p: p.name,
        )

    def read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def modify(self, path: Path, text: str) -> None:
        """Replace the whole file via a temp file in the same directory and os.replace."""
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.tmp.", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as tf:
                tf.write(text)
            os.replace(temp_name, path)
        finally:
            if os.path.exists(temp_name):
                os.unlink(temp_name)

    def read_meta(self, path: Path) -> DocumentMeta | None:
        """Typed sync metadata, or None when the document has no frontmatter. May raise MalformedHeaderError."""
        return read_document_meta(self.read(path), path=self.relpath(path))

    def process_frontmatter(self, path: Path, mutator: Callable[[dict[str, Any]], None]) -> None:
        """Rewrite the frontmatter of path with mutator. Raises MalformedHeaderError, leaving the file untouched."""
        text = self.read(path)
        updated = update_frontmatter(text, mutator, path=self.relpath(path))
        if updated != text:
            self.modify(path, updated)

    def is_fully_synced(self) -> bool:
        """False while the storage sync lock file exists at the vault root."""
        if not self.sync_lock_name:
            return True
        return not (self.root / self.sync_lock_name).exists()
