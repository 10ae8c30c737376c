"""Environment-backed runtime configuration for the feed-sync runner."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path


def env_bool(name: str, default: bool, environ: Mapping[str, str] | None = None) -> bool:
    """Return boolean env value using common truthy spellings."""
    source = os.environ if environ is None else environ
    raw = source.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def env_int(name: str, default: int, environ: Mapping[str, str] | None = None) -> int:
    """Return integer env value, falling back to default on parse errors."""
    source = os.environ if environ is None else environ
    raw = source.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float, environ: Mapping[str, str] | None = None) -> float:
    """Return float env value, falling back to default on parse errors."""
    source = os.environ if environ is None else environ
    raw = source.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_list(name: str, environ: Mapping[str, str] | None = None, sep: str = ",") -> tuple[str, ...]:
    """Return a separator-split env value as a tuple of non-empty stripped strings."""
    source = os.environ if environ is None else environ
    raw = source.get(name) or ""
    return tuple(part.strip() for part in raw.split(sep) if part.strip())


@dataclass(frozen=True)
class SyncConfig:
    """Static settings for one vault. Nothing here is user-editable at runtime."""

    vault_root: Path
    folder: str = "read later"
    refresh_interval: timedelta = timedelta(hours=1)
    lookback: timedelta = timedelta(days=365)
    fetch_timeout: float = 10.0
    fetch_workers: int = 4
    cycle_interval: timedelta = timedelta(minutes=5)
    blacklist_urls: tuple[str, ...] = ()
    blacklist_titles: tuple[str, ...] = ()
    require_storage_synced: bool = False
    sync_lock_name: str = ".sync-in-progress"
    notice_ms: int = 4000


def load_sync_config(
    environ: Mapping[str, str] | None = None,
    *,
    vault_root: Path | None = None,
) -> SyncConfig:
    """Load sync configuration from environment. An explicit vault_root wins over READ_LATER_VAULT."""
    source = os.environ if environ is None else environ
    root = vault_root or Path(source.get("READ_LATER_VAULT", ".") or ".")
    return SyncConfig(
        vault_root=root.expanduser().resolve(),
        folder=(source.get("READ_LATER_FOLDER") or "read later").strip(),
        refresh_interval=timedelta(minutes=max(1, env_int("READ_LATER_REFRESH_MINUTES", 60, source))),
        lookback=timedelta(days=max(0, env_int("READ_LATER_LOOKBACK_DAYS", 365, source))),
        fetch_timeout=max(1.0, env_float("READ_LATER_FETCH_TIMEOUT", 10.0, source)),
        fetch_workers=max(1, env_int("READ_LATER_FETCH_WORKERS", 4, source)),
        cycle_interval=timedelta(minutes=max(1, env_int("READ_LATER_CYCLE_MINUTES", 5, source))),
        blacklist_urls=env_list("READ_LATER_BLACKLIST_URLS", source),
        blacklist_titles=env_list("READ_LATER_BLACKLIST_TITLES", source),
        require_storage_synced=env_bool("READ_LATER_REQUIRE_SYNCED", False, source),
        sync_lock_name=(source.get("READ_LATER_SYNC_LOCK") or ".sync-in-progress").strip(),
        notice_ms=max(0, env_int("READ_LATER_NOTICE_MS", 4000, source)),
    )
