"""CLI entrypoint: sync, watch, status, cleanup."""

import argparse
import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from tqdm import tqdm

from readlater.cleanup import cleanup_completed
from readlater.config import SyncConfig, load_sync_config
from readlater.errors import MalformedHeaderError, MissingFolderError
from readlater.runner.notify import ConsoleNotifier, log
from readlater.runner.sync import local_today, run_cycle
from readlater.runner.timer import SyncTimer
from readlater.runner.vault import FileVault
from readlater.schedule import default_watermark, format_watermark, is_due


def _build(args: argparse.Namespace) -> tuple[SyncConfig, FileVault]:
    load_dotenv()
    config = load_sync_config(vault_root=getattr(args, "vault", None))
    if getattr(args, "folder", None):
        config = replace(config, folder=args.folder)
    return config, FileVault(config.vault_root, sync_lock_name=config.sync_lock_name)


def cmd_sync(args: argparse.Namespace) -> None:
    config, vault = _build(args)
    summary = run_cycle(vault, config, notify=ConsoleNotifier(quiet=args.quiet))
    if summary.aborted:
        tqdm.write(f"Cycle aborted: {summary.aborted}")
        sys.exit(1)
    for doc in summary.documents:
        errors = len(doc.feed_errors)
        tqdm.write(
            f"{doc.path}: {doc.status} (+{doc.inserted} / -{doc.removed}"
            + (f", {errors} feed errors" if errors else "")
            + ")"
        )
    tqdm.write(f"Inserted {summary.inserted} items across {len(summary.synced)} synced documents")


def cmd_watch(args: argparse.Namespace) -> None:
    config, vault = _build(args)
    notifier = ConsoleNotifier()
    timer = SyncTimer(lambda: run_cycle(vault, config, notify=notifier), config.cycle_interval)
    tqdm.write(
        f"Watching {config.vault_root / config.folder} every "
        f"{int(config.cycle_interval.total_seconds() // 60)} min (Ctrl-C to stop)"
    )
    timer.run_forever()


def cmd_status(args: argparse.Namespace) -> None:
    config, vault = _build(args)
    now = datetime.now(timezone.utc)
    try:
        documents = vault.list_documents(config.folder)
    except MissingFolderError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    for path in documents:
        rel = vault.relpath(path)
        try:
            meta = vault.read_meta(path)
        except MalformedHeaderError as e:
            print(f"{rel}\tmalformed frontmatter: {e}")
            continue
        except (OSError, UnicodeDecodeError) as e:
            print(f"{rel}\tunreadable: {e}")
            continue
        if meta is None or not meta.has_feeds:
            print(f"{rel}\tno feeds")
            continue
        watermark = meta.synced or default_watermark(now, config.lookback)
        due = is_due(now, watermark, config.refresh_interval)
        synced = format_watermark(meta.synced) if meta.synced else "never"
        print(f"{rel}\tsynced={synced}\tfeeds={len(meta.feeds)}\t{'due' if due else 'not due'}")


def cmd_cleanup(args: argparse.Namespace) -> None:
    config, vault = _build(args)
    today = local_today(datetime.now(timezone.utc))
    try:
        documents = vault.list_documents(config.folder)
    except MissingFolderError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    total = 0
    for path in documents:
        try:
            content = vault.read(path)
        except (OSError, UnicodeDecodeError) as e:
            log(f"Skipping {vault.relpath(path)}: {e}", "warn")
            continue
        result = cleanup_completed(content, today)
        if not result.changed:
            continue
        total += result.removed
        if args.dry_run:
            tqdm.write(f"[DRY-RUN] {vault.relpath(path)}: would remove {result.removed} completed items")
        else:
            vault.modify(path, result.content)
            tqdm.write(f"{vault.relpath(path)}: removed {result.removed} completed items")
    tqdm.write(f"Removed {total} completed items" if not args.dry_run else f"Would remove {total} completed items")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="readlater-runner", description="Sync subscribed feeds into read-later checklists")
    parser.add_argument("--vault", type=Path, default=None, help="Vault root (default: READ_LATER_VAULT or .)")
    parser.add_argument("--folder", type=str, default=None, help="Target folder inside the vault (default: READ_LATER_FOLDER or 'read later')")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_sync = subparsers.add_parser("sync", help="Run one sync cycle now")
    p_sync.add_argument("--quiet", action="store_true", help="Do not echo notices")
    p_sync.set_defaults(run=cmd_sync)

    p_watch = subparsers.add_parser("watch", help="Run a sync cycle on a fixed period until interrupted")
    p_watch.set_defaults(run=cmd_watch)

    p_status = subparsers.add_parser("status", help="Show watermark, feed count and due flag per document")
    p_status.set_defaults(run=cmd_status)

    p_cleanup = subparsers.add_parser("cleanup", help="Remove completed items not finished today, without fetching")
    p_cleanup.add_argument("--dry-run", action="store_true")
    p_cleanup.set_defaults(run=cmd_cleanup)

    args = parser.parse_args(argv)
    args.run(args)


if __name__ == "__main__":
    main()
