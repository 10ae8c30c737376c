"""Root entrypoint for the feed sync runner. Runs from repo root so that
'python sync_feeds.py sync' and 'uv run python sync_feeds.py watch' work as documented."""

from readlater.runner.cli import main

if __name__ == "__main__":
    main()
