"""File watcher: re-run sync when articles change."""

# mdblog:domain=infrastructure

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from mdblog.content.scanner import ARTICLE_SUFFIX
from mdblog.errors import SyncError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from mdblog.infrastructure.config import MdblogConfig
    from mdblog.infrastructure.db import ArticleStore
    from mdblog.reading.cache import CategoryCache

DEFAULT_DEBOUNCE_MS = 500


def _filter_relevant(
    changes: Iterable[tuple[object, str]],
    articles_dir: Path,
) -> list[tuple[object, str]]:
    """Keep only article changes, ignoring hidden/temp files.

    Category directories themselves are kept too, since removing a whole
    category must trigger a sync.
    """
    result: list[tuple[object, str]] = []

    for change_type, path_str in changes:
        p = Path(path_str)

        # Ignore temp files (name starts with ~ or ends with .tmp).
        if p.name.startswith("~") or p.name.endswith(".tmp"):
            continue

        try:
            rel = p.relative_to(articles_dir)
        except ValueError:
            continue

        if any(part.startswith(".") for part in rel.parts):
            continue

        # <category>/<slug>.md or a bare <category> directory, which may
        # itself contain dots.
        if len(rel.parts) == 2 and p.suffix == ARTICLE_SUFFIX:
            result.append((change_type, path_str))
        elif len(rel.parts) == 1 and p.suffix != ARTICLE_SUFFIX:
            result.append((change_type, path_str))

    return result


def _format_time() -> str:
    """Return current time as ``HH:MM:SS`` string."""
    return datetime.now(tz=timezone.utc).strftime("%H:%M:%S")


@dataclass(frozen=True)
class WatchEvent:
    """A single watch event after filtering and debounce."""

    files_changed: int
    removed: int
    saved: int
    failed: int


def watch(
    config: MdblogConfig,
    store: ArticleStore,
    *,
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    cache: CategoryCache | None = None,
    callback: Callable[[WatchEvent], None] | None = None,
) -> None:
    """Watch the articles tree and sync on changes.

    Requires ``watchfiles`` (optional dependency).
    """
    from rich.console import Console
    from watchfiles import watch as fs_watch

    from mdblog.infrastructure.sync import sync

    console = Console()

    articles_dir = config.articles_dir
    if not articles_dir.is_dir():
        console.print(f"[red]Articles directory not found: {articles_dir}[/red]")
        return

    console.print(f"[bold blue]Watching:[/bold blue] {articles_dir}")
    console.print(f"[dim]Debounce: {debounce_ms}ms  |  Press Ctrl+C to stop[/dim]")
    console.print()

    try:
        for batch in fs_watch(articles_dir, debounce=debounce_ms):
            relevant = _filter_relevant(batch, articles_dir)
            if not relevant:
                continue

            timestamp = _format_time()
            try:
                result = sync(
                    articles_dir,
                    store,
                    max_workers=config.max_workers,
                    api_prefix=config.api_prefix,
                    cache=cache,
                )
            except SyncError as exc:
                console.print(f"[dim]{timestamp}[/dim] [red]sync aborted:[/red] {exc}")
                continue

            console.print(
                f"[dim]{timestamp}[/dim] "
                f"[green]sync[/green] "
                f"({len(relevant)} file{'s' if len(relevant) != 1 else ''} changed: "
                f"{len(result.removed)} removed, {len(result.saved)} saved"
                + (f", [red]{len(result.failures)} failed[/red]" if result.failures else "")
                + ")"
            )

            if callback is not None:
                callback(
                    WatchEvent(
                        files_changed=len(relevant),
                        removed=len(result.removed),
                        saved=len(result.saved),
                        failed=len(result.failures),
                    )
                )

    except KeyboardInterrupt:
        console.print("\n[yellow]Watch stopped.[/yellow]")
