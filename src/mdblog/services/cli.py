"""mdblog CLI entry point."""

# mdblog:service=cli

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from mdblog import __version__

if TYPE_CHECKING:
    from mdblog.infrastructure.db import ArticleStore

_PROJECT_OPTION = click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.INFO

    root = logging.getLogger("mdblog")
    root.handlers.clear()
    root.addHandler(
        RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    )
    root.setLevel(level)


# mdblog:service=cli
@click.group()
@click.version_option(version=__version__, prog_name="mdblog")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """mdblog - markdown articles -> versioned article store."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    _configure_logging(verbose=verbose, quiet=quiet)


def _open_store_or_exit(db_path: Path) -> ArticleStore:
    from mdblog.infrastructure.db import ArticleStore

    if not db_path.exists():
        click.echo("Error: database not found. Run `mdblog sync` first.", err=True)
        sys.exit(1)
    return ArticleStore.open(db_path)


# mdblog:domain=sync
@main.command()
@_PROJECT_OPTION
@click.option(
    "--articles-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Articles directory (default: from config.yml or 'articles/').",
)
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Max parallel jobs.")
def sync(*, project: Path | None, articles_dir: Path | None, workers: int | None) -> None:
    """Synchronize the article store with the articles directory.

    Outdated articles are replaced, articles removed from disk are removed
    from the store, and new articles are inserted.  Exits with status 1 if
    the articles directory cannot be read.
    """
    from mdblog.errors import SyncError
    from mdblog.infrastructure.config import load_config
    from mdblog.infrastructure.db import ArticleStore
    from mdblog.infrastructure.sync import sync as do_sync

    config = load_config(project or Path.cwd())
    source = articles_dir.resolve() if articles_dir is not None else config.articles_dir

    store = ArticleStore.open(config.db_path)
    try:
        result = do_sync(
            source,
            store,
            max_workers=workers or config.max_workers,
            api_prefix=config.api_prefix,
        )
    except SyncError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    finally:
        store.close()

    if result.nothing_changed:
        click.echo("No changes detected. Store is up to date.")
    else:
        click.echo(f"Removed:   {len(result.removed)}")
        click.echo(f"Saved:     {len(result.saved)}")
    click.echo(f"Unchanged: {result.unchanged}")
    if result.failures:
        click.echo("")
        for failure in result.failures:
            click.echo(f"  [ERR] {failure.key}: {failure.reason}")


# mdblog:domain=reading
@main.command()
@_PROJECT_OPTION
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def status(*, project: Path | None, output_json: bool) -> None:
    """Show categories with article counts and last sync time."""
    from mdblog.infrastructure.config import load_config
    from mdblog.reading.queries import list_categories

    config = load_config(project or Path.cwd())
    store = _open_store_or_exit(config.db_path)
    try:
        categories = list_categories(store)
        last_sync = store.get_meta("last_sync_at", "never")
        version = store.get_meta("mdblog_version", "unknown")
    finally:
        store.close()

    total = sum(categories.values())
    if output_json:
        data = {
            "version": version,
            "last_sync": last_sync,
            "total": total,
            "categories": sorted(categories.items()),
        }
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    from rich.console import Console
    from rich.table import Table

    table = Table(title=f"mdblog v{version}  |  last sync: {last_sync}")
    table.add_column("Category")
    table.add_column("Articles", justify="right")
    for name, count in sorted(categories.items()):
        table.add_row(name, str(count))
    table.add_row("[bold]total[/bold]", f"[bold]{total}[/bold]")
    Console().print(table)


# mdblog:domain=reading
@main.command(name="list")
@_PROJECT_OPTION
@click.option("--category", default=None, help="Only list this category.")
@click.option("--month", default=None, help="Month as YYYY-MM (default: current month).")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def list_cmd(
    *,
    project: Path | None,
    category: str | None,
    month: str | None,
    output_json: bool,
) -> None:
    """List articles modified in a month, newest first."""
    from mdblog.infrastructure.config import load_config
    from mdblog.reading.queries import list_articles, list_categories

    config = load_config(project or Path.cwd())
    store = _open_store_or_exit(config.db_path)
    try:
        if category is not None and category not in list_categories(store):
            click.echo(f"Error: category '{category}' not found.", err=True)
            sys.exit(1)
        try:
            articles = list_articles(store, month=month, category=category)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--month") from exc
    finally:
        store.close()

    if output_json:
        payload = []
        for article in articles:
            data = article.to_dict()
            del data["content"]
            payload.append(data)
        click.echo(json.dumps({"articles": payload}, indent=2, ensure_ascii=False))
        return

    if not articles:
        click.echo("No articles.")
        return
    from datetime import datetime, timezone

    for article in articles:
        when = datetime.fromtimestamp(article.mtime / 1000, tz=timezone.utc)
        click.echo(f"{when:%Y-%m-%d}  {article.category}/{article.slug}  {article.title}")


# mdblog:domain=reading
@main.command()
@click.argument("category")
@click.argument("slug")
@_PROJECT_OPTION
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def show(*, category: str, slug: str, project: Path | None, output_json: bool) -> None:
    """Show one stored article."""
    from mdblog.infrastructure.config import load_config
    from mdblog.reading.queries import get_article

    config = load_config(project or Path.cwd())
    store = _open_store_or_exit(config.db_path)
    try:
        article = get_article(store, category, slug)
    finally:
        store.close()

    if article is None:
        click.echo(f"Error: article '{category}/{slug}' not found.", err=True)
        sys.exit(1)

    if output_json:
        click.echo(json.dumps({"article": article.to_dict()}, indent=2, ensure_ascii=False))
        return

    click.echo(f"# {article.title}")
    click.echo("")
    click.echo(article.content)


# mdblog:domain=sync
@main.command(name="watch")
@click.option("--debounce", default=500, type=int, help="Debounce delay in ms (default: 500).")
@_PROJECT_OPTION
def watch_cmd(*, debounce: int, project: Path | None) -> None:
    """Watch the articles directory and sync on changes.

    Requires watchfiles: pip install mdblog[watch]
    """
    try:
        from mdblog.infrastructure.watcher import watch
    except ImportError:
        click.echo(
            "Error: watch requires 'watchfiles'. Install with: pip install mdblog[watch]",
            err=True,
        )
        sys.exit(1)

    from mdblog.errors import SyncError
    from mdblog.infrastructure.config import load_config
    from mdblog.infrastructure.db import ArticleStore
    from mdblog.infrastructure.sync import sync as do_sync

    config = load_config(project or Path.cwd())
    if not config.articles_dir.is_dir():
        click.echo(f"Error: articles directory not found: {config.articles_dir}", err=True)
        sys.exit(1)

    store = ArticleStore.open(config.db_path)
    try:
        # Initial sync; the store must be verified before watching.
        try:
            do_sync(
                config.articles_dir,
                store,
                max_workers=config.max_workers,
                api_prefix=config.api_prefix,
            )
        except SyncError as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(1)

        try:
            watch(config, store, debounce_ms=debounce)
        except ImportError:
            click.echo(
                "Error: watch requires 'watchfiles'. Install with: pip install mdblog[watch]",
                err=True,
            )
            sys.exit(1)
    finally:
        store.close()
