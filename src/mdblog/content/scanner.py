"""Article scanner: builds the filesystem inventory ``{identity: mtime}``.

Layout is ``<articles_dir>/<category>/<slug>.md``.  Category listings are
independent of each other and run on a thread pool; the inventory is only
returned once every category has been read.
"""

# mdblog:domain=content

from __future__ import annotations

import logging
import stat
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from mdblog.content.keys import ArticleKey, is_valid_name
from mdblog.errors import ScanError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

ARTICLE_SUFFIX = ".md"

DEFAULT_MAX_WORKERS = 4


def mtime_ms(st_mtime_ns: int) -> int:
    """Convert a stat mtime in nanoseconds to integer epoch milliseconds."""
    return st_mtime_ns // 1_000_000


def read_categories(articles_dir: Path) -> list[str]:
    """Return the names of the immediate subdirectories of *articles_dir*."""
    try:
        entries = list(articles_dir.iterdir())
    except OSError as exc:
        raise ScanError(articles_dir, exc) from exc

    categories: list[str] = []
    for entry in entries:
        try:
            if not entry.is_dir():
                continue
        except OSError:
            logger.debug("Cannot stat %s, ignoring", entry)
            continue
        if not is_valid_name(entry.name):
            logger.warning("Ignoring category with unusable name: %s", entry.name)
            continue
        categories.append(entry.name)
    return categories


def read_category_slugs(articles_dir: Path, category: str) -> dict[ArticleKey, int]:
    """Return ``{ArticleKey: mtime_ms}`` for every ``.md`` file in *category*.

    Only regular files are considered (symlinks are followed); anything else
    is ignored.
    """
    root = articles_dir / category
    try:
        entries = list(root.iterdir())
    except OSError as exc:
        raise ScanError(root, exc) from exc

    slugs: dict[ArticleKey, int] = {}
    for entry in entries:
        if entry.suffix != ARTICLE_SUFFIX:
            continue
        try:
            st = entry.stat()
        except OSError:
            logger.debug("Cannot stat %s, ignoring", entry)
            continue
        if not stat.S_ISREG(st.st_mode):
            continue

        slug = entry.stem
        version = mtime_ms(st.st_mtime_ns)
        if not is_valid_name(slug):
            logger.warning("Ignoring article with unusable slug: %s", entry)
            continue
        if version <= 0:
            logger.warning("Ignoring article with non-positive mtime: %s", entry)
            continue
        slugs[ArticleKey(category, slug)] = version
    return slugs


def scan_articles(
    articles_dir: Path,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> dict[ArticleKey, int]:
    """Scan the whole articles tree.

    Raises ``ScanError`` if the root or any category cannot be listed; a
    partial inventory is never returned.
    """
    categories = read_categories(articles_dir)
    inventory: dict[ArticleKey, int] = {}
    if not categories:
        return inventory

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(read_category_slugs, articles_dir, category)
            for category in categories
        ]
        # result() re-raises the first ScanError after every scan has joined.
        for future in futures:
            inventory.update(future.result())

    logger.debug(
        "Scanned %d article(s) in %d categor%s",
        len(inventory),
        len(categories),
        "y" if len(categories) == 1 else "ies",
    )
    return inventory
