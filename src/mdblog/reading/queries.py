"""Read paths over the synchronized store: categories, month listings, single article."""

# mdblog:domain=reading

from __future__ import annotations

import re
from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdblog.content.loader import Article
    from mdblog.infrastructure.db import ArticleStore
    from mdblog.reading.cache import CategoryCache

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def current_month() -> str:
    """Return the current UTC month as ``YYYY-MM``."""
    return datetime.now(tz=timezone.utc).strftime("%Y-%m")


def month_to_interval(month: str) -> tuple[int, int]:
    """Convert ``YYYY-MM`` to an inclusive ``(start_ms, end_ms)`` UTC interval.

    Raises ``ValueError`` for anything that is not a valid month.
    """
    match = _MONTH_RE.match(month)
    if match is None:
        msg = f"Invalid month {month!r}, expected YYYY-MM"
        raise ValueError(msg)
    year, mon = int(match.group(1)), int(match.group(2))
    if not 1 <= mon <= 12:
        msg = f"Invalid month {month!r}, expected YYYY-MM"
        raise ValueError(msg)

    start = datetime(year, mon, 1, tzinfo=timezone.utc)
    end = datetime(year + 1, 1, 1, tzinfo=timezone.utc) if mon == 12 else datetime(
        year, mon + 1, 1, tzinfo=timezone.utc
    )
    return int(start.timestamp() * 1000), int(end.timestamp() * 1000) - 1


def list_categories(
    store: ArticleStore,
    cache: CategoryCache | None = None,
) -> dict[str, int]:
    """Return ``{category: article count}``, served from *cache* when given."""
    if cache is None:
        return store.category_counts()
    return cache.get_or_load(store.category_counts)


def list_articles(
    store: ArticleStore,
    *,
    month: str | None = None,
    category: str | None = None,
) -> list[Article]:
    """List articles modified in *month* (default: current), newest first.

    The body (``content``) is blanked; listings carry title and excerpt only.
    """
    start, end = month_to_interval(month or current_month())
    articles = store.articles(category=category, start=start, end=end)
    return [replace(article, content="") for article in articles]


def get_article(store: ArticleStore, category: str, slug: str) -> Article | None:
    """Return the newest stored version of ``category/slug``, or None."""
    versions = store.find(category, slug)
    if not versions:
        return None
    return max(versions, key=lambda article: article.mtime)
