"""Reading domain — read paths and caches over the synchronized article store."""

from mdblog.reading.cache import CategoryCache
from mdblog.reading.queries import (
    get_article,
    list_articles,
    list_categories,
    month_to_interval,
)

__all__ = [
    "CategoryCache",
    "get_article",
    "list_articles",
    "list_categories",
    "month_to_interval",
]
