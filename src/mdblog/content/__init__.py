"""Content domain — article scanning, key codec, reconciliation and loading."""

from mdblog.content.keys import (
    SEPARATOR,
    ArticleKey,
    DecodedKey,
    decode_key,
    encode_key,
    is_valid_name,
)
from mdblog.content.loader import Article, load_article, parse_article
from mdblog.content.reconciler import SyncPlan, reconcile
from mdblog.content.scanner import read_categories, read_category_slugs, scan_articles

__all__ = [
    "SEPARATOR",
    "Article",
    "ArticleKey",
    "DecodedKey",
    "SyncPlan",
    "decode_key",
    "encode_key",
    "is_valid_name",
    "load_article",
    "parse_article",
    "read_categories",
    "read_category_slugs",
    "reconcile",
    "scan_articles",
]
