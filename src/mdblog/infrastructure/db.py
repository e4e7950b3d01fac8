"""SQLite store layer: connection management, schema, meta helpers, article bucket."""

# mdblog:domain=db

from __future__ import annotations

import json
import sqlite3
import threading
from typing import TYPE_CHECKING

from mdblog.content.loader import Article
from mdblog.errors import StoreError

if TYPE_CHECKING:
    from pathlib import Path

# Schema version: increment on breaking changes
SCHEMA_VERSION = "1"

_SCHEMA_SQL = """\
-- Article bucket: one row per composite key (category_slug_mtime)
CREATE TABLE IF NOT EXISTS blog (
    key      TEXT PRIMARY KEY,
    category TEXT,
    slug     TEXT,
    mtime    INTEGER,
    value    TEXT NOT NULL
);

-- Store metadata
CREATE TABLE IF NOT EXISTS meta (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_blog_category ON blog(category);
CREATE INDEX IF NOT EXISTS idx_blog_mtime ON blog(mtime);
"""


def open_db(db_path: Path) -> sqlite3.Connection:
    """Open (or create) a SQLite database with proper PRAGMAs.

    Sets WAL journal mode (persistent per-file).  The connection may be
    shared across threads; :class:`ArticleStore` serializes access to it.

    Returns a connection with ``sqlite3.Row`` row factory.
    """
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes if they don't exist.

    Safe to call multiple times (uses IF NOT EXISTS).
    """
    conn.executescript(_SCHEMA_SQL)


def get_meta(conn: sqlite3.Connection, key: str, default: str | None = None) -> str | None:
    """Read a value from the ``meta`` table.

    Returns *default* (``None``) if the key doesn't exist.
    """
    row = conn.execute("SELECT value FROM meta WHERE key = ?", (key,)).fetchone()
    if row is None:
        return default
    return str(row[0])


def set_meta(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Insert or update a key in the ``meta`` table."""
    conn.execute(
        "INSERT INTO meta (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
        (key, value),
    )
    conn.commit()


class ArticleStore:
    """Key-value view of the ``blog`` bucket.

    Keys are opaque strings here; callers encode/decode them.  ``save`` and
    ``remove`` are idempotent and report failures as :class:`StoreError`.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()

    @classmethod
    def open(cls, db_path: Path) -> ArticleStore:
        """Open the database at *db_path*, creating parent dir and schema."""
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = open_db(db_path)
        create_schema(conn)
        return cls(conn)

    @property
    def conn(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # -- key-value protocol ------------------------------------------------

    def keys(self) -> list[str]:
        """Return every key currently in the bucket."""
        with self._lock:
            rows = self._conn.execute("SELECT key FROM blog").fetchall()
        return [row["key"] for row in rows]

    def save(self, key: str, article: Article) -> None:
        """Upsert *article* under *key*."""
        value = json.dumps(article.to_dict(), ensure_ascii=False)
        try:
            with self._lock:
                self._conn.execute(
                    "INSERT INTO blog (key, category, slug, mtime, value) "
                    "VALUES (?, ?, ?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET category = excluded.category, "
                    "slug = excluded.slug, mtime = excluded.mtime, value = excluded.value",
                    (key, article.category, article.slug, article.mtime, value),
                )
                self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(key, exc) from exc

    def remove(self, key: str) -> None:
        """Delete *key*; absent keys are a no-op."""
        try:
            with self._lock:
                self._conn.execute("DELETE FROM blog WHERE key = ?", (key,))
                self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(key, exc) from exc

    def get(self, key: str) -> Article | None:
        with self._lock:
            row = self._conn.execute("SELECT value FROM blog WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return Article.from_dict(json.loads(row["value"]))

    # -- read paths --------------------------------------------------------

    def articles(
        self,
        *,
        category: str | None = None,
        start: int | None = None,
        end: int | None = None,
    ) -> list[Article]:
        """Return stored articles, optionally filtered by category and mtime range.

        Rows written by something other than :meth:`save` (no category or
        mtime columns) are never matched.
        """
        clauses = ["category IS NOT NULL", "mtime IS NOT NULL"]
        params: list[object] = []
        if category is not None:
            clauses.append("category = ?")
            params.append(category)
        if start is not None:
            clauses.append("mtime >= ?")
            params.append(start)
        if end is not None:
            clauses.append("mtime <= ?")
            params.append(end)
        sql = "SELECT value FROM blog WHERE " + " AND ".join(clauses) + " ORDER BY mtime DESC"
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [Article.from_dict(json.loads(row["value"])) for row in rows]

    def find(self, category: str, slug: str) -> list[Article]:
        """Return every stored version of one article, newest first."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT value FROM blog WHERE category = ? AND slug = ? ORDER BY mtime DESC",
                (category, slug),
            ).fetchall()
        return [Article.from_dict(json.loads(row["value"])) for row in rows]

    def category_counts(self) -> dict[str, int]:
        """Return ``{category: article count}``."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT category, count(*) AS cnt FROM blog "
                "WHERE category IS NOT NULL GROUP BY category"
            ).fetchall()
        return {row["category"]: row["cnt"] for row in rows}

    def get_meta(self, key: str, default: str | None = None) -> str | None:
        with self._lock:
            return get_meta(self._conn, key, default)

    def set_meta(self, key: str, value: str) -> None:
        """Write a ``meta`` entry; failures surface as :class:`StoreError`."""
        try:
            with self._lock:
                set_meta(self._conn, key, value)
        except sqlite3.Error as exc:
            with self._lock:
                self._conn.rollback()
            raise StoreError(key, exc) from exc
