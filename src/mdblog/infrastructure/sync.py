"""Sync orchestrator: scan -> reconcile -> mutate.

The filesystem scan and the store key listing run concurrently and are both
joined before reconciling.  If either fails the run aborts before touching
the store.  Removals and inserts then run on one bounded thread pool; a
failure on one key is logged and recorded, never fatal to its siblings.
"""

# mdblog:domain=sync

from __future__ import annotations

import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from mdblog import __version__
from mdblog.content.keys import encode_key
from mdblog.content.loader import DEFAULT_API_PREFIX, load_article
from mdblog.content.reconciler import reconcile
from mdblog.content.scanner import DEFAULT_MAX_WORKERS, scan_articles
from mdblog.errors import MissingTitleError, ScanError, StoreError, SyncError

if TYPE_CHECKING:
    from concurrent.futures import Future
    from pathlib import Path

    from mdblog.content.keys import ArticleKey
    from mdblog.content.reconciler import SyncPlan
    from mdblog.infrastructure.db import ArticleStore
    from mdblog.reading.cache import CategoryCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncFailure:
    """A removal or insert that did not go through."""

    key: str
    reason: str


@dataclass
class SyncResult:
    """Summary of a sync run."""

    removed: list[str] = field(default_factory=list)
    saved: list[str] = field(default_factory=list)
    failures: list[SyncFailure] = field(default_factory=list)
    unchanged: int = 0

    @property
    def nothing_changed(self) -> bool:
        return not self.removed and not self.saved and not self.failures


def _remove(store: ArticleStore, key: str) -> str:
    try:
        store.remove(key)
    except StoreError as exc:
        logger.error("Removing: %s %s", key, exc.cause)
        raise
    logger.info("Removed: %s", key)
    return key


def _insert(
    store: ArticleStore,
    articles_dir: Path,
    identity: ArticleKey,
    mtime: int,
    api_prefix: str,
) -> str:
    key = encode_key(identity.category, identity.slug, mtime)
    try:
        article = load_article(articles_dir, identity, mtime, api_prefix=api_prefix)
    except MissingTitleError:
        logger.error("Skipped: %s article title absent", key)
        raise
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Skipped: %s %s", key, exc)
        raise

    try:
        store.save(key, article)
    except StoreError as exc:
        logger.error("Saving: %s %s", key, exc.cause)
        raise
    logger.info("Saved: %s", key)
    return key


def _collect_inventories(
    articles_dir: Path,
    store: ArticleStore,
    max_workers: int,
) -> tuple[dict[ArticleKey, int], list[str]]:
    """Scan the filesystem and list store keys concurrently."""
    with ThreadPoolExecutor(max_workers=2) as executor:
        fs_future = executor.submit(scan_articles, articles_dir, max_workers=max_workers)
        keys_future = executor.submit(store.keys)

        try:
            fs_inventory = fs_future.result()
        except ScanError as exc:
            msg = f"Cannot scan articles directory: {exc}"
            raise SyncError(msg) from exc

        try:
            store_keys = keys_future.result()
        except sqlite3.Error as exc:
            msg = f"Cannot list store keys: {exc}"
            raise SyncError(msg) from exc

    return fs_inventory, store_keys


def apply_plan(
    plan: SyncPlan,
    articles_dir: Path,
    store: ArticleStore,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    api_prefix: str = DEFAULT_API_PREFIX,
) -> SyncResult:
    """Execute a plan's removals and inserts with bounded parallelism."""
    result = SyncResult(unchanged=plan.unchanged)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        removals: dict[Future[str], str] = {
            executor.submit(_remove, store, key): key for key in sorted(plan.removals)
        }
        inserts: dict[Future[str], str] = {
            executor.submit(_insert, store, articles_dir, identity, mtime, api_prefix): encode_key(
                identity.category, identity.slug, mtime
            )
            for identity, mtime in sorted(plan.inserts.items())
        }

        for future, key in removals.items():
            try:
                result.removed.append(future.result())
            except StoreError as exc:
                result.failures.append(SyncFailure(key, str(exc.cause)))

        for future, key in inserts.items():
            try:
                result.saved.append(future.result())
            except MissingTitleError:
                result.failures.append(SyncFailure(key, "article title absent"))
            except StoreError as exc:
                result.failures.append(SyncFailure(key, str(exc.cause)))
            except (OSError, UnicodeDecodeError) as exc:
                result.failures.append(SyncFailure(key, str(exc)))

    return result


def sync(
    articles_dir: Path,
    store: ArticleStore,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    api_prefix: str = DEFAULT_API_PREFIX,
    cache: CategoryCache | None = None,
) -> SyncResult:
    """Bring the store in line with the articles tree.

    Parameters
    ----------
    articles_dir:
        Root holding ``<category>/<slug>.md`` files.
    store:
        Target article store.
    max_workers:
        Upper bound on concurrent scans, loads and store operations.
    api_prefix:
        Prefix used when rewriting relative resource links.
    cache:
        Optional read-path cache, invalidated once mutations are applied.

    Returns
    -------
    SyncResult
        Keys removed and saved plus per-key failures.

    Raises
    ------
    SyncError
        The articles tree or the store inventory could not be read; the
        store has not been modified.
    """
    fs_inventory, store_keys = _collect_inventories(articles_dir, store, max_workers)

    plan = reconcile(fs_inventory, store_keys)
    logger.debug(
        "Plan: %d invalid, %d duplicate, %d orphan, %d stale, %d insert, %d unchanged",
        len(plan.invalid),
        len(plan.duplicates),
        len(plan.orphans),
        len(plan.stale),
        len(plan.inserts),
        plan.unchanged,
    )

    if plan.is_empty:
        result = SyncResult(unchanged=plan.unchanged)
    else:
        result = apply_plan(
            plan,
            articles_dir,
            store,
            max_workers=max_workers,
            api_prefix=api_prefix,
        )

    if cache is not None and (result.removed or result.saved):
        cache.invalidate()

    now = datetime.now(tz=timezone.utc).isoformat()
    try:
        store.set_meta("last_sync_at", now)
        store.set_meta("mdblog_version", __version__)
    except StoreError as exc:
        # Mutations are already applied; only the bookkeeping is lost.
        logger.warning("Recording sync metadata: %s", exc)

    logger.info(
        "Sync done: %d removed, %d saved, %d failed, %d unchanged",
        len(result.removed),
        len(result.saved),
        len(result.failures),
        result.unchanged,
    )
    return result
