"""Infrastructure domain — store layer, sync orchestrator, config and file watcher.

Note: ``mdblog.infrastructure.watcher`` is intentionally NOT re-exported here
because it needs the optional ``watchfiles`` dependency.  Import it directly::

    from mdblog.infrastructure.watcher import watch
"""

from mdblog.infrastructure.config import MdblogConfig, load_config
from mdblog.infrastructure.db import (
    SCHEMA_VERSION,
    ArticleStore,
    create_schema,
    get_meta,
    open_db,
    set_meta,
)
from mdblog.infrastructure.sync import SyncFailure, SyncResult, apply_plan, sync

__all__ = [
    "SCHEMA_VERSION",
    "ArticleStore",
    "MdblogConfig",
    "SyncFailure",
    "SyncResult",
    "apply_plan",
    "create_schema",
    "get_meta",
    "load_config",
    "open_db",
    "set_meta",
    "sync",
]
