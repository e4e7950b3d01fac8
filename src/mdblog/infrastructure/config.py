"""Project configuration: ``.mdblog/config.yml`` with defaults."""

# mdblog:domain=infrastructure

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from mdblog.content.loader import DEFAULT_API_PREFIX
from mdblog.content.scanner import DEFAULT_MAX_WORKERS
from mdblog.reading.cache import DEFAULT_TTL

logger = logging.getLogger(__name__)

CONFIG_DIR = ".mdblog"
CONFIG_FILE = "config.yml"

_DEFAULT_ARTICLES_DIR = "articles"
_DEFAULT_DB_PATH = f"{CONFIG_DIR}/mdblog.db"


@dataclass(frozen=True)
class MdblogConfig:
    """Resolved project settings (all paths absolute)."""

    project_root: Path
    articles_dir: Path
    db_path: Path
    max_workers: int = DEFAULT_MAX_WORKERS
    api_prefix: str = DEFAULT_API_PREFIX
    cache_ttl: float = DEFAULT_TTL


def config_path(project_root: Path) -> Path:
    return project_root / CONFIG_DIR / CONFIG_FILE


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning empty dict when absent."""
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping", path)
        return {}
    return data


def _str_option(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, str) and value:
        return value
    logger.warning("Config %s: expected a non-empty string, using %r", key, default)
    return default


def _positive_option(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key)
    if value is None:
        return default
    # bool is an int subclass.
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return value
    logger.warning("Config %s: expected a positive number, using %r", key, default)
    return default


def _int_option(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    logger.warning("Config %s: expected a positive integer, using %r", key, default)
    return default


def load_config(project_root: Path) -> MdblogConfig:
    """Load ``.mdblog/config.yml`` under *project_root*.

    Unknown keys are ignored; values of the wrong type fall back to the
    default with a warning.  Relative paths resolve against *project_root*.
    """
    project_root = project_root.resolve()
    data = _read_yaml(config_path(project_root))

    articles_dir = project_root / _str_option(data, "articles_dir", _DEFAULT_ARTICLES_DIR)
    db_path = project_root / _str_option(data, "db_path", _DEFAULT_DB_PATH)

    return MdblogConfig(
        project_root=project_root,
        articles_dir=articles_dir,
        db_path=db_path,
        max_workers=_int_option(data, "max_workers", DEFAULT_MAX_WORKERS),
        api_prefix=_str_option(data, "api_prefix", DEFAULT_API_PREFIX),
        cache_ttl=float(_positive_option(data, "cache_ttl", DEFAULT_TTL)),
    )
