"""Tests for mdblog.infrastructure.config — .mdblog/config.yml loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import yaml

from mdblog.content.loader import DEFAULT_API_PREFIX
from mdblog.content.scanner import DEFAULT_MAX_WORKERS
from mdblog.infrastructure.config import config_path, load_config

if TYPE_CHECKING:
    from pathlib import Path


def _write_config(project: Path, data: object) -> None:
    path = config_path(project)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data), encoding="utf-8")


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        root = tmp_path.resolve()
        assert config.project_root == root
        assert config.articles_dir == root / "articles"
        assert config.db_path == root / ".mdblog" / "mdblog.db"
        assert config.max_workers == DEFAULT_MAX_WORKERS
        assert config.api_prefix == DEFAULT_API_PREFIX

    def test_values_from_file(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            {
                "articles_dir": "content/posts",
                "db_path": "var/blog.db",
                "max_workers": 8,
                "api_prefix": "/blog/api/article",
                "cache_ttl": 60,
                "unknown": "ignored",
            },
        )
        config = load_config(tmp_path)
        root = tmp_path.resolve()
        assert config.articles_dir == root / "content" / "posts"
        assert config.db_path == root / "var" / "blog.db"
        assert config.max_workers == 8
        assert config.api_prefix == "/blog/api/article"
        assert config.cache_ttl == 60.0

    def test_bad_types_fall_back(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            {"articles_dir": 42, "max_workers": 0, "cache_ttl": True, "api_prefix": ""},
        )
        config = load_config(tmp_path)
        assert config.articles_dir == tmp_path.resolve() / "articles"
        assert config.max_workers == DEFAULT_MAX_WORKERS
        assert config.api_prefix == DEFAULT_API_PREFIX

    def test_non_mapping_ignored(self, tmp_path: Path) -> None:
        _write_config(tmp_path, ["not", "a", "mapping"])
        assert load_config(tmp_path).max_workers == DEFAULT_MAX_WORKERS

    def test_empty_file(self, tmp_path: Path) -> None:
        path = config_path(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text("")
        assert load_config(tmp_path).articles_dir == tmp_path.resolve() / "articles"
