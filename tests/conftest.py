"""Shared test fixtures for mdblog."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from mdblog.infrastructure.db import ArticleStore

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture()
def articles_dir(tmp_path: Path) -> Path:
    """Empty articles root."""
    d = tmp_path / "articles"
    d.mkdir()
    return d


@pytest.fixture()
def store(tmp_path: Path) -> Iterator[ArticleStore]:
    s = ArticleStore.open(tmp_path / ".mdblog" / "mdblog.db")
    yield s
    s.close()


@pytest.fixture()
def write_article(articles_dir: Path) -> Callable[..., Path]:
    """Return a helper writing ``<category>/<slug>.md`` with a fixed mtime (ms)."""

    def _write(category: str, slug: str, text: str, mtime: int = 1000) -> Path:
        category_dir = articles_dir / category
        category_dir.mkdir(exist_ok=True)
        path = category_dir / f"{slug}.md"
        path.write_text(text, encoding="utf-8")
        ns = mtime * 1_000_000
        os.utime(path, ns=(ns, ns))
        return path

    return _write
