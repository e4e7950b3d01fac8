"""Exception hierarchy shared by the content sync engine."""

# mdblog:domain=sync

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from mdblog.content.keys import ArticleKey


class MdblogError(Exception):
    """Base class for every error raised by mdblog."""


class ScanError(MdblogError):
    """The articles root or a category directory could not be listed."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot scan {path}: {cause}")


class MissingTitleError(MdblogError):
    """An article does not start with a ``# Title`` line."""

    def __init__(self, identity: ArticleKey) -> None:
        self.identity = identity
        super().__init__(f"Article title absent: {identity}")


class StoreError(MdblogError):
    """A single save/remove against the store failed."""

    def __init__(self, key: str, cause: BaseException) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"{key}: {cause}")


class SyncError(MdblogError):
    """A sync run was aborted before any mutation was attempted."""
