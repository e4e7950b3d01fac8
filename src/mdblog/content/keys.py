"""Store key codec: ``category_slug_mtime`` <-> structured identity."""

# mdblog:domain=content

from __future__ import annotations

from dataclasses import dataclass

# Separator between the three key components.
SEPARATOR = "_"


@dataclass(frozen=True, order=True)
class ArticleKey:
    """Identity of one logical article, independent of its version."""

    category: str
    slug: str

    def __str__(self) -> str:
        return f"{self.category}/{self.slug}"


@dataclass(frozen=True)
class DecodedKey:
    """A store key that parsed into identity + version."""

    identity: ArticleKey
    mtime: int


def is_valid_name(name: str) -> bool:
    """Return True if *name* can be used as a category or slug in a key."""
    return bool(name) and SEPARATOR not in name


def encode_key(category: str, slug: str, mtime: int) -> str:
    """Build the store key for one version of an article.

    Raises ``ValueError`` for names that would not decode back, or for a
    non-positive version.
    """
    if not is_valid_name(category) or not is_valid_name(slug):
        msg = f"Cannot encode key for {category!r}/{slug!r}"
        raise ValueError(msg)
    if mtime <= 0:
        msg = f"Version must be positive, got {mtime}"
        raise ValueError(msg)
    return f"{category}{SEPARATOR}{slug}{SEPARATOR}{mtime}"


def decode_key(key: str) -> DecodedKey | None:
    """Parse a store key.

    Returns ``None`` for anything that is not exactly
    ``<category>_<slug>_<positive int>``; such keys are garbage to purge.
    """
    parts = key.split(SEPARATOR)
    if len(parts) != 3:
        return None
    category, slug, version = parts
    if not category or not slug:
        return None
    # isdigit() alone accepts non-ASCII digits.
    if not version.isascii() or not version.isdigit():
        return None
    mtime = int(version)
    if mtime <= 0:
        return None
    return DecodedKey(identity=ArticleKey(category, slug), mtime=mtime)


def is_canonical(key: str) -> bool:
    """True if *key* is exactly what :func:`encode_key` produces for it."""
    decoded = decode_key(key)
    if decoded is None:
        return False
    ident = decoded.identity
    return key == encode_key(ident.category, ident.slug, decoded.mtime)
