"""Reconciler: diff a filesystem inventory against the store's key set.

Pure functions only; the sync orchestrator performs every mutation.
"""

# mdblog:domain=content

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mdblog.content.keys import decode_key, encode_key, is_canonical

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from mdblog.content.keys import ArticleKey


@dataclass
class SyncPlan:
    """Mutations needed to make the store match the filesystem."""

    invalid: set[str] = field(default_factory=set)
    duplicates: set[str] = field(default_factory=set)
    orphans: set[str] = field(default_factory=set)
    stale: set[str] = field(default_factory=set)
    inserts: dict[ArticleKey, int] = field(default_factory=dict)
    unchanged: int = 0

    @property
    def removals(self) -> set[str]:
        """Every store key scheduled for removal."""
        return self.invalid | self.duplicates | self.orphans | self.stale

    @property
    def is_empty(self) -> bool:
        return not self.removals and not self.inserts


def _prefer(candidate: str, current: str) -> bool:
    """Tie-break between two keys decoding to the same identity and version."""
    return is_canonical(candidate) and not is_canonical(current)


def collapse_store_keys(
    store_keys: Iterable[str],
) -> tuple[dict[ArticleKey, tuple[int, str]], set[str], set[str]]:
    """Partition and de-duplicate store keys.

    Returns ``(collapsed, invalid, duplicates)`` where *collapsed* maps each
    identity to ``(version, key)`` of the surviving record.  Keys are visited
    in sorted order; among equal versions the canonical encoding wins,
    otherwise the first key seen.
    """
    collapsed: dict[ArticleKey, tuple[int, str]] = {}
    invalid: set[str] = set()
    duplicates: set[str] = set()

    for key in sorted(set(store_keys)):
        decoded = decode_key(key)
        if decoded is None:
            invalid.add(key)
            continue

        current = collapsed.get(decoded.identity)
        if current is None:
            collapsed[decoded.identity] = (decoded.mtime, key)
            continue

        current_mtime, current_key = current
        if decoded.mtime > current_mtime or (
            decoded.mtime == current_mtime and _prefer(key, current_key)
        ):
            duplicates.add(current_key)
            collapsed[decoded.identity] = (decoded.mtime, key)
        else:
            duplicates.add(key)

    return collapsed, invalid, duplicates


def reconcile(
    fs_inventory: Mapping[ArticleKey, int],
    store_keys: Iterable[str],
) -> SyncPlan:
    """Compute the removal key-set and insert identity-set.

    Parameters
    ----------
    fs_inventory:
        ``{identity: mtime}`` from the filesystem scan; must be complete.
    store_keys:
        Every key currently in the store.

    Returns
    -------
    SyncPlan
        Identities whose stored version equals the file's version are left
        alone and never reloaded.
    """
    collapsed, invalid, duplicates = collapse_store_keys(store_keys)
    plan = SyncPlan(invalid=invalid, duplicates=duplicates)

    for identity, (stored_mtime, key) in collapsed.items():
        fs_mtime = fs_inventory.get(identity)
        if fs_mtime is None:
            plan.orphans.add(key)
        elif fs_mtime != stored_mtime:
            plan.stale.add(key)
        elif key != encode_key(identity.category, identity.slug, fs_mtime):
            # Same version under a non-canonical spelling: replace it.
            plan.stale.add(key)
        else:
            plan.unchanged += 1

    for identity, fs_mtime in fs_inventory.items():
        survivor = collapsed.get(identity)
        if survivor is not None and survivor[1] not in plan.stale:
            continue
        key = encode_key(identity.category, identity.slug, fs_mtime)
        if key in plan.duplicates:
            # An older copy lost dedup but matches the file; keep it instead
            # of removing and re-inserting the same key concurrently.
            plan.duplicates.discard(key)
            plan.unchanged += 1
            continue
        plan.inserts[identity] = fs_mtime

    return plan
