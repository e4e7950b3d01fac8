"""Tests for mdblog.content.reconciler — pure store/filesystem diff."""

from __future__ import annotations

from mdblog.content.keys import ArticleKey
from mdblog.content.reconciler import collapse_store_keys, reconcile

LAUNCH = ArticleKey("news", "launch")


class TestConcreteScenarios:
    def test_stale_version_replaced(self) -> None:
        plan = reconcile({LAUNCH: 1000}, ["news_launch_900"])
        assert plan.removals == {"news_launch_900"}
        assert plan.stale == {"news_launch_900"}
        assert plan.inserts == {LAUNCH: 1000}

    def test_up_to_date_untouched(self) -> None:
        plan = reconcile({LAUNCH: 1000}, ["news_launch_1000"])
        assert plan.removals == set()
        assert plan.inserts == {}
        assert plan.unchanged == 1
        assert plan.is_empty


class TestDedup:
    def test_keeps_greatest_version(self) -> None:
        plan = reconcile(
            {ArticleKey("cat", "slug"): 200},
            ["cat_slug_100", "cat_slug_200"],
        )
        assert plan.duplicates == {"cat_slug_100"}
        assert plan.removals == {"cat_slug_100"}
        assert plan.inserts == {}

    def test_order_independent(self) -> None:
        keys = ["cat_slug_300", "cat_slug_100", "cat_slug_200"]
        plan_a = reconcile({ArticleKey("cat", "slug"): 300}, keys)
        plan_b = reconcile({ArticleKey("cat", "slug"): 300}, list(reversed(keys)))
        assert plan_a.removals == plan_b.removals == {"cat_slug_100", "cat_slug_200"}
        assert plan_a.inserts == plan_b.inserts == {}

    def test_survivor_stale_after_dedup(self) -> None:
        """Newest stored copy is still older than the file: everything goes."""
        plan = reconcile(
            {ArticleKey("cat", "slug"): 500},
            ["cat_slug_100", "cat_slug_200"],
        )
        assert plan.removals == {"cat_slug_100", "cat_slug_200"}
        assert plan.inserts == {ArticleKey("cat", "slug"): 500}

    def test_older_duplicate_matching_file_is_kept(self) -> None:
        """File rolled back to an older version still held in the store."""
        plan = reconcile(
            {ArticleKey("cat", "slug"): 100},
            ["cat_slug_100", "cat_slug_200"],
        )
        assert plan.removals == {"cat_slug_200"}
        assert plan.inserts == {}
        assert plan.unchanged == 1

    def test_equal_version_prefers_canonical_key(self) -> None:
        collapsed, invalid, duplicates = collapse_store_keys(["cat_slug_0100", "cat_slug_100"])
        assert invalid == set()
        assert collapsed[ArticleKey("cat", "slug")] == (100, "cat_slug_100")
        assert duplicates == {"cat_slug_0100"}

    def test_non_canonical_only_copy_replaced(self) -> None:
        plan = reconcile({ArticleKey("cat", "slug"): 100}, ["cat_slug_0100"])
        assert plan.removals == {"cat_slug_0100"}
        assert plan.inserts == {ArticleKey("cat", "slug"): 100}

    def test_duplicate_store_keys_ignored(self) -> None:
        plan = reconcile({LAUNCH: 1000}, ["news_launch_1000", "news_launch_1000"])
        assert plan.is_empty


class TestOrphansAndInvalid:
    def test_orphan_removed_nothing_inserted(self) -> None:
        plan = reconcile({}, ["cat_slug_100"])
        assert plan.orphans == {"cat_slug_100"}
        assert plan.inserts == {}

    def test_invalid_keys_always_removed(self) -> None:
        keys = ["garbage", "news_launch", "news_launch_0", "a_b_c_1", "news_launch_1000"]
        plan = reconcile({LAUNCH: 1000}, keys)
        assert plan.invalid == {"garbage", "news_launch", "news_launch_0", "a_b_c_1"}
        assert "news_launch_1000" not in plan.removals
        assert plan.inserts == {}

    def test_invalid_key_removed_with_empty_filesystem(self) -> None:
        plan = reconcile({}, ["???"])
        assert plan.removals == {"???"}


class TestInserts:
    def test_new_identity_inserted(self) -> None:
        plan = reconcile({LAUNCH: 1000}, [])
        assert plan.inserts == {LAUNCH: 1000}
        assert plan.removals == set()

    def test_newer_store_version_still_replaced(self) -> None:
        """Any version mismatch replaces the stored copy with the file's version."""
        plan = reconcile({LAUNCH: 1000}, ["news_launch_2000"])
        assert plan.stale == {"news_launch_2000"}
        assert plan.inserts == {LAUNCH: 1000}


class TestConvergence:
    def test_applying_plan_converges(self) -> None:
        fs = {
            ArticleKey("news", "launch"): 1000,
            ArticleKey("news", "update"): 2000,
            ArticleKey("dev", "notes"): 3000,
        }
        store = {
            "news_launch_900",
            "news_launch_800",
            "news_update_2000",
            "dev_gone_10",
            "bad key",
            "dev_notes_0",
        }
        plan = reconcile(fs, store)

        after = (store - plan.removals) | {
            f"{ident.category}_{ident.slug}_{mtime}" for ident, mtime in plan.inserts.items()
        }
        assert after == {"news_launch_1000", "news_update_2000", "dev_notes_3000"}

        # Second pass is a no-op.
        assert reconcile(fs, after).is_empty
