"""Tests for mdblog.content.keys — composite store key codec."""

from __future__ import annotations

import pytest

from mdblog.content.keys import (
    ArticleKey,
    DecodedKey,
    decode_key,
    encode_key,
    is_canonical,
    is_valid_name,
)


class TestEncodeKey:
    def test_basic(self) -> None:
        assert encode_key("news", "launch", 1000) == "news_launch_1000"

    def test_round_trip(self) -> None:
        key = encode_key("dev-notes", "my-post", 1349049600000)
        decoded = decode_key(key)
        assert decoded == DecodedKey(ArticleKey("dev-notes", "my-post"), 1349049600000)

    @pytest.mark.parametrize(
        ("category", "slug"),
        [("", "slug"), ("cat", ""), ("my_cat", "slug"), ("cat", "my_slug")],
    )
    def test_rejects_unencodable_names(self, category: str, slug: str) -> None:
        with pytest.raises(ValueError, match="Cannot encode"):
            encode_key(category, slug, 1000)

    def test_rejects_non_positive_version(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            encode_key("cat", "slug", 0)


class TestDecodeKey:
    def test_valid(self) -> None:
        decoded = decode_key("news_launch_900")
        assert decoded is not None
        assert decoded.identity == ArticleKey("news", "launch")
        assert decoded.mtime == 900

    @pytest.mark.parametrize(
        "key",
        [
            "",
            "news",
            "news_launch",
            "news_launch_900_extra",
            "_launch_900",
            "news__900",
            "news_launch_",
            "news_launch_0",
            "news_launch_-5",
            "news_launch_abc",
            "news_launch_9.5",
            "news_launch_ 90",
            "news_launch_١٢٣",
        ],
    )
    def test_invalid_shapes(self, key: str) -> None:
        assert decode_key(key) is None

    def test_leading_zeros_decode(self) -> None:
        decoded = decode_key("news_launch_0900")
        assert decoded is not None
        assert decoded.mtime == 900


class TestHelpers:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("news", True), ("a-b", True), ("", False), ("a_b", False)],
    )
    def test_is_valid_name(self, name: str, expected: bool) -> None:
        assert is_valid_name(name) is expected

    def test_is_canonical(self) -> None:
        assert is_canonical("news_launch_900")
        assert not is_canonical("news_launch_0900")
        assert not is_canonical("garbage")

    def test_article_key_str(self) -> None:
        assert str(ArticleKey("news", "launch")) == "news/launch"
