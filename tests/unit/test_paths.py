"""
Unit tests for path utilities.

Tests cover:
- Splitting and joining paths
- Collection key encoding compatibility
- Field segment resolution
"""

import pytest

from docschema.paths import (
    NamedSubpath,
    SelfDocument,
    child_path,
    decode_key,
    encode_key,
    join_path,
    last_segment,
    normalize_path,
    split_path,
)


class TestSplitJoin:
    """Tests for split_path/join_path."""

    def test_split_drops_empty_segments(self):
        """Leading, trailing and doubled slashes produce no segments."""
        assert split_path("/posts//1/") == ["posts", "1"]

    def test_split_root(self):
        """The root path has no segments."""
        assert split_path("/") == []
        assert split_path("") == []

    def test_join_mixes_strings_and_segments(self):
        """join_path accepts path strings and segment lists."""
        assert join_path("blog", "1.2", ["posts"], "/hello/") == "/blog/1.2/posts/hello"

    def test_join_nothing_is_root(self):
        assert join_path() == "/"

    def test_normalize_strips_trailing_slashes(self):
        assert normalize_path("/posts/") == "/posts"
        assert normalize_path("/") == ""

    def test_last_segment(self):
        assert last_segment("/objects/1") == "1"


class TestKeyEncoding:
    """Keys must encode exactly like JavaScript's encodeURIComponent."""

    @pytest.mark.parametrize(
        "key,encoded",
        [
            ("/posts/1", "%2Fposts%2F1"),
            ("hello world", "hello%20world"),
            ("a-b_c.d~e", "a-b_c.d~e"),
            ("!*'()", "!*'()"),
            ("100%", "100%25"),
            ("ü", "%C3%BC"),
            ("a+b=c&d", "a%2Bb%3Dc%26d"),
        ],
    )
    def test_encode(self, key, encoded):
        assert encode_key(key) == encoded

    def test_decode_inverts_encode(self):
        """Decoding recovers the original key."""
        for key in ["/posts/1", "spaces and / slashes", "emoji 🎉", "%41"]:
            assert decode_key(encode_key(key)) == key

    def test_decode_rejects_invalid_utf8(self):
        with pytest.raises(UnicodeDecodeError):
            decode_key("%FF")

    def test_encoded_key_is_single_segment(self):
        assert "/" not in encode_key("/a/b/c")


class TestChildPath:
    """Tests for resolving field segments."""

    def test_self_document_is_parent_path(self):
        assert child_path("/posts/1", SelfDocument()) == "/posts/1"

    def test_named_subpath_appends_segment(self):
        assert child_path("/posts/1", NamedSubpath("title")) == "/posts/1/title"

    def test_named_subpath_of_trailing_slash(self):
        assert child_path("/posts/1/", NamedSubpath("title")) == "/posts/1/title"

    def test_segment_tags_compare_by_value(self):
        """A named subpath called '@self' is not the self document."""
        assert NamedSubpath("@self") != SelfDocument()
        assert NamedSubpath("title") == NamedSubpath("title")
