"""Tests for treeprofiles.scanner module."""

import pytest

from treeprofiles.scanner import split, split_all, require_str


class TestSplit:
    """Tests for split."""

    def test_simple(self):
        assert split("a,b", ",") == ("a", "b")

    def test_first_occurrence_only(self):
        assert split("a,b,c", ",") == ("a", "b,c")

    def test_no_match(self):
        assert split("abc", ",") == ("abc", None)

    def test_separator_at_end(self):
        # empty right side is a match, distinct from no match
        assert split("abc,", ",") == ("abc", "")

    def test_separator_at_start(self):
        assert split(",abc", ",") == ("", "abc")

    def test_empty_string(self):
        assert split("", ",") == ("", None)

    def test_nested_braces_protect_separator(self):
        assert split("{a,b},c", ",") == ("{a,b}", "c")

    def test_escaped_separator(self):
        assert split("a\\,b,c", ",") == ("a\\,b", "c")

    def test_escaped_brace_does_not_nest(self):
        assert split("\\{a,b", ",") == ("\\{a", "b")

    def test_escaped_only(self):
        assert split("a\\,b", ",") == ("a\\,b", None)

    def test_trailing_backslash(self):
        assert split("ab\\", ",") == ("ab\\", None)

    def test_leading_close_brace_is_inert(self):
        assert split("}a,b", ",") == ("}a", "b")

    def test_depth_never_negative(self):
        # the stray '}' must not make the following '{' look closed
        assert split("}{a,b},c", ",") == ("}{a,b}", "c")

    def test_split_on_open_brace(self):
        assert split("pre{a,b}", "{") == ("pre", "a,b}")

    def test_split_on_close_brace_at_depth(self):
        assert split("a,{b}}post", "}") == ("a,{b}", "post")

    def test_unterminated_nesting(self):
        assert split("{a}", "}") == ("{a}", None)

    def test_none_rejected(self):
        with pytest.raises(TypeError):
            split(None, ",")


class TestSplitAll:
    """Tests for split_all."""

    def test_items(self):
        assert split_all("a,b,c", ",") == ["a", "b", "c"]

    def test_single_item(self):
        assert split_all("abc", ",") == ["abc"]

    def test_empty_items_kept(self):
        assert split_all(",a,", ",") == ["", "a", ""]

    def test_nested(self):
        assert split_all("1,{a,b},2", ",") == ["1", "{a,b}", "2"]


class TestRequireStr:

    def test_str_passes(self):
        assert require_str("x") == "x"

    def test_bytes_rejected(self):
        with pytest.raises(TypeError, match="pattern must be a str"):
            require_str(b"x")
