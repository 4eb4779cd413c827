"""Tests for word wrapping with an offset on the current line."""

import pytest

from starprnt.wrapping import wrap


def test_no_width_returns_value_unchanged():
    assert wrap("hello world", None) == ["hello world"]
    assert wrap("hello world", 0) == ["hello world"]


def test_short_text_is_one_line():
    assert wrap("hello", 10) == ["hello"]


def test_breaks_at_word_boundaries():
    assert wrap("hello world foo", 10) == ["hello", "world foo"]


def test_long_word_is_split():
    assert wrap("abcdefghij", 4) == ["abcd", "efgh", "ij"]


def test_indent_shortens_first_line():
    assert wrap("ab cd", 6, indent=3) == ["ab", "cd"]


def test_indent_pushes_word_to_next_line():
    # Nothing fits next to the text already printed
    assert wrap(" ghijk", 10, indent=6) == ["", "ghijk"]


def test_explicit_newlines_break():
    assert wrap("a\nb", 10) == ["a", "b"]


def test_empty_paragraphs_are_kept():
    assert wrap("a\n\nb", 10) == ["a", "", "b"]


def test_empty_string():
    assert wrap("", 10) == [""]


@pytest.mark.parametrize(
    "value, width, expected",
    [
        ("Total: ", 20, ["Total: "]),
        ("aaa bbb", 4, ["aaa", "bbb"]),
        ("ab   ", 4, ["ab"]),
    ],
)
def test_trailing_whitespace(value, width, expected):
    assert wrap(value, width) == expected


def test_hyphens_do_not_break():
    assert wrap("well-known", 6) == ["well-k", "nown"]


@pytest.mark.parametrize(
    "value, width, indent, expected",
    [
        ("foo", 5, 12, ["", "foo"]),
        ("foo", 5, 5, ["", "foo"]),
        (" foo", 5, 7, ["", "foo"]),
        ("a b c", 2, 9, ["", "a", "b", "c"]),
    ],
)
def test_full_line_continues_on_next_line(value, width, indent, expected):
    assert wrap(value, width, indent) == expected


def test_long_word_fills_rest_of_line():
    assert wrap("abcdef", 4, indent=2) == ["ab", "cdef"]


def test_indent_only_affects_first_paragraph():
    assert wrap("x\nyz", 4, indent=3) == ["x", "yz"]
