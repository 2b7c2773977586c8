# tests/ui/test_gutter.py
"""Unit tests for the line-number gutter strategies."""

import pytest

from glyph.ui.Gutter import Gutter, LineNumbers


def test_absolute_numbers_then_filler() -> None:
    """Rows past the last line carry the filler glyph."""
    gutter = Gutter(LineNumbers.ABSOLUTE, width=6)
    assert gutter.get_lines(total_lines=3, current_line=0, scroll_row=0, height=5) == [
        "    1 ",
        "    2 ",
        "    3 ",
        "    ~ ",
        "    ~ ",
    ]


def test_absolute_numbers_follow_scroll() -> None:
    """The first label is the first visible line."""
    gutter = Gutter(LineNumbers.ABSOLUTE, width=4)
    assert gutter.get_lines(100, 0, 97, 3) == [" 98 ", " 99 ", "100 "]


def test_relative_numbers_count_distance_from_cursor() -> None:
    """The cursor line reads 0; others read their distance."""
    gutter = Gutter(LineNumbers.RELATIVE, width=4)
    assert gutter.get_lines(5, current_line=1, scroll_row=0, height=4) == ["  1 ", "  0 ", "  1 ", "  2 "]


def test_relative_numbered_shows_absolute_on_cursor_line() -> None:
    """Like relative, but the cursor line shows its own number."""
    gutter = Gutter(LineNumbers.RELATIVE_NUMBERED, width=4)
    assert gutter.get_lines(10, current_line=4, scroll_row=3, height=3) == ["  1 ", "  5 ", "  1 "]


def test_none_variant_has_no_width_and_no_labels() -> None:
    """Line numbers off: zero columns, nothing drawn."""
    gutter = Gutter(LineNumbers.NONE)
    assert gutter.width == 0
    assert gutter.get_lines(10, 0, 0, 5) == []


@pytest.mark.parametrize("variant", [LineNumbers.ABSOLUTE, LineNumbers.RELATIVE, LineNumbers.RELATIVE_NUMBERED])
def test_labels_have_uniform_width_and_count(variant: LineNumbers) -> None:
    """Every label is exactly `width` cells and there is one per row."""
    gutter = Gutter(variant, width=3)
    labels = gutter.get_lines(total_lines=2000, current_line=0, scroll_row=990, height=20)
    assert len(labels) == 20
    assert {len(label) for label in labels} == {3}
    assert all(label.endswith(" ") for label in labels)


def test_custom_filler_glyph_and_minimum_width() -> None:
    """The filler is configurable and the width never drops below two."""
    gutter = Gutter(LineNumbers.ABSOLUTE, width=1, empty_line_char="·")
    assert gutter.width == 2
    assert gutter.get_lines(0, 0, 0, 1) == ["· "]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("absolute", LineNumbers.ABSOLUTE),
        ("Relative", LineNumbers.RELATIVE),
        ("relative-numbered", LineNumbers.RELATIVE_NUMBERED),
        ("RelativeNumbered", LineNumbers.RELATIVE_NUMBERED),
        ("none", LineNumbers.NONE),
    ],
)
def test_line_numbers_parse(text: str, expected: LineNumbers) -> None:
    """Config spellings map onto the variants."""
    assert LineNumbers.parse(text) is expected


def test_line_numbers_parse_rejects_unknown() -> None:
    """Unknown settings raise ValueError."""
    with pytest.raises(ValueError):
        LineNumbers.parse("roman")


def test_from_config(config) -> None:
    """Gutter settings come from the ``[editor]`` table."""
    config["editor"] = dict(config["editor"], line_numbers="relative", gutter_width=5, empty_line_char="-")
    gutter = Gutter.from_config(config)
    assert gutter.variant is LineNumbers.RELATIVE
    assert gutter.width == 5
    assert gutter.empty_line_char == "-"
