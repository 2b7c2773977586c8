# tests/ui/test_commandline.py
"""Unit tests for the command line row."""

from glyph.core.Actions import Mode
from glyph.core.Viewport import Rect
from glyph.ui.Commandline import Commandline


def test_command_mode_shows_typed_text(theme, terminal) -> None:
    """Typed characters follow a colon; the cursor sits after them."""
    line = Commandline(Rect(11, 0, 40, 1), theme, terminal)
    for char in "wqx":
        line.insert(char)
    line.delete_char()
    line.render(Mode.COMMAND)
    line.draw_cursor()
    assert terminal.row_text(11).startswith(":wq ")
    assert terminal.cursor == (11, 3)


def test_take_returns_stripped_command_and_clears(theme, terminal) -> None:
    """Executing consumes the input."""
    line = Commandline(Rect(0, 0, 40, 1), theme, terminal)
    for char in " w out.txt ":
        line.insert(char)
    assert line.take() == "w out.txt"
    assert line.text == ""


def test_other_modes_show_the_message(theme, terminal) -> None:
    """Outside Command mode the last message is shown."""
    line = Commandline(Rect(0, 0, 40, 1), theme, terminal)
    line.insert("q")
    line.set_message("Not an editor command: zz")
    line.render(Mode.NORMAL)
    assert terminal.row_text(0).startswith("Not an editor command: zz")


def test_cursor_is_capped_at_row_end(theme, terminal) -> None:
    """A long command keeps the cursor inside the row."""
    line = Commandline(Rect(5, 2, 6, 1), theme, terminal)
    for char in "abcdefghij":
        line.insert(char)
    line.draw_cursor()
    assert terminal.cursor == (5, 7)
