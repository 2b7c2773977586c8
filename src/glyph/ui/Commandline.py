# glyph/ui/Commandline.py
"""Commandline.py
========================
Bottom row of the screen.

In Command mode it shows ``:`` followed by the command being typed, with
the cursor placed after the last character. In every other mode it shows
the last message (save result, unknown command, errors).
"""

import logging
from typing import TYPE_CHECKING

from glyph.core.Actions import Mode
from glyph.core.Viewport import Rect
from glyph.ui.DrawScreen import Layer


if TYPE_CHECKING:
    from glyph.ui.Terminal import Terminal
    from glyph.ui.Theme import Theme


logger = logging.getLogger("glyph")


# ==================== Commandline Class ====================
class Commandline(Layer):
    """Commandline Class
    ====================
    Attributes:
        text (str): Command typed so far, without the leading colon.
        message (str): Shown outside Command mode until replaced.
    """

    def __init__(self, area: Rect, theme: "Theme", terminal: "Terminal") -> None:
        super().__init__(area, theme, terminal)
        self.text = ""
        self.message = ""

    def insert(self, char: str) -> None:
        self.text += char

    def delete_char(self) -> None:
        self.text = self.text[:-1]

    def take(self) -> str:
        """Returns the typed command and clears the input."""
        command, self.text = self.text.strip(), ""
        return command

    def clear(self) -> None:
        self.text = ""

    def set_message(self, message: str) -> None:
        logger.debug(f"Commandline message: {message}")
        self.message = message

    def render(self, mode: Mode) -> set[tuple[int, int]]:
        viewport = self.new_viewport()
        line = f":{self.text}" if mode is Mode.COMMAND else self.message
        viewport.set_text(0, 0, line, self.theme.commandline)
        return self.present(viewport)

    def draw_cursor(self) -> None:
        col = min(self.area.col + 1 + len(self.text), self.area.col + max(self.area.width - 1, 0))
        self.terminal.move_cursor(self.area.row, col)
