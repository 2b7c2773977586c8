# glyph/ui/Statusline.py
"""Statusline.py
========================
One-row status bar under the window: mode, file name, scroll position and
the readable cursor position::

     NORMAL  main.py*                              42% 17:5

The file name is truncated by display width when the row gets too narrow.
"""

from typing import Optional

from wcwidth import wcswidth

from glyph.core.Actions import Mode
from glyph.ui.DrawScreen import Layer


def position_label(row: int, total_lines: int) -> str:
    """``TOP`` on the first line, ``BOT`` on the last, else the percentage through the file.

    `row` is 1-indexed.
    """
    if row <= 1:
        return "TOP"
    if row >= total_lines:
        return "BOT"
    return f"{row * 100 // total_lines}%"


def truncate_to_width(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if max(wcswidth(text), len(text)) <= width:
        return text
    out, used = "", 0
    for char in text:
        size = max(wcswidth(char), 1)
        if used + size > width - 1:
            break
        out += char
        used += size
    return out + "…"


# ==================== Statusline Class ====================
class Statusline(Layer):
    """Mode, file and position summary in the theme statusline style."""

    def render(
        self,
        mode: Mode,
        file_name: Optional[str],
        modified: bool,
        row: int,
        col: int,
        total_lines: int,
    ) -> set[tuple[int, int]]:
        """Draws the bar. `row` and `col` are 1-indexed."""
        viewport = self.new_viewport()
        if viewport.width == 0 or viewport.height == 0:
            return self.present(viewport)

        style = self.theme.statusline
        viewport.set_text(0, 0, " " * viewport.width, style)

        mode_label = f" {mode.value.upper()} "
        right = f"{position_label(row, total_lines)} {row}:{col} "
        name = (file_name or "[No Name]") + ("*" if modified else "")

        viewport.set_text(0, 0, mode_label, self.theme.statusline_mode)
        room = viewport.width - len(mode_label) - len(right) - 2
        viewport.set_text(len(mode_label), 0, " " + truncate_to_width(name, room), style)
        viewport.set_text(max(viewport.width - len(right), len(mode_label)), 0, right, style)
        return self.present(viewport)
