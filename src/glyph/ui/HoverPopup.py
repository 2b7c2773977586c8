# glyph/ui/HoverPopup.py
"""HoverPopup.py
========================
Bordered tooltip drawn over the content layer, showing hover documentation.

The popup opens on the row below the cursor when there is room, otherwise
above it, and is shifted left to stay inside the window. Text is wrapped to
the box by display width (wcwidth), so wide characters take two columns.

It keeps its own previous frame. When the content layer rewrites cells under
the popup in the same cycle, those popup cells are emitted again on top.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

from wcwidth import wcwidth

from glyph.core.Viewport import Position, Rect, Viewport
from glyph.ui.DrawScreen import Layer


if TYPE_CHECKING:
    from glyph.ui.Terminal import Terminal
    from glyph.ui.Theme import Theme


logger = logging.getLogger("glyph")

MAX_POPUP_WIDTH = 80
MAX_POPUP_LINES = 15


def hover_text(result: Any) -> str:
    """Plain text of a ``textDocument/hover`` result; empty when there is nothing to show."""
    if isinstance(result, list):
        result = result[0] if result else None
    if not isinstance(result, dict):
        return ""
    return _contents_text(result.get("contents")).strip()


def _contents_text(contents: Any) -> str:
    if isinstance(contents, str):
        return contents
    if isinstance(contents, dict):
        value = contents.get("value")
        return value if isinstance(value, str) else ""
    if isinstance(contents, list):
        parts = [_contents_text(item) for item in contents]
        return "\n\n".join(part for part in parts if part.strip())
    return ""


def _char_width(char: str) -> int:
    width = wcwidth(char)
    return width if width > 0 else 0


def wrap_lines(text: str, width: int) -> list[str]:
    """Hard-wraps `text` to `width` display columns. Markdown code fences are dropped."""
    lines: list[str] = []
    for raw_line in text.expandtabs(4).splitlines():
        if raw_line.strip().startswith("```"):
            continue
        current, used = "", 0
        for char in raw_line:
            size = _char_width(char)
            if used + size > width:
                lines.append(current)
                current, used = "", 0
            current += char
            used += size
        lines.append(current)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def _display_width(line: str) -> int:
    return sum(_char_width(char) for char in line)


# ==================== HoverPopup Class ====================
class HoverPopup(Layer):
    """HoverPopup Class
    ====================
    A one-off overlay; the window drops it on the next action.

    Attributes:
        lines (list[str]): Wrapped text, at most MAX_POPUP_LINES rows.
    """

    def __init__(
        self,
        text: str,
        anchor: Position,
        bounds: Rect,
        theme: "Theme",
        terminal: "Terminal",
    ) -> None:
        inner_max = max(min(MAX_POPUP_WIDTH, bounds.width) - 4, 1)
        self.lines = wrap_lines(text, inner_max)[:MAX_POPUP_LINES]
        inner_width = max((_display_width(line) for line in self.lines), default=0)
        super().__init__(self._place(anchor, bounds, inner_width + 4, len(self.lines) + 2), theme, terminal)

    @staticmethod
    def _place(anchor: Position, bounds: Rect, width: int, height: int) -> Rect:
        width = min(width, bounds.width)
        bottom = bounds.row + bounds.height
        below = bottom - (anchor.row + 1)
        above = anchor.row - bounds.row
        if below >= height or below >= above:
            row = anchor.row + 1
            height = min(height, max(below, 0))
        else:
            height = min(height, above)
            row = anchor.row - height
        col = min(anchor.col, bounds.col + bounds.width - width)
        return Rect(row, max(col, bounds.col), width, max(height, 0))

    def render(self, touched: Optional[set[tuple[int, int]]] = None) -> set[tuple[int, int]]:
        if self.area.is_empty:
            return set()
        viewport = self.new_viewport()
        self._draw_box(viewport)
        return self.present(viewport, touched)

    def _draw_box(self, viewport: Viewport) -> None:
        style = self.theme.hover
        width, height = viewport.width, viewport.height
        for row in range(height):
            viewport.set_text(0, row, " " * width, style)
        if width >= 2 and height >= 2:
            viewport.set_text(0, 0, "┌" + "─" * (width - 2) + "┐", style)
            viewport.set_text(0, height - 1, "└" + "─" * (width - 2) + "┘", style)
            for row in range(1, height - 1):
                viewport.set_cell(0, row, "│", style)
                viewport.set_cell(width - 1, row, "│", style)

        right_edge = width - 2
        for index, line in enumerate(self.lines[: max(height - 2, 0)]):
            col = 2
            for char in line:
                size = _char_width(char)
                if size == 0:
                    continue
                if col + size > right_edge:
                    break
                viewport.set_cell(col, index + 1, char, style)
                # the terminal draws a wide char across the next cell
                if size == 2:
                    viewport.set_cell(col + 1, index + 1, "", style)
                col += size
