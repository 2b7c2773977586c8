# glyph/ui/DrawScreen.py
"""DrawScreen.py
========================
Render pipeline of the glyph editor.

Every visible surface is a `Layer`: a fixed Rect on the terminal plus the
frame it drew last. A render builds a fresh `Viewport`, diffs it against
that frame and writes only the changed cells, translated to absolute
terminal coordinates and resolved against the theme default style. With no
comparable frame (first draw, resize, forced redraw) every cell is written.

`BufferView` is the content layer of a window: gutter labels on the left,
highlighted buffer text to their right, scrolled to keep the cursor visible,
followed by hardware cursor placement.
"""

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from glyph.core.Actions import Mode
from glyph.core.Cursor import column_limit
from glyph.core.Viewport import Cell, ChangedCell, Position, Rect, Viewport
from glyph.ui.Scrollable import maybe_scroll


if TYPE_CHECKING:
    from glyph.core.Buffer import TextBuffer
    from glyph.core.Cursor import Cursor
    from glyph.ui.Gutter import Gutter
    from glyph.ui.Terminal import Terminal
    from glyph.ui.Theme import Theme


logger = logging.getLogger("glyph")


# ==================== Layer Class ====================
class Layer:
    """Layer Class
    ====================
    A rectangle of the terminal with its own previous frame.

    Attributes:
        area (Rect): Absolute placement on the terminal.
        theme (Theme): Supplies the default style unset fields resolve to.
        terminal (Terminal): Receives the cell writes.
    """

    def __init__(self, area: Rect, theme: "Theme", terminal: "Terminal") -> None:
        self.area = area
        self.theme = theme
        self.terminal = terminal
        self._previous: Optional[Viewport] = None

    def invalidate(self) -> None:
        """Forces the next render to write every cell."""
        self._previous = None

    def resize(self, area: Rect) -> None:
        self.area = area
        self._previous = None

    def new_viewport(self) -> Viewport:
        return Viewport(self.area.width, self.area.height)

    def present(
        self,
        viewport: Viewport,
        touched: Optional[set[tuple[int, int]]] = None,
    ) -> set[tuple[int, int]]:
        """Emits `viewport` and keeps it as the previous frame.

        Args:
            viewport: Freshly drawn frame sized to `area`.
            touched: Absolute coordinates another layer wrote this cycle;
                cells of this layer found there are written again.

        Returns:
            The absolute coordinates written.
        """
        if self._previous is None:
            changes: Iterable[ChangedCell] = viewport.cells()
        else:
            changes = viewport.diff(self._previous)
            if touched:
                changes = self._with_touched(viewport, changes, touched)

        written: set[tuple[int, int]] = set()
        default = self.theme.style
        origin_row, origin_col = self.area.row, self.area.col
        for change in changes:
            row, col = origin_row + change.row, origin_col + change.col
            self.terminal.put(row, col, change.cell.char, change.cell.style.resolve(default))
            written.add((row, col))

        self._previous = viewport
        return written

    def _with_touched(
        self,
        viewport: Viewport,
        changes: list[ChangedCell],
        touched: set[tuple[int, int]],
    ) -> list[ChangedCell]:
        changed = {(c.row, c.col) for c in changes}
        extra = []
        for abs_row, abs_col in touched:
            row, col = abs_row - self.area.row, abs_col - self.area.col
            if (row, col) in changed:
                continue
            cell = viewport.get_cell(col, row)
            if cell is not None:
                extra.append(ChangedCell(row, col, cell))
        return sorted(changes + extra, key=lambda c: (c.row, c.col))


# ==================== BufferView Class ====================
class BufferView(Layer):
    """BufferView Class
    ====================
    Content layer of a window: gutter plus highlighted text.

    Attributes:
        gutter (Gutter): Line-number strategy; its width offsets the text.
        scroll (Position): First visible row and column of the text.
    """

    def __init__(self, area: Rect, gutter: "Gutter", theme: "Theme", terminal: "Terminal") -> None:
        super().__init__(area, theme, terminal)
        self.gutter = gutter
        self.scroll = Position()

    @property
    def text_area(self) -> Rect:
        """The part of `area` right of the gutter."""
        width = max(self.area.width - self.gutter.width, 0)
        return Rect(self.area.row, self.area.col + self.gutter.width, width, self.area.height)

    def maybe_scroll(self, cursor: "Cursor") -> None:
        self.scroll = maybe_scroll(cursor.position, self.text_area, self.scroll)

    def render(self, cells: list[Cell], total_lines: int, current_line: int) -> set[tuple[int, int]]:
        """Draws and emits one frame of the content layer.

        Args:
            cells: Highlighted cells of the visible slice, newlines included.
            total_lines: Buffer line count, for the gutter.
            current_line: 0-indexed cursor row, for relative numbering.
        """
        viewport = self.new_viewport()
        self.draw_cells(viewport, cells)
        self.draw_gutter(viewport, total_lines, current_line)
        return self.present(viewport)

    def draw_cells(self, viewport: Viewport, cells: list[Cell]) -> None:
        offset = self.gutter.width
        scroll_col = self.scroll.col
        row = col = 0
        for cell in cells:
            if row >= viewport.height:
                break
            x = offset + col - scroll_col
            if cell.char == "\n":
                if col >= scroll_col:
                    viewport.set_cell(x, row, " ", cell.style)
                row += 1
                col = 0
                continue
            if col >= scroll_col:
                char = " " if cell.char == "\t" else cell.char
                viewport.set_cell(x, row, char, cell.style)
            col += 1

    def draw_gutter(self, viewport: Viewport, total_lines: int, current_line: int) -> None:
        labels = self.gutter.get_lines(total_lines, current_line, self.scroll.row, viewport.height)
        for row, label in enumerate(labels):
            viewport.set_text(0, row, label, self.theme.gutter)

    def draw_cursor(self, cursor: "Cursor", buffer: "TextBuffer", mode: Mode) -> None:
        """Moves the hardware cursor onto the clamped cursor cell."""
        mark = buffer.get_by_line(cursor.row + 1)
        col = min(cursor.col, column_limit(mark, mode)) if mark is not None else 0
        row = self.area.row + cursor.row - self.scroll.row
        col = self.area.col + max(col - self.scroll.col, 0) + self.gutter.width
        self.terminal.move_cursor(row, col)
