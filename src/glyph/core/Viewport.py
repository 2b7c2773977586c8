# glyph/core/Viewport.py
"""Viewport.py
========================
Cell grid used by every rendering layer of the glyph editor.

A `Viewport` is a fixed-size, fully populated, row-major grid of `Cell`
values. Each render cycle builds a fresh viewport, diffs it against the frame
kept from the previous cycle and writes only the changed cells to the
terminal, so redraw cost follows the number of changed cells rather than the
pane area.

Styles carry optional colors. Unset fields are resolved against the theme
default only when a cell is written to the terminal (`Style.resolve`), so the
same grid stays valid after a theme change.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional


@dataclass(frozen=True)
class Style:
    """Foreground/background xterm-256 indices plus text attributes.

    ``None`` means "unset": the theme default fills it in at emit time.
    """

    fg: Optional[int] = None
    bg: Optional[int] = None
    attributes: frozenset = field(default_factory=frozenset)

    def resolve(self, default: "Style") -> "Style":
        """Fills every unset field from `default`."""
        return Style(
            fg=self.fg if self.fg is not None else default.fg,
            bg=self.bg if self.bg is not None else default.bg,
            attributes=self.attributes or default.attributes,
        )


@dataclass(frozen=True)
class Cell:
    char: str = " "
    style: Style = field(default_factory=Style)


@dataclass(frozen=True)
class Position:
    row: int = 0
    col: int = 0


@dataclass(frozen=True)
class Rect:
    """Placement of a layer in absolute terminal coordinates."""

    row: int = 0
    col: int = 0
    width: int = 0
    height: int = 0

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Rect dimensions must be non-negative, got {self.width}x{self.height}")

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0


@dataclass(frozen=True)
class ChangedCell:
    row: int
    col: int
    cell: Cell


# ==================== Viewport Class ====================
class Viewport:
    """Viewport Class
    ====================
    A width x height grid of cells for one rendering layer.

    Writes outside the grid are ignored: clipped rendering near the edges is
    expected and never an error. Diffing requires equal dimensions; the
    renderer guarantees it by always diffing within one layer's fixed Rect.
    """

    __slots__ = ("width", "height", "_cells")

    def __init__(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._cells: list[Cell] = [Cell()] * (self.width * self.height)

    def __repr__(self) -> str:
        return f"Viewport({self.width}x{self.height})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Viewport):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self._cells == other._cells
        )

    def _index(self, col: int, row: int) -> Optional[int]:
        if 0 <= col < self.width and 0 <= row < self.height:
            return row * self.width + col
        return None

    def get_cell(self, col: int, row: int) -> Optional[Cell]:
        idx = self._index(col, row)
        return None if idx is None else self._cells[idx]

    def set_cell(self, col: int, row: int, char: str, style: Optional[Style] = None) -> None:
        idx = self._index(col, row)
        if idx is None:
            return
        self._cells[idx] = Cell(char, style if style is not None else Style())

    def set_text(self, col: int, row: int, text: str, style: Optional[Style] = None) -> None:
        """Writes `text` left to right from `col`, clipping at the right edge."""
        if not 0 <= row < self.height:
            return
        for offset, char in enumerate(text):
            x = col + offset
            if x >= self.width:
                break
            self.set_cell(x, row, char, style)

    def copy(self) -> "Viewport":
        clone = Viewport(self.width, self.height)
        clone._cells = list(self._cells)
        return clone

    def apply(self, changes: list[ChangedCell]) -> None:
        """Writes every changed cell onto this grid."""
        for change in changes:
            self.set_cell(change.col, change.row, change.cell.char, change.cell.style)

    def cells(self) -> Iterator[ChangedCell]:
        """Every cell in row-major order, used for unconditional full redraws."""
        for idx, cell in enumerate(self._cells):
            row, col = divmod(idx, self.width)
            yield ChangedCell(row, col, cell)

    def diff(self, previous: "Viewport") -> list[ChangedCell]:
        """Returns the cells of this grid that differ from `previous`, row-major.

        Raises:
            ValueError: If the two grids do not share dimensions.
        """
        if self.width != previous.width or self.height != previous.height:
            raise ValueError(
                f"Cannot diff viewports of different sizes: "
                f"{self.width}x{self.height} vs {previous.width}x{previous.height}"
            )
        changes: list[ChangedCell] = []
        width = self.width
        for idx, (cell, old) in enumerate(zip(self._cells, previous._cells)):
            if cell != old:
                row, col = divmod(idx, width)
                changes.append(ChangedCell(row, col, cell))
        return changes
