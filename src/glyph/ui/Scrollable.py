# glyph/ui/Scrollable.py
"""Scrollable.py
========================
Scroll policy keeping the cursor inside a window's visible area.

`maybe_scroll` is a single ranked match: the first rule that applies wins and
only one axis moves per call. A cursor jump that leaves the view on both axes
is corrected vertically first. The downward rule also matches a cursor already
on the bottom row (re-deriving the same offset), so from there the column is
not corrected until the cursor leaves that row.
"""

from glyph.core.Viewport import Position, Rect


def _saturating_sub(a: int, b: int) -> int:
    return max(a - b, 0)


def maybe_scroll(cursor: Position, area: Rect, scroll: Position) -> Position:
    """Returns the scroll offset after at most one single-axis adjustment."""
    row, col = cursor.row, cursor.col

    if _saturating_sub(row + 1, scroll.row) >= area.height:
        return Position(row + 1 - area.height, scroll.col)
    if _saturating_sub(row + 1, scroll.row) == 0:
        return Position(row, scroll.col)
    if _saturating_sub(col, scroll.col) >= area.width:
        return Position(scroll.row, col + 1 - area.width)
    if _saturating_sub(col + 1, scroll.col) == 0:
        return Position(scroll.row, col)
    return scroll
