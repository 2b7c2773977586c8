# glyph/core/Cursor.py
"""Cursor.py
========================
Edit point of a window.

The cursor keeps a logical `row`/`col` pair plus the matching absolute
offset into the buffer. The column may sit past the end of a short line
after vertical movement; it is clamped whenever an offset is derived from
it and when the hardware cursor is drawn.

The buffer is passed into every call and never stored here: the window owns
it and routes each mutation through a single path.
"""

import logging
from typing import TYPE_CHECKING

from glyph.core.Actions import Action, ActionKind, Mode
from glyph.core.Viewport import Position


if TYPE_CHECKING:
    from glyph.core.Buffer import Mark, TextBuffer


logger = logging.getLogger("glyph")


def column_limit(mark: "Mark", mode: Mode) -> int:
    """Right-most column the cursor may rest on for a line in `mode`.

    Normal mode stops on the last character, other modes may append after it.
    """
    if mode is Mode.NORMAL:
        return max(mark.size - 2, 0)
    return max(mark.size - 1, 0)


class Cursor:
    def __init__(self, row: int = 0, col: int = 0) -> None:
        self.row = row
        self.col = col
        self.absolute_position = 0

    def __repr__(self) -> str:
        return f"Cursor(row={self.row}, col={self.col}, offset={self.absolute_position})"

    @property
    def position(self) -> Position:
        return Position(self.row, self.col)

    def sync(self, buffer: "TextBuffer", mode: Mode) -> None:
        """Clamps the row into the buffer and recomputes the absolute offset."""
        self.row = min(max(self.row, 0), buffer.line_count() - 1)
        mark = buffer.get_by_line(self.row + 1)
        if mark is None:
            self.absolute_position = 0
            return
        self.absolute_position = mark.start + min(self.col, column_limit(mark, mode))

    def move_to_offset(self, buffer: "TextBuffer", offset: int) -> None:
        mark = buffer.get_by_cursor(offset)
        if mark is None:
            mark = buffer.get_by_line(buffer.line_count())
            offset = mark.start + mark.size - 1
        self.row = mark.line - 1
        self.col = offset - mark.start

    def handle_action(self, action: Action, buffer: "TextBuffer", mode: Mode) -> None:
        """Moves the cursor for `action`. Text edits have already been applied to `buffer`."""
        kind = action.kind
        mark = buffer.get_by_line(self.row + 1)
        limit = column_limit(mark, mode) if mark else 0
        offset = self.absolute_position

        if kind is ActionKind.MOVE_LEFT:
            self.col = max(min(self.col, limit) - 1, 0)
        elif kind is ActionKind.MOVE_RIGHT:
            self.col = min(min(self.col, limit) + 1, limit)
        elif kind is ActionKind.MOVE_UP:
            self.row = max(self.row - 1, 0)
        elif kind is ActionKind.MOVE_DOWN:
            self.row = min(self.row + 1, buffer.line_count() - 1)
        elif kind is ActionKind.MOVE_TO_LINE_START:
            self.col = 0
        elif kind is ActionKind.MOVE_TO_LINE_END:
            self.col = limit
        elif kind is ActionKind.MOVE_TO_TOP:
            self.row = 0
        elif kind is ActionKind.MOVE_TO_BOTTOM:
            self.row = buffer.line_count() - 1
        elif kind is ActionKind.NEXT_WORD:
            self.move_to_offset(buffer, self._next_word_offset(buffer.text, offset))
        elif kind in (ActionKind.INSERT_CHAR, ActionKind.INSERT_LINE):
            self.move_to_offset(buffer, offset + 1)
        elif kind is ActionKind.DELETE_PREVIOUS_CHAR:
            self.move_to_offset(buffer, max(offset - 1, 0))
        elif kind is ActionKind.DELETE_CURRENT_CHAR:
            self.move_to_offset(buffer, offset)
        elif kind is ActionKind.INSERT_LINE_BELOW:
            self.row, self.col = self.row + 1, 0
        elif kind in (ActionKind.INSERT_LINE_ABOVE, ActionKind.DELETE_LINE):
            self.col = 0
        self.sync(buffer, mode)

    @staticmethod
    def _next_word_offset(text: str, offset: int) -> int:
        """Start of the next word after `offset`, or `offset` if there is none."""
        length = len(text)
        i = offset
        if i < length and (text[i].isalnum() or text[i] == "_"):
            while i < length and (text[i].isalnum() or text[i] == "_"):
                i += 1
        elif i < length and not text[i].isspace():
            while i < length and not text[i].isspace() and not (text[i].isalnum() or text[i] == "_"):
                i += 1
        while i < length and text[i].isspace():
            i += 1
        return i if i < length else offset
