# glyph/ui/Window.py
"""Window.py
========================
A window: one buffer, its cursor and the layers that present them.

Every cursor or buffer change goes through `Window.handle_action`, which
applies the text edit to the buffer at the cursor offset, moves the cursor,
and re-renders. The buffer is owned here and handed to the cursor per call.

A hover popup lives until the next action. Dropping it forces one full
redraw of the content layer so the cells it covered come back.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

from glyph.core.Actions import Action, ActionKind, Mode
from glyph.core.Buffer import TextBuffer
from glyph.core.Cursor import Cursor, column_limit
from glyph.core.Viewport import Cell, Position, Rect, Style
from glyph.integrations.Highlighter import Highlighter
from glyph.ui.DrawScreen import BufferView
from glyph.ui.Gutter import Gutter
from glyph.ui.HoverPopup import HoverPopup, hover_text


if TYPE_CHECKING:
    from glyph.integrations.LspClient import LspMessage
    from glyph.ui.Terminal import Terminal
    from glyph.ui.Theme import Theme


logger = logging.getLogger("glyph")

# Actions that change the text and so go to the buffer first
_EDIT_KINDS = {
    ActionKind.INSERT_CHAR,
    ActionKind.INSERT_LINE,
    ActionKind.DELETE_PREVIOUS_CHAR,
    ActionKind.DELETE_CURRENT_CHAR,
    ActionKind.INSERT_LINE_BELOW,
    ActionKind.INSERT_LINE_ABOVE,
    ActionKind.DELETE_LINE,
}

_MOVE_KINDS = {
    ActionKind.MOVE_LEFT,
    ActionKind.MOVE_DOWN,
    ActionKind.MOVE_UP,
    ActionKind.MOVE_RIGHT,
    ActionKind.MOVE_TO_LINE_START,
    ActionKind.MOVE_TO_LINE_END,
    ActionKind.MOVE_TO_TOP,
    ActionKind.MOVE_TO_BOTTOM,
    ActionKind.NEXT_WORD,
}


# ==================== Window Class ====================
class Window:
    """Window Class
    ====================
    Attributes:
        buffer (TextBuffer): The document shown.
        cursor (Cursor): Edit point inside `buffer`.
        view (BufferView): Content layer (gutter + text).
        popup (Optional[HoverPopup]): Hover overlay, if one is open.
    """

    def __init__(
        self,
        rect: Rect,
        buffer: TextBuffer,
        config: dict[str, Any],
        theme: "Theme",
        terminal: "Terminal",
        highlighter: Optional[Highlighter] = None,
    ) -> None:
        self.buffer = buffer
        self.cursor = Cursor()
        self.theme = theme
        self.terminal = terminal
        self.view = BufferView(rect, Gutter.from_config(config), theme, terminal)
        self.highlighter = highlighter or Highlighter(theme, buffer.file_name)
        self.popup: Optional[HoverPopup] = None
        self._awaited_hover: Optional[tuple[int, Position]] = None

    @property
    def rect(self) -> Rect:
        return self.view.area

    def initialize(self, mode: Mode) -> None:
        self.cursor.sync(self.buffer, mode)
        self.render(mode, force=True)

    def resize(self, rect: Rect, mode: Mode) -> None:
        logger.debug(f"Window resized to {rect.width}x{rect.height} at ({rect.row}, {rect.col}).")
        self.view.resize(rect)
        self.popup = None
        self.render(mode, force=True)

    # --- actions ---------------------------------------------------------

    def dismiss_popup(self) -> bool:
        """Drops the popup; the next render rewrites the whole content layer."""
        self._awaited_hover = None
        if self.popup is None:
            return False
        self.popup = None
        self.view.invalidate()
        return True

    def handle_action(self, action: Action, mode: Mode) -> None:
        """Applies a movement or edit action, then renders."""
        dismissed = self.dismiss_popup()
        kind = action.kind
        if kind in _EDIT_KINDS:
            if not self._is_noop_edit(action, mode):
                self.buffer.handle_action(action, self.cursor.absolute_position)
                self.cursor.handle_action(action, self.buffer, mode)
        elif kind in _MOVE_KINDS:
            self.cursor.handle_action(action, self.buffer, mode)
        elif kind is ActionKind.ENTER_MODE:
            # Leaving Insert can put the cursor past the Normal-mode limit.
            self.cursor.sync(self.buffer, mode)
        elif not dismissed:
            logger.debug(f"Window ignores action {action}.")
            return
        self.render(mode)

    def _is_noop_edit(self, action: Action, mode: Mode) -> bool:
        if action.kind is not ActionKind.DELETE_CURRENT_CHAR or mode is not Mode.NORMAL:
            return False
        # Normal-mode delete never joins lines
        return self.char_at_cursor() == "\n"

    def char_at_cursor(self) -> str:
        mark = self.buffer.get_by_cursor(self.cursor.absolute_position)
        if mark is None:
            return ""
        return self.buffer.lines[mark.line - 1][self.cursor.absolute_position - mark.start]

    def save(self) -> tuple[bool, str]:
        """Saves the buffer. Returns whether it worked and the message to show."""
        try:
            written = self.buffer.save()
        except ValueError:
            return False, "No file name"
        except OSError as e:
            logger.error(f"Saving '{self.buffer.file_name}' failed: {e}")
            return False, f"Error saving file: {e.strerror or e}"
        return True, f'"{self.buffer.file_name}" {self.buffer.line_count()}L, {written}B written'

    # --- LSP -------------------------------------------------------------

    def expect_hover(self, request_id: Optional[int]) -> None:
        """Remembers the hover request whose response may open a popup."""
        if request_id is None:
            self._awaited_hover = None
            return
        self._awaited_hover = (request_id, self.cursor.position)

    def handle_lsp_message(self, message: "LspMessage", mode: Mode) -> bool:
        """Routes one server message. Returns True when the screen changed."""
        if message.method != "textDocument/hover":
            logger.debug(f"LSP message {message.method!r} not handled by the window.")
            return False
        if self._awaited_hover is None:
            logger.debug(f"Hover response {message.id} arrived with no request pending; discarded.")
            return False
        awaited_id, position = self._awaited_hover
        if message.id != awaited_id or position != self.cursor.position:
            logger.debug(f"Stale hover response {message.id} discarded (awaiting {awaited_id}).")
            return False
        self._awaited_hover = None
        if message.error:
            logger.warning(f"Hover request failed: {message.error.get('message', message.error)}")
            return False

        text = hover_text(message.result)
        if not text:
            logger.debug("Hover response had no contents.")
            return False
        self.popup = HoverPopup(text, self.cursor_screen_position(mode), self.rect, self.theme, self.terminal)
        self.render(mode)
        return True

    def text_position(self) -> tuple[int, int]:
        """0-indexed row and the column the cursor actually sits on."""
        mark = self.buffer.get_by_line(self.cursor.row + 1)
        if mark is None:
            return self.cursor.row, 0
        return self.cursor.row, self.cursor.absolute_position - mark.start

    # --- rendering -------------------------------------------------------

    def cursor_screen_position(self, mode: Mode) -> Position:
        mark = self.buffer.get_by_line(self.cursor.row + 1)
        col = min(self.cursor.col, column_limit(mark, mode)) if mark is not None else 0
        scroll = self.view.scroll
        return Position(
            self.rect.row + self.cursor.row - scroll.row,
            self.rect.col + self.view.gutter.width + max(col - scroll.col, 0),
        )

    def get_highlight(self, text: str) -> list[Cell]:
        """One cell per character of `text`, styled from the highlighter spans."""
        spans = iter(self.highlighter.colorize(text))
        span = next(spans, None)
        plain = Style()
        cells: list[Cell] = []
        byte_index = 0
        for char in text:
            while span is not None and span.end <= byte_index:
                span = next(spans, None)
            if span is not None and span.start <= byte_index:
                cells.append(Cell(char, span.style))
            else:
                cells.append(Cell(char, plain))
            byte_index += len(char.encode("utf-8"))
        return cells

    def render(self, mode: Mode, force: bool = False) -> None:
        if force:
            self.view.invalidate()
            if self.popup is not None:
                self.popup.invalidate()
        self.terminal.hide_cursor()
        self.view.maybe_scroll(self.cursor)
        text = self.buffer.content_from(self.view.scroll.row, self.rect.height)
        written = self.view.render(self.get_highlight(text), self.buffer.line_count(), self.cursor.row)
        if self.popup is not None:
            self.popup.render(written)
        self.place_cursor(mode)
        self.terminal.show_cursor()

    def place_cursor(self, mode: Mode) -> None:
        self.view.draw_cursor(self.cursor, self.buffer, mode)
