# glyph/core/Editor.py
"""Editor Module
==================
Top-level controller of the glyph editor and its event loop.

The loop is single-threaded asyncio. Each iteration races a fresh poll timer
against the pending "next input event" task:

- Input first: the timer is cancelled, the event is resolved through the
  `KeyBinder`, flattened into actions and applied as one batch, and the
  frame is flushed once.
- Timer first: at most one language-server message is read without blocking
  and routed to the window.

The loop ends when a ``Quit`` action is applied. A `TerminalError` or an
`LspConnectionError` propagates out of `start()` and ends the session.

Command-line commands (``:q``, ``:q!``, ``:w``, ``:wq``, ``:x``) are executed
here since they touch the whole editor.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Optional, Protocol

from glyph.core.Actions import Action, ActionKind, KeyAction, Mode, build_keymaps, flatten_actions
from glyph.core.Buffer import TextBuffer
from glyph.core.Viewport import Rect
from glyph.integrations.LspClient import utf16_column
from glyph.ui.Commandline import Commandline
from glyph.ui.KeyBinder import InputEvent, KeyBinder
from glyph.ui.Statusline import Statusline
from glyph.ui.Theme import Theme
from glyph.ui.Window import Window


if TYPE_CHECKING:
    from glyph.integrations.LspClient import LspClient
    from glyph.ui.Terminal import Terminal


logger = logging.getLogger("glyph")

DEFAULT_POLL_INTERVAL_MS = 30


class EventSource(Protocol):
    async def next_event(self) -> InputEvent: ...


def layout(cols: int, rows: int) -> tuple[Rect, Rect, Rect]:
    """Window, statusline and commandline rects for a `cols` x `rows` terminal."""
    cols, rows = max(cols, 0), max(rows, 0)
    window = Rect(0, 0, cols, max(rows - 2, 0))
    statusline = Rect(max(rows - 2, 0), 0, cols, 1 if rows >= 2 else 0)
    commandline = Rect(max(rows - 1, 0), 0, cols, 1 if rows >= 1 else 0)
    return window, statusline, commandline


# ==================== Editor Class ====================
class Editor:
    """Class Editor
    ===================
    Owns the mode, the layers and the collaborators, and runs the loop.

    Attributes:
        mode (Mode): Current editing mode, changed only by ``EnterMode``.
        window (Window): The single window.
        keybinder (KeyBinder): Input resolution state machine.
        lsp (LspClient): Language-server connection (possibly disabled).
        poll_interval (float): Seconds between LSP polls when idle.
    """

    def __init__(
        self,
        config: dict[str, Any],
        terminal: "Terminal",
        events: EventSource,
        lsp: "LspClient",
        file_name: Optional[str] = None,
    ) -> None:
        self.config = config
        self.terminal = terminal
        self.events = events
        self.lsp = lsp
        self.mode = Mode.NORMAL
        self.theme = Theme.from_config(config)
        self.keybinder = KeyBinder(build_keymaps(config))

        interval_ms = config.get("editor", {}).get("poll_interval_ms", DEFAULT_POLL_INTERVAL_MS)
        self.poll_interval = max(float(interval_ms), 1.0) / 1000.0

        window_rect, status_rect, command_rect = layout(*terminal.size())
        buffer = TextBuffer(file_name)
        self.window = Window(window_rect, buffer, config, self.theme, terminal)
        self.statusline = Statusline(status_rect, self.theme, terminal)
        self.commandline = Commandline(command_rect, self.theme, terminal)
        self._synced_revision = buffer.revision

    @property
    def buffer(self) -> TextBuffer:
        return self.window.buffer

    # --- lifecycle -------------------------------------------------------

    async def start(self) -> None:
        """Runs until a Quit action is applied."""
        self.open_document()
        self.terminal.set_cursor_style(self.mode)
        self.window.initialize(self.mode)
        self.refresh()
        logger.info("Editor loop started.")

        pending_input: Optional[asyncio.Future] = None
        timer: Optional[asyncio.Future] = None
        try:
            while True:
                if pending_input is None:
                    pending_input = asyncio.ensure_future(self.events.next_event())
                timer = asyncio.ensure_future(asyncio.sleep(self.poll_interval))
                done, _ = await asyncio.wait({pending_input, timer}, return_when=asyncio.FIRST_COMPLETED)

                if pending_input in done:
                    timer.cancel()
                    event = pending_input.result()
                    pending_input = None
                    if not self.handle_event(event):
                        break
                else:
                    self.poll_lsp()
        finally:
            for task in (pending_input, timer):
                if task is not None:
                    task.cancel()
            logger.info("Editor loop stopped.")

    def open_document(self) -> None:
        if self.buffer.file_name and self.lsp.start():
            self.lsp.did_open(self.buffer.file_name, self.buffer.text)

    # --- input -----------------------------------------------------------

    def handle_event(self, event: InputEvent) -> bool:
        """Resolves and applies one input event. False when the editor should quit."""
        key_action = self.keybinder.poll(event, self.mode)
        if key_action is None:
            return True
        return self.handle_key_action(key_action)

    def handle_key_action(self, key_action: KeyAction) -> bool:
        """Applies every flattened action in order, then flushes the frame once."""
        for action in flatten_actions(key_action):
            if not self.apply_action(action):
                return False
        self.sync_document()
        self.refresh()
        return True

    def apply_action(self, action: Action) -> bool:
        """Applies one action. False only for Quit (or a command that quits)."""
        logger.debug(f"Applying {action} in {self.mode.value} mode.")
        match action.kind:
            case ActionKind.QUIT:
                return False
            case ActionKind.RESIZE:
                self.resize(*action.value)
                return True
            case ActionKind.ENTER_MODE:
                self.mode = action.value
                if self.mode is Mode.COMMAND:
                    self.commandline.clear()
                self.terminal.set_cursor_style(self.mode)

        self.window.handle_action(action, self.mode)

        match action.kind:
            case ActionKind.INSERT_COMMAND:
                self.commandline.insert(action.value)
            case ActionKind.DELETE_COMMAND_CHAR:
                self.commandline.delete_char()
            case ActionKind.EXECUTE_COMMAND:
                return self.execute_command(self.commandline.take())
            case ActionKind.SAVE_BUFFER:
                _, message = self.window.save()
                self.commandline.set_message(message)
            case ActionKind.HOVER:
                self.request_hover()
        return True

    def resize(self, cols: int, rows: int) -> None:
        logger.info(f"Terminal resized to {cols}x{rows}.")
        window_rect, status_rect, command_rect = layout(cols, rows)
        self.terminal.clear()
        self.statusline.resize(status_rect)
        self.commandline.resize(command_rect)
        self.window.resize(window_rect, self.mode)

    # --- commands --------------------------------------------------------

    def execute_command(self, command: str) -> bool:
        """Runs a command-line command. False when it quits the editor."""
        name, _, argument = command.partition(" ")
        argument = argument.strip()
        match name:
            case "":
                return True
            case "q":
                if self.buffer.modified:
                    self.commandline.set_message("No write since last change (add ! to override)")
                    return True
                return False
            case "q!":
                return False
            case "w":
                self.write(argument)
                return True
            case "wq":
                return not self.write(argument)
            case "x":
                if self.buffer.modified or argument:
                    return not self.write(argument)
                return False
            case _:
                self.commandline.set_message(f"Not an editor command: {command}")
                return True

    def write(self, file_name: str = "") -> bool:
        """Saves the buffer, optionally under a new name. True on success."""
        if file_name:
            self.buffer.file_name = file_name
        if not self.buffer.file_name:
            self.commandline.set_message("No file name")
            return False
        ok, message = self.window.save()
        self.commandline.set_message(message)
        return ok

    # --- LSP -------------------------------------------------------------

    def request_hover(self) -> None:
        file_name = self.buffer.file_name
        if not file_name or not self.lsp.is_running:
            logger.debug("Hover requested without a running language server.")
            return
        row, col = self.window.text_position()
        col = utf16_column(self.buffer.lines[row], col)
        self.window.expect_hover(self.lsp.request_hover(file_name, row, col))

    def sync_document(self) -> None:
        """Sends the buffer to the server once it changed."""
        if self.buffer.revision == self._synced_revision:
            return
        self._synced_revision = self.buffer.revision
        if self.buffer.file_name and self.lsp.is_running:
            self.lsp.did_change(self.buffer.file_name, self.buffer.text)

    def poll_lsp(self) -> None:
        message = self.lsp.try_read_message()
        if message is None:
            return
        if self.window.handle_lsp_message(message, self.mode):
            self.refresh()

    # --- output ----------------------------------------------------------

    def refresh(self) -> None:
        """Draws the bars, places the cursor and flushes the frame."""
        row, col = self.window.text_position()
        self.statusline.render(
            self.mode,
            self.buffer.file_name,
            self.buffer.modified,
            row + 1,
            col + 1,
            self.buffer.line_count(),
        )
        self.commandline.render(self.mode)
        if self.mode is Mode.COMMAND:
            self.commandline.draw_cursor()
        else:
            self.window.place_cursor(self.mode)
        self.terminal.flush()
