# tests/stubs.py
"""Test stubs for glyph editor tests.

This module provides stand-ins for the editor's outer collaborators:
- `RecordingTerminal`: records every cell write, cursor move and flush.
- `ScriptedEvents`: an input source fed from a list of events.
- `FakeLsp`: an LSP client answering from a scripted message list.
"""

import asyncio
from typing import Any, Optional

from glyph.core.Actions import Mode
from glyph.core.Viewport import Style
from glyph.integrations.LspClient import LspMessage
from glyph.ui.KeyBinder import InputEvent


class RecordingTerminal:
    """Terminal double keeping the last cell written at each coordinate."""

    def __init__(self, cols: int = 40, rows: int = 12) -> None:
        self.cols = cols
        self.rows = rows
        self.screen: dict[tuple[int, int], tuple[str, Style]] = {}
        self.writes: list[tuple[int, int, str]] = []
        self.cursor: Optional[tuple[int, int]] = None
        self.cursor_visible = True
        self.cursor_styles: list[Mode] = []
        self.flushes = 0
        self.clears = 0

    def size(self) -> tuple[int, int]:
        return self.cols, self.rows

    def put(self, row: int, col: int, char: str, style: Style) -> None:
        self.screen[(row, col)] = (char, style)
        self.writes.append((row, col, char))

    def move_cursor(self, row: int, col: int) -> None:
        self.cursor = (row, col)

    def hide_cursor(self) -> None:
        self.cursor_visible = False

    def show_cursor(self) -> None:
        self.cursor_visible = True

    def set_cursor_style(self, mode: Mode) -> None:
        self.cursor_styles.append(mode)

    def clear(self) -> None:
        self.clears += 1
        self.screen.clear()

    def flush(self) -> None:
        self.flushes += 1

    # ---- helpers for assertions ----
    def reset_writes(self) -> None:
        self.writes.clear()

    def row_text(self, row: int) -> str:
        """Characters of one screen row, unwritten cells as spaces."""
        return "".join(self.screen.get((row, col), (" ", None))[0] or "" for col in range(self.cols))


class ScriptedEvents:
    """Input source replaying `events`; waits forever once they run out.

    An entry may be ``("sleep", seconds)`` to delay the next event so the
    poll timer gets a chance to fire.
    """

    def __init__(self, events: list[Any]) -> None:
        self.events = list(events)
        self.delivered: list[InputEvent] = []

    async def next_event(self) -> InputEvent:
        while self.events:
            item = self.events.pop(0)
            if isinstance(item, tuple) and item and item[0] == "sleep":
                await asyncio.sleep(item[1])
                continue
            self.delivered.append(item)
            return item
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


class FakeLsp:
    """LSP client double; `messages` are returned one per poll."""

    def __init__(self, messages: Optional[list[LspMessage]] = None, running: bool = True) -> None:
        self.messages = list(messages or [])
        self.running = running
        self.started = False
        self.opened: list[tuple[str, str]] = []
        self.changed: list[tuple[str, str]] = []
        self.hover_requests: list[tuple[str, int, int]] = []
        self.polls = 0
        self.next_id = 1
        self.shut_down = False

    @property
    def is_running(self) -> bool:
        return self.running and self.started

    def start(self) -> bool:
        self.started = self.running
        return self.running

    def did_open(self, file_name: str, text: str) -> None:
        self.opened.append((file_name, text))

    def did_change(self, file_name: str, text: str) -> None:
        self.changed.append((file_name, text))

    def request_hover(self, file_name: str, row: int, col: int) -> int:
        self.hover_requests.append((file_name, row, col))
        request_id = self.next_id
        self.next_id += 1
        return request_id

    def try_read_message(self) -> Optional[LspMessage]:
        self.polls += 1
        if not self.messages:
            return None
        return self.messages.pop(0)

    def shutdown(self) -> None:
        self.shut_down = True
