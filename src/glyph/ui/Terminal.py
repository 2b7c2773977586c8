# glyph/ui/Terminal.py
"""Terminal.py
========================
curses backend for the glyph renderer.

`Terminal` puts the tty into an application-friendly state and performs the
cell writes the render pipeline emits:

- Alternate screen buffer (smcup/rmcup) so the shell prompt is hidden.
- Application cursor keys (smkx/rmkx).
- raw + noecho (+ cbreak fallback), keypad(True), short ESC delay.
- A lazily filled color-pair cache keyed by (fg, bg).
- Cursor shape per mode (steady block in Normal, steady bar elsewhere).

`TerminalEvents` feeds decoded key events into an asyncio queue: stdin
readability drains every pending key with a nodelay `get_wch`, and SIGWINCH
is turned into a `ResizeEvent`.

Writes outside the screen are dropped silently. Any other curses failure
while writing or flushing raises `TerminalError`, which ends the session.
"""

from __future__ import annotations

import asyncio
import curses
import logging
import os
import shutil
import signal
import sys
from typing import TYPE_CHECKING, Optional

from glyph.core.Actions import Mode
from glyph.ui.KeyBinder import InputEvent, ResizeEvent, read_key_event

if TYPE_CHECKING:
    from glyph.core.Viewport import Style


logger = logging.getLogger("glyph")

CURSOR_STEADY_BLOCK = b"\x1b[2 q"
CURSOR_STEADY_BAR = b"\x1b[6 q"
CURSOR_DEFAULT = b"\x1b[0 q"


class TerminalError(OSError):
    """The terminal could not be written to."""


# ==================== Terminal Class ====================
class Terminal:
    """Terminal Class
    ====================
    Output side of the editor: application mode, color pairs and cell writes.

    Always pair `enter()` with `exit()` (try/finally).
    """

    def __init__(self, stdscr: curses.window) -> None:
        self.stdscr = stdscr
        self._entered = False
        self._pairs: dict[tuple[int, int], int] = {}
        self._colors_enabled = False
        self._max_colors = 8
        self._max_pairs = 0

    # --- lifecycle -------------------------------------------------------

    def enter(self) -> None:
        try:
            curses.setupterm()
        except curses.error as e:
            logging.debug("setupterm() failed or not required: %r", e)

        self._tputs("smcup")
        self._tputs("smkx")

        try:
            curses.raw()  # deliver all control chars (including ^Z) to us
        except curses.error:
            curses.cbreak()
        curses.noecho()
        self.stdscr.keypad(True)
        try:
            curses.set_escdelay(25)
        except (AttributeError, curses.error):
            os.environ.setdefault("ESCDELAY", "25")

        self._init_colors()

        self.stdscr.scrollok(False)
        self.stdscr.leaveok(False)
        self.stdscr.clearok(True)
        self.stdscr.erase()
        self.stdscr.refresh()

        self._entered = True
        logging.debug("Terminal: entered (alternate screen + app cursor keys).")

    def exit(self) -> None:
        if not self._entered:
            return
        try:
            self.stdscr.keypad(False)
            curses.noraw()
            curses.echo()
        except curses.error as e:
            logging.debug("Terminal: restoring input modes failed: %r", e)
        self._putp(CURSOR_DEFAULT)
        self._tputs("rmkx")
        self._tputs("rmcup")
        self._entered = False
        logging.debug("Terminal: exited (restored terminal modes).")

    def _init_colors(self) -> None:
        try:
            if not curses.has_colors():
                logging.info("Terminal has no color support; rendering monochrome.")
                return
            curses.start_color()
            curses.use_default_colors()  # allow -1 as the "default" color
        except curses.error as e:
            logging.warning("Color initialisation failed (%s); rendering monochrome.", e)
            return
        self._colors_enabled = True
        self._max_colors = curses.COLORS
        self._max_pairs = curses.COLOR_PAIRS
        logging.debug("Terminal colors: %d colors, %d pairs.", self._max_colors, self._max_pairs)

    # --- queries ---------------------------------------------------------

    def size(self) -> tuple[int, int]:
        """Returns (cols, rows)."""
        rows, cols = self.stdscr.getmaxyx()
        return cols, rows

    # --- styles ----------------------------------------------------------

    def _clamp_color(self, color: Optional[int]) -> int:
        if color is None or color < 0 or color >= self._max_colors:
            return -1
        return color

    def color_pair(self, fg: Optional[int], bg: Optional[int]) -> int:
        """Pair number for (fg, bg); 0 when colors are off or pairs ran out."""
        if not self._colors_enabled:
            return 0
        key = (self._clamp_color(fg), self._clamp_color(bg))
        if key == (-1, -1):
            return 0
        pair = self._pairs.get(key)
        if pair is not None:
            return pair
        pair = len(self._pairs) + 1
        if pair >= self._max_pairs:
            logging.debug("Color pairs exhausted; %r falls back to the default pair.", key)
            return 0
        try:
            curses.init_pair(pair, key[0], key[1])
        except curses.error as e:
            logging.warning("init_pair(%d, %r) failed: %s", pair, key, e)
            return 0
        self._pairs[key] = pair
        return pair

    def attr_for(self, style: Style) -> int:
        attr = curses.color_pair(self.color_pair(style.fg, style.bg))
        for name in style.attributes:
            attr |= {
                "bold": curses.A_BOLD,
                "italic": getattr(curses, "A_ITALIC", curses.A_NORMAL),
                "underline": curses.A_UNDERLINE,
                "dim": curses.A_DIM,
                "reverse": curses.A_REVERSE,
            }.get(name, curses.A_NORMAL)
        return attr

    # --- output ----------------------------------------------------------

    def put(self, row: int, col: int, char: str, style: Style) -> None:
        """Writes one cell. `style` must already be resolved against the theme."""
        rows, cols = self.stdscr.getmaxyx()
        if not (0 <= row < rows and 0 <= col < cols):
            return
        try:
            self.stdscr.addstr(row, col, char, self.attr_for(style))
        except curses.error as e:
            # curses reports an error after writing the bottom-right cell.
            if row == rows - 1 and col == cols - 1:
                return
            raise TerminalError(f"write at ({row}, {col}) failed: {e}") from e

    def move_cursor(self, row: int, col: int) -> None:
        rows, cols = self.stdscr.getmaxyx()
        if not (0 <= row < rows and 0 <= col < cols):
            logging.debug("Cursor target (%d, %d) outside the %dx%d screen.", row, col, cols, rows)
            return
        try:
            self.stdscr.move(row, col)
        except curses.error as e:
            raise TerminalError(f"cursor move to ({row}, {col}) failed: {e}") from e

    def hide_cursor(self) -> None:
        self._set_visibility(0)

    def show_cursor(self) -> None:
        self._set_visibility(1)

    def _set_visibility(self, visibility: int) -> None:
        try:
            curses.curs_set(visibility)
        except curses.error:
            logging.debug("Terminal does not support cursor visibility %d.", visibility)

    def set_cursor_style(self, mode: Mode) -> None:
        self._putp(CURSOR_STEADY_BLOCK if mode is Mode.NORMAL else CURSOR_STEADY_BAR)

    def clear(self) -> None:
        self.stdscr.erase()

    def flush(self) -> None:
        try:
            self.stdscr.noutrefresh()
            curses.doupdate()
        except curses.error as e:
            raise TerminalError(f"screen update failed: {e}") from e

    # --- helpers ---------------------------------------------------------

    def _putp(self, sequence: bytes) -> None:
        try:
            curses.putp(sequence)
        except curses.error as e:
            logging.debug("putp(%r) skipped: %r", sequence, e)

    def _tputs(self, capname: str) -> None:
        try:
            s = curses.tigetstr(capname)
            if s:
                curses.putp(s)
        except curses.error as e:
            # Non-fatal where capability is missing (FreeBSD console, etc.).
            logging.debug("tputs(%s) skipped: %r", capname, e)


# ==================== TerminalEvents Class ====================
class TerminalEvents:
    """Asyncio input source reading decoded key events from curses."""

    def __init__(self, stdscr: curses.window) -> None:
        self.stdscr = stdscr
        self.queue: asyncio.Queue[InputEvent] = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._fd: Optional[int] = None

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._fd = sys.stdin.fileno()
        self.stdscr.nodelay(True)
        loop.add_reader(self._fd, self._drain)
        if hasattr(signal, "SIGWINCH"):
            loop.add_signal_handler(signal.SIGWINCH, self._on_resize)

    def detach(self) -> None:
        if self._loop is None or self._fd is None:
            return
        self._loop.remove_reader(self._fd)
        if hasattr(signal, "SIGWINCH"):
            self._loop.remove_signal_handler(signal.SIGWINCH)
        self._loop = None

    def _drain(self) -> None:
        while True:
            event = read_key_event(self.stdscr)
            if event is None:
                break
            self.queue.put_nowait(event)

    def _on_resize(self) -> None:
        size = shutil.get_terminal_size()
        try:
            curses.resizeterm(size.lines, size.columns)
        except curses.error as e:
            logging.warning("resizeterm(%d, %d) failed: %s", size.lines, size.columns, e)
        self.queue.put_nowait(ResizeEvent(size.columns, size.lines))

    async def next_event(self) -> InputEvent:
        return await self.queue.get()
