# tests/ui/test_terminal.py
"""Unit tests for the curses backend in `glyph.ui.Terminal`.
==============================================================

`curses` is replaced by the `mock_curses` fixture, so these tests check the
calls made against it rather than real terminal output.
"""

import asyncio
import os
import signal
from unittest.mock import MagicMock

import pytest

from glyph.core.Actions import Mode
from glyph.core.Viewport import Style
from glyph.ui import Terminal as terminal_module
from glyph.ui.KeyBinder import KeyEvent, ResizeEvent
from glyph.ui.Terminal import (
    CURSOR_DEFAULT,
    CURSOR_STEADY_BAR,
    CURSOR_STEADY_BLOCK,
    Terminal,
    TerminalError,
    TerminalEvents,
)


@pytest.fixture
def entered(mock_curses, mock_stdscr) -> Terminal:
    term = Terminal(mock_stdscr)
    term.enter()
    return term


def test_size_is_cols_then_rows(mock_curses, mock_stdscr) -> None:
    """curses reports (rows, cols); the terminal returns (cols, rows)."""
    assert Terminal(mock_stdscr).size() == (80, 24)


def test_enter_sets_up_input_and_colors(entered: Terminal, mock_curses, mock_stdscr) -> None:
    """raw mode, no echo, keypad and color support."""
    mock_curses.raw.assert_called_once()
    mock_curses.noecho.assert_called_once()
    mock_stdscr.keypad.assert_called_with(True)
    mock_curses.start_color.assert_called_once()
    mock_curses.use_default_colors.assert_called_once()


def test_enter_falls_back_to_cbreak(mock_curses, mock_stdscr) -> None:
    """When raw mode fails cbreak is used."""
    mock_curses.raw.side_effect = mock_curses.error("no raw")
    Terminal(mock_stdscr).enter()
    mock_curses.cbreak.assert_called_once()


def test_exit_restores_modes_once(entered: Terminal, mock_curses, mock_stdscr) -> None:
    """exit() undoes enter(); a second call does nothing."""
    entered.exit()
    mock_stdscr.keypad.assert_called_with(False)
    mock_curses.noraw.assert_called_once()
    mock_curses.echo.assert_called_once()
    mock_curses.putp.assert_any_call(CURSOR_DEFAULT)
    entered.exit()
    mock_curses.noraw.assert_called_once()


def test_color_pairs_are_allocated_once(entered: Terminal, mock_curses) -> None:
    """Each (fg, bg) gets one pair; the default pair needs no allocation."""
    assert entered.color_pair(1, 2) == 1
    assert entered.color_pair(1, 2) == 1
    assert entered.color_pair(3, None) == 2
    assert entered.color_pair(None, None) == 0
    assert entered.color_pair(500, -1) == 0
    mock_curses.init_pair.assert_any_call(1, 1, 2)
    mock_curses.init_pair.assert_any_call(2, 3, -1)
    assert mock_curses.init_pair.call_count == 2


def test_no_colors_means_default_pair(mock_curses, mock_stdscr) -> None:
    """Monochrome terminals always use pair 0."""
    mock_curses.has_colors.return_value = False
    term = Terminal(mock_stdscr)
    term.enter()
    assert term.color_pair(1, 2) == 0


def test_attr_for_combines_pair_and_attributes(entered: Terminal) -> None:
    """Color pair bits OR the attribute flags."""
    attr = entered.attr_for(Style(fg=1, bg=2, attributes=frozenset({"bold", "underline"})))
    assert attr == (1 << 8) | 1 | 4


def test_put_writes_inside_and_drops_outside(entered: Terminal, mock_stdscr) -> None:
    """Only on-screen cells reach addstr."""
    entered.put(0, 0, "x", Style())
    entered.put(24, 0, "y", Style())
    entered.put(0, -1, "z", Style())
    mock_stdscr.addstr.assert_called_once_with(0, 0, "x", 0)


def test_put_failure_raises_terminal_error(entered: Terminal, mock_curses, mock_stdscr) -> None:
    """curses errors become TerminalError, except in the bottom-right cell."""
    mock_stdscr.addstr.side_effect = mock_curses.error("boom")
    entered.put(23, 79, "x", Style())
    with pytest.raises(TerminalError):
        entered.put(0, 0, "x", Style())


def test_move_cursor_and_flush(entered: Terminal, mock_curses, mock_stdscr) -> None:
    """Cursor moves inside the screen; flush refreshes once."""
    entered.move_cursor(3, 4)
    entered.move_cursor(99, 4)
    mock_stdscr.move.assert_called_once_with(3, 4)
    entered.flush()
    mock_stdscr.noutrefresh.assert_called_once()
    mock_curses.doupdate.assert_called_once()


def test_flush_failure_raises(entered: Terminal, mock_curses) -> None:
    """A failed screen update ends the session."""
    mock_curses.doupdate.side_effect = mock_curses.error("gone")
    with pytest.raises(TerminalError):
        entered.flush()


def test_cursor_style_per_mode(entered: Terminal, mock_curses) -> None:
    """Block in Normal mode, bar otherwise."""
    entered.set_cursor_style(Mode.NORMAL)
    mock_curses.putp.assert_called_with(CURSOR_STEADY_BLOCK)
    entered.set_cursor_style(Mode.INSERT)
    mock_curses.putp.assert_called_with(CURSOR_STEADY_BAR)


def test_events_drain_queues_every_pending_key(mock_curses, mock_stdscr, monkeypatch: pytest.MonkeyPatch) -> None:
    """One readable notification drains all buffered keys."""
    keys = [KeyEvent.char("a"), KeyEvent.named("Enter"), None]
    monkeypatch.setattr(terminal_module, "read_key_event", lambda window: keys.pop(0))
    events = TerminalEvents(mock_stdscr)
    events._drain()
    assert events.queue.qsize() == 2
    assert events.queue.get_nowait() == KeyEvent.char("a")


def test_resize_signal_queues_resize_event(mock_curses, mock_stdscr, monkeypatch: pytest.MonkeyPatch) -> None:
    """SIGWINCH resizes curses and reports the new size."""
    monkeypatch.setattr(terminal_module.shutil, "get_terminal_size", lambda: os.terminal_size((100, 30)))
    events = TerminalEvents(mock_stdscr)
    events._on_resize()
    mock_curses.resizeterm.assert_called_once_with(30, 100)
    assert events.queue.get_nowait() == ResizeEvent(100, 30)


def test_attach_and_detach_register_with_loop(mock_curses, mock_stdscr, monkeypatch: pytest.MonkeyPatch) -> None:
    """stdin readability and SIGWINCH are hooked into the loop."""
    monkeypatch.setattr(terminal_module.sys, "stdin", MagicMock(fileno=MagicMock(return_value=7)))
    loop = MagicMock()
    events = TerminalEvents(mock_stdscr)
    events.detach()
    events.attach(loop)
    mock_stdscr.nodelay.assert_called_with(True)
    loop.add_reader.assert_called_once_with(7, events._drain)
    if hasattr(signal, "SIGWINCH"):
        loop.add_signal_handler.assert_called_once_with(signal.SIGWINCH, events._on_resize)
    events.detach()
    loop.remove_reader.assert_called_once_with(7)


@pytest.mark.asyncio
async def test_next_event_waits_for_queue(mock_curses, mock_stdscr) -> None:
    """next_event resolves once something is queued."""
    events = TerminalEvents(mock_stdscr)
    waiter = asyncio.ensure_future(events.next_event())
    await asyncio.sleep(0)
    assert not waiter.done()
    events.queue.put_nowait(KeyEvent.char("q"))
    assert await asyncio.wait_for(waiter, 1) == KeyEvent.char("q")
