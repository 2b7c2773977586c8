# glyph/main.py
"""
glyph Main Entry Point
======================

Launches the glyph editor:
1) Configuration & Logging: loads config and initializes logging first.
2) Locale: set from the environment so curses handles wide characters.
3) Curses Wrapper: safely initializes/tears down curses.
4) Application Run: builds the terminal backend, the input source, the LSP
   client and the editor, and runs the editor loop under asyncio.

Exit status is 1 when the session ends on an unhandled error.
"""

from __future__ import annotations

import asyncio
import curses
import locale
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

from glyph.utils.logging_config import setup_logging
from glyph.utils.utils import load_config


logger = logging.getLogger("glyph")


def _resolve_cli_path(argv: list[str]) -> Optional[str]:
    """
    Resolve an optional CLI path from argv[1], expanded to a user path.
    The file does NOT need to exist on disk; saving creates it.
    """
    if len(argv) <= 1:
        return None
    raw = argv[1].strip()
    if not raw:
        return None
    return str(Path(raw).expanduser())


async def run_editor(stdscr: curses.window, config: dict[str, Any], file_to_open: Optional[str]) -> None:
    from glyph.core.Editor import Editor
    from glyph.integrations.LspClient import LspClient
    from glyph.ui.Terminal import Terminal, TerminalEvents

    terminal = Terminal(stdscr)
    events = TerminalEvents(stdscr)
    lsp = LspClient.from_config(config)
    terminal.enter()
    try:
        events.attach(asyncio.get_running_loop())
        editor = Editor(config, terminal, events, lsp, file_to_open)
        await editor.start()
    finally:
        events.detach()
        lsp.shutdown()
        terminal.exit()


def main_app_runner(stdscr: curses.window, config: dict[str, Any], file_to_open: Optional[str]) -> None:
    """Target for `curses.wrapper`."""
    # Ignore terminal suspension (Ctrl+Z), typical for full-screen TUIs.
    if hasattr(signal, "SIGTSTP"):
        signal.signal(signal.SIGTSTP, signal.SIG_IGN)
    asyncio.run(run_editor(stdscr, config, file_to_open))


def start() -> None:
    """Loads configuration, sets up logging and locale, and runs the editor."""
    try:
        config = load_config()
        setup_logging(config)
    except Exception as e:
        # Logging is not ready; report on stderr.
        print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("glyph editor starting up...")
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    file_to_open = _resolve_cli_path(sys.argv)
    try:
        curses.wrapper(main_app_runner, config, file_to_open)
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)
    logger.info("glyph editor shut down gracefully.")


if __name__ == "__main__":
    start()
