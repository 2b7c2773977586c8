# key_debugger.py
"""Shows what glyph makes of each key press: the raw event and its keymap label.

Run from the repository root and press keys; the label line is what goes
into ``[keys.normal]`` / ``[keys.insert]`` / ``[keys.command]`` tables.
Press 'q' to quit.
"""

import curses
import os
import sys
import time

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))

from glyph.ui.KeyBinder import KeyEvent, ResizeEvent, canonical_key_label, read_key_event  # noqa: E402


def main(stdscr: "curses.window") -> None:
    curses.curs_set(0)
    stdscr.keypad(True)
    stdscr.nodelay(True)

    last_key_info: list[str] = []

    while True:
        stdscr.erase()
        height, width = stdscr.getmaxyx()

        title = "glyph Key Debugger"
        instructions = "Press any key to see its keymap label. Press 'q' to quit."
        stdscr.addstr(1, max((width - len(title)) // 2, 0), title[:width], curses.A_BOLD)
        stdscr.addstr(2, max((width - len(instructions)) // 2, 0), instructions[:width], curses.A_DIM)
        for i, line in enumerate(last_key_info[: max(height - 6, 0)]):
            stdscr.addstr(5 + i, 4, line[: max(width - 5, 0)])
        stdscr.refresh()

        event = read_key_event(stdscr)
        if event is None:
            # Nothing pending; give the terminal a moment to deliver sequences.
            time.sleep(0.02)
            continue

        if isinstance(event, ResizeEvent):
            last_key_info = [f"{'Resize:':<20} {event.cols}x{event.rows}"]
            continue

        if event == KeyEvent.char("q"):
            break

        last_key_info = [
            f"{'Keymap label:':<20} {canonical_key_label(event)}",
            f"{'Code:':<20} {event.code!r}",
            f"{'Character key:':<20} {event.is_char}",
            f"{'Modifiers:':<20} {', '.join(sorted(event.modifiers)) or '-'}",
        ]


if __name__ == "__main__":
    print("Starting key debugger... Press 'q' to quit.")
    try:
        curses.wrapper(main)
        print("Debugger finished.")
    except curses.error as e:
        print(f"An error occurred: {e}")
