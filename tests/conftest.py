# tests/conftest.py
"""Pytest configuration with shared fixtures for the glyph editor tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from glyph.core.Buffer import TextBuffer
from glyph.core.Viewport import Rect, Style
from glyph.ui.Theme import Theme
from glyph.ui.Window import Window
from glyph.utils.utils import DEFAULT_CONFIG, deep_merge

from tests.stubs import FakeLsp, RecordingTerminal


# --- curses mocking for the terminal backend ---
@pytest.fixture
def mock_curses() -> Any:
    """Replace `curses` inside `glyph.ui.Terminal` with a configured MagicMock.

    Yields:
        MagicMock: The mocked module, 256 colors and 256 pairs available.
    """
    with patch("glyph.ui.Terminal.curses") as curses_mock:
        curses_mock.error = Exception
        curses_mock.has_colors.return_value = True
        curses_mock.COLORS = 256
        curses_mock.COLOR_PAIRS = 256
        curses_mock.A_NORMAL = 0
        curses_mock.A_BOLD = 1
        curses_mock.A_DIM = 2
        curses_mock.A_UNDERLINE = 4
        curses_mock.A_REVERSE = 8
        curses_mock.A_ITALIC = 16
        curses_mock.color_pair.side_effect = lambda n: n << 8
        yield curses_mock


@pytest.fixture
def mock_stdscr() -> MagicMock:
    """Create a mock of the `curses` stdscr for testing UI components.

    Returns:
        MagicMock: A mocked `stdscr` with terminal size set to (24, 80).
    """
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)  # Typical terminal size
    return stdscr


# --- Configuration fixtures ---
@pytest.fixture
def config() -> dict[str, Any]:
    """Embedded defaults with LSP and theme files out of the picture."""
    return deep_merge(DEFAULT_CONFIG, {"lsp": {"enabled": False}, "editor": {"theme": ""}})


@pytest.fixture
def theme() -> Theme:
    """A theme with a visible default and gutter style, no token styles."""
    return Theme(style=Style(fg=7, bg=0), gutter=Style(fg=8), hover=Style(fg=15, bg=4))


@pytest.fixture
def terminal() -> RecordingTerminal:
    return RecordingTerminal(cols=40, rows=12)


@pytest.fixture
def fake_lsp() -> FakeLsp:
    return FakeLsp()


# --- Window fixtures ---
@pytest.fixture
def sample_text() -> str:
    return "def hello():\n    return 1\n\nprint(hello())\n"


@pytest.fixture
def make_window(config: dict[str, Any], theme: Theme, terminal: RecordingTerminal):
    """Factory building a Window over in-memory text.

    Args (of the returned callable):
        text: Buffer contents.
        rect: Window placement, 40x10 at the origin by default.
        overrides: Config overrides merged onto the defaults.
    """

    def _make(text: str = "", rect: Rect = Rect(0, 0, 40, 10), **overrides: Any) -> Window:
        cfg = deep_merge(config, overrides)
        buffer = TextBuffer(text=text)
        return Window(rect, buffer, cfg, theme, terminal)

    return _make


@pytest.fixture
def python_file(tmp_path: Path, sample_text: str) -> Path:
    path = tmp_path / "sample.py"
    path.write_text(sample_text, encoding="utf-8")
    return path
