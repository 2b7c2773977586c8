# glyph/ui/Gutter.py
"""Gutter.py
========================
Line-number labels for the left-hand gutter of a window.

The variant set is closed, so it is an Enum dispatched by a single match in
`get_lines` rather than a class hierarchy. Every numbered variant returns
exactly ``height`` labels of identical width, each ending in one separator
space, so the gutter columns diff cleanly between frames. Rows past the end
of the document carry the filler glyph instead of a number.
"""

from enum import Enum


class LineNumbers(Enum):
    ABSOLUTE = "absolute"
    RELATIVE = "relative"
    RELATIVE_NUMBERED = "relative_numbered"
    NONE = "none"

    @classmethod
    def parse(cls, value: str) -> "LineNumbers":
        normalized = str(value).strip().lower().replace("-", "_")
        if normalized == "relativenumbered":
            normalized = "relative_numbered"
        for variant in cls:
            if variant.value == normalized:
                return variant
        raise ValueError(f"Unknown line_numbers setting: {value!r}")


class Gutter:
    """Gutter Class
    ====================
    Produces per-row labels for one window.

    Attributes:
        variant (LineNumbers): Which numbering strategy to use.
        width (int): Configured gutter width in cells, separator included.
        empty_line_char (str): Filler glyph for rows past the last line.
    """

    def __init__(self, variant: LineNumbers, width: int = 6, empty_line_char: str = "~") -> None:
        self.variant = variant
        self._width = max(width, 2)
        self.empty_line_char = empty_line_char[:1] or "~"

    @classmethod
    def from_config(cls, config: dict) -> "Gutter":
        editor_cfg = config.get("editor", {})
        return cls(
            LineNumbers.parse(editor_cfg.get("line_numbers", "absolute")),
            int(editor_cfg.get("gutter_width", 6)),
            str(editor_cfg.get("empty_line_char", "~")),
        )

    @property
    def width(self) -> int:
        """Columns the gutter occupies; zero when line numbers are off."""
        return 0 if self.variant is LineNumbers.NONE else self._width

    def _label(self, text: str) -> str:
        # Right-align into width - 1 columns, then the separator space.
        return text.rjust(self._width - 1)[-(self._width - 1):] + " "

    def _filler(self) -> str:
        return self._label(self.empty_line_char)

    def get_lines(self, total_lines: int, current_line: int, scroll_row: int, height: int) -> list[str]:
        """Labels for the visible rows.

        Args:
            total_lines: Number of lines in the buffer.
            current_line: 0-indexed cursor line.
            scroll_row: First visible line (0-indexed).
            height: Number of visible rows.
        """
        match self.variant:
            case LineNumbers.NONE:
                return []
            case LineNumbers.ABSOLUTE:
                numbers = [str(scroll_row + i) for i in range(1, height + 1)]
            case LineNumbers.RELATIVE:
                numbers = [
                    str(abs(scroll_row + i + 1 - (current_line + 1))) for i in range(height)
                ]
            case LineNumbers.RELATIVE_NUMBERED:
                numbers = []
                for i in range(height):
                    line = scroll_row + i + 1
                    if line == current_line + 1:
                        numbers.append(str(line))
                    else:
                        numbers.append(str(abs(line - (current_line + 1))))

        visible = max(min(height, total_lines - scroll_row), 0)
        return [self._label(n) for n in numbers[:visible]] + [self._filler()] * (height - visible)
