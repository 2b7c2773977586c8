# glyph/core/Buffer.py
"""Buffer.py
========================
Line-based text storage for one open document.

Every line keeps its trailing newline, so an empty document is ``["\\n"]``
and the size of a line's `Mark` counts the newline too. Offsets handed in
and out are absolute character offsets into the whole document.

Files are decoded with an encoding detected by chardet, falling back to
UTF-8 and latin-1, and saved back with the encoding they were read with.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import chardet

from glyph.core.Actions import Action, ActionKind


logger = logging.getLogger("glyph")

CHARDET_SAMPLE_SIZE = 1024 * 20
CHARDET_MIN_CONFIDENCE = 0.75


@dataclass(frozen=True)
class Mark:
    """Location of one line: absolute start offset, size including the newline, 1-indexed line."""

    start: int
    size: int
    line: int


def detect_and_decode(raw: bytes) -> tuple[str, str]:
    """Decodes `raw`, returning ``(text, encoding)``.

    A confident chardet guess is tried strictly first, then UTF-8 and
    latin-1, and finally UTF-8 with replacement characters.
    """
    if not raw:
        return "", "utf-8"

    guess = chardet.detect(raw[:CHARDET_SAMPLE_SIZE])
    encoding_guess = guess.get("encoding")
    confidence = guess.get("confidence") or 0.0
    logger.debug(f"Chardet detected encoding '{encoding_guess}' with confidence {confidence:.2f}.")

    candidates: list[str] = []
    if encoding_guess and confidence >= CHARDET_MIN_CONFIDENCE:
        candidates.append(encoding_guess)
    for fallback in ("utf-8", "latin-1"):
        if fallback not in candidates:
            candidates.append(fallback)

    for encoding in candidates:
        try:
            return raw.decode(encoding), encoding
        except (UnicodeDecodeError, LookupError):
            logger.debug(f"Decoding with '{encoding}' failed, trying next candidate.")
    return raw.decode("utf-8", errors="replace"), "utf-8"


def _split_lines(text: str) -> list[str]:
    """Splits on "\\n" only, keeping it. Other line breaks stay inside the line."""
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


# ==================== TextBuffer Class ====================
class TextBuffer:
    """TextBuffer Class
    ====================
    Holds the document as a list of newline-terminated lines and applies the
    text-editing actions at an absolute offset.

    Attributes:
        file_name (Optional[str]): Path the buffer was loaded from / saves to.
        encoding (str): Encoding used for reading and writing.
        modified (bool): True once the text diverges from the file on disk.
    """

    def __init__(self, file_name: Optional[str] = None, text: Optional[str] = None) -> None:
        self.file_name = file_name
        self.encoding = "utf-8"
        self.modified = False
        self.revision = 0
        if text is None and file_name and os.path.isfile(file_name):
            text = self._read_file(file_name)
        self.lines: list[str] = self._split(text or "")

    def _read_file(self, file_name: str) -> str:
        with open(file_name, "rb") as f:
            raw = f.read()
        text, self.encoding = detect_and_decode(raw)
        logger.info(f"Loaded '{file_name}' ({len(raw)} bytes, encoding {self.encoding}).")
        return text

    @staticmethod
    def _split(text: str) -> list[str]:
        text = text.replace("\r\n", "\n")
        if not text.endswith("\n"):
            text += "\n"
        return _split_lines(text)

    # --- queries -------------------------------------------------------

    @property
    def text(self) -> str:
        return "".join(self.lines)

    def line_count(self) -> int:
        return len(self.lines)

    def content_from(self, row: int, count: int) -> str:
        """Text of `count` lines starting at 0-indexed `row`."""
        if row < 0:
            row = 0
        return "".join(self.lines[row:row + count])

    def line_start(self, index: int) -> int:
        return sum(len(line) for line in self.lines[:index])

    def get_by_line(self, line: int) -> Optional[Mark]:
        """Mark of the 1-indexed `line`, or None when out of range."""
        if not 1 <= line <= len(self.lines):
            return None
        index = line - 1
        return Mark(self.line_start(index), len(self.lines[index]), line)

    def get_by_cursor(self, offset: int) -> Optional[Mark]:
        """Mark of the line holding absolute `offset`."""
        if offset < 0:
            return None
        start = 0
        for index, line in enumerate(self.lines):
            if offset < start + len(line):
                return Mark(start, len(line), index + 1)
            start += len(line)
        return None

    def _locate(self, offset: int) -> tuple[int, int]:
        """(line index, column) of `offset`, clamped into the document."""
        mark = self.get_by_cursor(offset)
        if mark is None:
            last = len(self.lines) - 1
            return last, len(self.lines[last]) - 1
        return mark.line - 1, offset - mark.start

    # --- mutations -----------------------------------------------------

    def handle_action(self, action: Action, offset: int) -> None:
        """Applies a text-editing action at absolute `offset`. Others are ignored."""
        kind = action.kind
        if kind is ActionKind.INSERT_CHAR:
            self.insert(offset, action.value)
        elif kind is ActionKind.INSERT_LINE:
            self.insert(offset, "\n")
        elif kind is ActionKind.DELETE_PREVIOUS_CHAR:
            if offset > 0:
                self.delete(offset - 1)
        elif kind is ActionKind.DELETE_CURRENT_CHAR:
            self.delete(offset)
        elif kind is ActionKind.INSERT_LINE_BELOW:
            index, _ = self._locate(offset)
            self.lines.insert(index + 1, "\n")
            self._touch()
        elif kind is ActionKind.INSERT_LINE_ABOVE:
            index, _ = self._locate(offset)
            self.lines.insert(index, "\n")
            self._touch()
        elif kind is ActionKind.DELETE_LINE:
            index, _ = self._locate(offset)
            del self.lines[index]
            if not self.lines:
                self.lines.append("\n")
            self._touch()
        elif kind is ActionKind.SAVE_BUFFER:
            self.save()

    def insert(self, offset: int, text: str) -> None:
        index, col = self._locate(offset)
        line = self.lines[index]
        merged = line[:col] + text + line[col:]
        self.lines[index:index + 1] = _split_lines(merged)
        self._touch()

    def delete(self, offset: int) -> None:
        """Removes the character at `offset`. The final newline is never removed."""
        index, col = self._locate(offset)
        line = self.lines[index]
        if line[col] == "\n":
            if index + 1 >= len(self.lines):
                return
            self.lines[index:index + 2] = [line[:-1] + self.lines[index + 1]]
        else:
            self.lines[index] = line[:col] + line[col + 1:]
        self._touch()

    def _touch(self) -> None:
        self.modified = True
        self.revision += 1

    def save(self) -> int:
        """Writes the buffer to `file_name`, returning the number of bytes written.

        Raises:
            ValueError: If the buffer has no file name.
            OSError: If the file cannot be written.
        """
        if not self.file_name:
            raise ValueError("No file name")
        data = self.text.encode(self.encoding, errors="replace")
        with open(self.file_name, "wb") as f:
            f.write(data)
        self.modified = False
        logger.info(f"Saved '{self.file_name}' ({len(data)} bytes).")
        return len(data)
