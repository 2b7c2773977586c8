# glyph/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
Translates terminal input into editor actions.

Two layers live here:

1. Decoding. `read_key_event` turns what curses `get_wch` returns (characters,
   curses key codes, raw ESC-prefixed CSI/SS3 sequences) into a `KeyEvent` or
   a `ResizeEvent`.
2. Resolution. `KeyBinder.poll` is the per-mode resolution state machine.
   It canonicalizes the event into a key label (``"d"``, ``"Enter"``,
   ``"C-s"``, ``"A-x"``), looks it up in the mode's keymap and composes
   multi-key chords through `Complex` continuation tables.

Labels carry at most one modifier prefix, chosen by the fixed priority
Alt (``A-``) > Control (``C-``) > Shift (``S-``).
"""

import curses
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from wcwidth import wcswidth

from glyph.core.Actions import Action, Complex, KeyAction, Mode, Simple
from glyph.utils.logging_config import KEY_LOGGER


logger = logging.getLogger("glyph")

ALT = "alt"
CONTROL = "control"
SHIFT = "shift"


@dataclass(frozen=True)
class KeyEvent:
    """One key press: a character or a symbolic key name plus modifiers."""

    code: str
    is_char: bool = True
    modifiers: frozenset = field(default_factory=frozenset)

    @classmethod
    def char(cls, char: str, *modifiers: str) -> "KeyEvent":
        return cls(char, True, frozenset(modifiers))

    @classmethod
    def named(cls, name: str, *modifiers: str) -> "KeyEvent":
        return cls(name, False, frozenset(modifiers))


@dataclass(frozen=True)
class ResizeEvent:
    cols: int
    rows: int


InputEvent = Union[KeyEvent, ResizeEvent]


def canonical_key_label(event: KeyEvent) -> str:
    """Keymap label for `event`: the character or key name, with one modifier prefix."""
    if ALT in event.modifiers:
        prefix = "A-"
    elif CONTROL in event.modifiers:
        prefix = "C-"
    elif SHIFT in event.modifiers:
        prefix = "S-"
    else:
        prefix = ""
    return prefix + event.code


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Class KeyBinder
    ====================
    Resolves input events to KeyActions for the current mode.

    States: idle (``pending_chord is None``) or composing a chord whose first
    key label is ``pending_chord``. Composition always consults the Normal
    keymap and ends after exactly one further key, hit or miss.

    Attributes:
        keymaps (dict): Mode -> label -> KeyAction tables. Search mode has none.
    """

    def __init__(self, keymaps: dict[Mode, dict[str, KeyAction]]) -> None:
        self.keymaps = keymaps
        self._pending: Optional[str] = None

    @property
    def pending_chord(self) -> Optional[str]:
        """Label of the chord prefix being composed, None when idle."""
        return self._pending

    def poll(self, event: InputEvent, mode: Mode) -> Optional[KeyAction]:
        """Resolves one input event. Returns None when no action results."""
        if isinstance(event, ResizeEvent):
            if self._pending is not None:
                logger.debug(f"Resize cancelled pending chord {self._pending!r}.")
            self._pending = None
            return Simple(Action.resize(event.cols, event.rows))

        if self._pending is not None:
            return self._continue_chord(event)

        label = canonical_key_label(event)
        match mode:
            case Mode.NORMAL:
                resolved = self.keymaps.get(Mode.NORMAL, {}).get(label)
                if isinstance(resolved, Complex):
                    self._pending = label
                    KEY_LOGGER.debug("key %r: chord started", label)
                    return None
            case Mode.INSERT:
                resolved = self._lookup_or_fallback(Mode.INSERT, label, event, Action.insert_char)
            case Mode.COMMAND:
                resolved = self._lookup_or_fallback(Mode.COMMAND, label, event, Action.insert_command)
            case Mode.SEARCH:
                logger.debug(f"Search mode has no key handling; {label!r} ignored.")
                resolved = None

        KEY_LOGGER.debug("key %r in %s -> %r", label, mode.value, resolved)
        return resolved

    def _continue_chord(self, event: KeyEvent) -> Optional[KeyAction]:
        pending, self._pending = self._pending, None
        prefix = self.keymaps.get(Mode.NORMAL, {}).get(pending)
        key = event.code if event.is_char else " "
        resolved = prefix.get(key) if isinstance(prefix, Complex) else None
        KEY_LOGGER.debug("chord %r + %r -> %r", pending, key, resolved)
        return resolved

    def _lookup_or_fallback(
        self,
        mode: Mode,
        label: str,
        event: KeyEvent,
        fallback: Callable[[str], Action],
    ) -> Optional[KeyAction]:
        resolved = self.keymaps.get(mode, {}).get(label)
        if resolved is not None:
            return resolved
        if event.is_char and not event.modifiers and wcswidth(event.code) > 0:
            return Simple(fallback(event.code))
        return None


# ==================== Terminal input decoding ====================

# Normalized escape sequences. Keys do NOT include the leading ESC.
ESCAPE_SEQUENCE_MAP: dict[str, str] = {
    # Arrows (CSI and SS3)
    "[A": "Up", "[B": "Down", "[C": "Right", "[D": "Left",
    "OA": "Up", "OB": "Down", "OC": "Right", "OD": "Left",
    # Home/End (CSI/SS3 and tilde variants)
    "[H": "Home", "[F": "End", "OH": "Home", "OF": "End",
    "[1~": "Home", "[4~": "End", "[7~": "Home", "[8~": "End",
    # Insert/Delete/PageUp/PageDown (~ style)
    "[2~": "Insert", "[3~": "Delete", "[5~": "PageUp", "[6~": "PageDown",
    "[Z": "BackTab",
    # Function keys (SS3 and tilde variants)
    "OP": "F1", "OQ": "F2", "OR": "F3", "OS": "F4",
    "[11~": "F1", "[12~": "F2", "[13~": "F3", "[14~": "F4",
    "[15~": "F5", "[17~": "F6", "[18~": "F7", "[19~": "F8",
    "[20~": "F9", "[21~": "F10", "[23~": "F11", "[24~": "F12",
}

# xterm modifier parameter: 1 + (shift=1, alt=2, ctrl=4)
_MODIFIER_SEQUENCE_RE = re.compile(r"^\[(?:1;(?P<mod>\d+)(?P<final>[A-DHFPQRS])|(?P<num>\d+);(?P<mod2>\d+)~)$")

_CURSES_KEY_NAMES: dict[str, str] = {
    "KEY_UP": "Up", "KEY_DOWN": "Down", "KEY_LEFT": "Left", "KEY_RIGHT": "Right",
    "KEY_HOME": "Home", "KEY_END": "End", "KEY_PPAGE": "PageUp", "KEY_NPAGE": "PageDown",
    "KEY_IC": "Insert", "KEY_DC": "Delete", "KEY_BACKSPACE": "Backspace",
    "KEY_ENTER": "Enter", "KEY_BTAB": "S-BackTab",
    "KEY_SR": "S-Up", "KEY_SF": "S-Down", "KEY_SLEFT": "S-Left", "KEY_SRIGHT": "S-Right",
}


def _modifiers_from_param(param: int) -> frozenset:
    bits = max(param - 1, 0)
    mods = set()
    if bits & 1:
        mods.add(SHIFT)
    if bits & 2:
        mods.add(ALT)
    if bits & 4:
        mods.add(CONTROL)
    return frozenset(mods)


def decode_escape_sequence(seq: str) -> Optional[KeyEvent]:
    """Decodes the bytes following ESC. None for an unknown sequence."""
    if seq.startswith("\x1b"):
        seq = seq[1:]
    if not seq:
        return KeyEvent.named("Esc")

    # Alt chord: ESC + single printable
    if len(seq) == 1 and seq.isprintable():
        return KeyEvent.char(seq, ALT)

    name = ESCAPE_SEQUENCE_MAP.get(seq)
    if name:
        if name == "BackTab":
            return KeyEvent.named(name, SHIFT)
        return KeyEvent.named(name)

    match = _MODIFIER_SEQUENCE_RE.match(seq)
    if match:
        if match.group("final"):
            base = ESCAPE_SEQUENCE_MAP.get("[" + match.group("final")) or ESCAPE_SEQUENCE_MAP.get(
                "O" + match.group("final")
            )
            param = int(match.group("mod"))
        else:
            base = ESCAPE_SEQUENCE_MAP.get(f"[{match.group('num')}~")
            param = int(match.group("mod2"))
        if base:
            return KeyEvent(base, False, _modifiers_from_param(param))

    # Tolerant cleanup: keep only tokens relevant to terminal sequences.
    cleaned = "".join(re.findall(r"[\[O0-9;~A-Za-z]", seq))
    if cleaned != seq:
        return decode_escape_sequence(cleaned)
    return None


def decode_control_char(code: int) -> Optional[KeyEvent]:
    """Maps an ASCII control code (or DEL) to a key event."""
    if code in (10, 13):
        return KeyEvent.named("Enter")
    if code == 9:
        return KeyEvent.named("Tab")
    if code in (8, 127):
        return KeyEvent.named("Backspace")
    if code == 27:
        return KeyEvent.named("Esc")
    if code == 0:
        return KeyEvent.char(" ", CONTROL)
    if 1 <= code <= 26:
        return KeyEvent.char(chr(ord("a") + code - 1), CONTROL)
    if 28 <= code <= 31:
        return KeyEvent.char("\\]^_"[code - 28], CONTROL)
    return None


def decode_curses_key(code: int) -> Optional[KeyEvent]:
    """Maps a curses KEY_* code to a key event."""
    if curses.KEY_F0 < code <= curses.KEY_F0 + 12:
        return KeyEvent.named(f"F{code - curses.KEY_F0}")
    name = curses.keyname(code).decode("ascii", "ignore") if code >= 0 else ""
    label = _CURSES_KEY_NAMES.get(name)
    if label is None:
        return None
    if label.startswith("S-"):
        return KeyEvent.named(label[2:], SHIFT)
    return KeyEvent.named(label)


def read_key_event(window: "curses.window") -> Optional[InputEvent]:
    """Reads one event from a nodelay curses window. None when nothing is pending.

    ESC is followed by a non-blocking drain of the sequence bytes: a lone ESC,
    an Alt chord or a CSI/SS3 sequence.
    """
    try:
        ch = window.get_wch()
    except curses.error:
        return None

    if isinstance(ch, int):
        if ch == curses.KEY_RESIZE:
            rows, cols = window.getmaxyx()
            return ResizeEvent(cols, rows)
        event = decode_curses_key(ch)
        if event is None:
            logger.debug(f"read_key_event: unmapped curses key code {ch}")
        return event

    code = ord(ch)
    if code != 27:
        if code < 32 or code == 127:
            return decode_control_char(code)
        return KeyEvent.char(ch)

    seq = ""
    while True:
        try:
            nx = window.get_wch()
        except curses.error:
            break
        if isinstance(nx, int):
            # Rare extended code; keep as a marker, stripped by the cleanup pass.
            seq += f"<{nx}>"
        else:
            seq += nx

    event = decode_escape_sequence(seq)
    if event is None:
        logger.warning("read_key_event: unknown escape sequence: ESC + %r", seq)
        return KeyEvent.named("Esc")
    return event
