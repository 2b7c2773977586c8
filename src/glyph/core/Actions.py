# glyph/core/Actions.py
"""Actions.py
========================
Editor modes, atomic actions and the key-action descriptors bound to keys.

A key resolves to a `KeyAction`:

- `Simple(action)`: one action.
- `Multiple(actions)`: an ordered batch applied atomically.
- `Complex(mapping)`: a chord continuation table keyed by canonical key labels.

Keymaps come from the ``[keys.normal]``, ``[keys.insert]`` and
``[keys.command]`` configuration tables. A string value is a single action
(``"MoveLeft"``, ``"EnterMode(Insert)"``, ``"InsertChar(x)"``), a list is a
batch and a nested table is a chord.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union


logger = logging.getLogger("glyph")

_ACTION_RE = re.compile(r"^(?P<name>[A-Za-z]+)(?:\((?P<arg>.*)\))?$", re.DOTALL)


class Mode(Enum):
    NORMAL = "Normal"
    INSERT = "Insert"
    COMMAND = "Command"
    SEARCH = "Search"

    @classmethod
    def parse(cls, value: str) -> "Mode":
        for mode in cls:
            if mode.value.lower() == value.strip().lower():
                return mode
        raise ValueError(f"Unknown mode: {value!r}")


class ActionKind(Enum):
    MOVE_LEFT = "MoveLeft"
    MOVE_DOWN = "MoveDown"
    MOVE_UP = "MoveUp"
    MOVE_RIGHT = "MoveRight"
    MOVE_TO_LINE_START = "MoveToLineStart"
    MOVE_TO_LINE_END = "MoveToLineEnd"
    MOVE_TO_TOP = "MoveToTop"
    MOVE_TO_BOTTOM = "MoveToBottom"
    NEXT_WORD = "NextWord"
    DELETE_PREVIOUS_CHAR = "DeletePreviousChar"
    DELETE_CURRENT_CHAR = "DeleteCurrentChar"
    DELETE_LINE = "DeleteLine"
    INSERT_LINE = "InsertLine"
    INSERT_LINE_BELOW = "InsertLineBelow"
    INSERT_LINE_ABOVE = "InsertLineAbove"
    INSERT_CHAR = "InsertChar"
    INSERT_COMMAND = "InsertCommand"
    DELETE_COMMAND_CHAR = "DeleteCommandChar"
    EXECUTE_COMMAND = "ExecuteCommand"
    ENTER_MODE = "EnterMode"
    SAVE_BUFFER = "SaveBuffer"
    HOVER = "Hover"
    RESIZE = "Resize"
    QUIT = "Quit"


# Kinds that carry an argument
_ARG_KINDS = {
    ActionKind.INSERT_CHAR,
    ActionKind.INSERT_COMMAND,
    ActionKind.ENTER_MODE,
    ActionKind.RESIZE,
}


@dataclass(frozen=True)
class Action:
    """One atomic editor command with its optional argument."""

    kind: ActionKind
    value: Any = None

    def __str__(self) -> str:
        if self.kind is ActionKind.ENTER_MODE:
            return f"EnterMode({self.value.value})"
        if self.kind is ActionKind.RESIZE:
            return f"Resize({self.value[0]}, {self.value[1]})"
        if self.value is not None:
            return f"{self.kind.value}({self.value})"
        return self.kind.value

    @classmethod
    def insert_char(cls, char: str) -> "Action":
        return cls(ActionKind.INSERT_CHAR, char)

    @classmethod
    def insert_command(cls, char: str) -> "Action":
        return cls(ActionKind.INSERT_COMMAND, char)

    @classmethod
    def enter_mode(cls, mode: Mode) -> "Action":
        return cls(ActionKind.ENTER_MODE, mode)

    @classmethod
    def resize(cls, cols: int, rows: int) -> "Action":
        return cls(ActionKind.RESIZE, (cols, rows))


QUIT = Action(ActionKind.QUIT)


@dataclass(frozen=True)
class Simple:
    action: Action


@dataclass(frozen=True)
class Multiple:
    actions: tuple


@dataclass(frozen=True)
class Complex:
    mapping: Mapping[str, "KeyAction"]

    def get(self, label: str) -> Optional["KeyAction"]:
        return self.mapping.get(label)


KeyAction = Union[Simple, Multiple, Complex]


def flatten_actions(key_action: KeyAction) -> list[Action]:
    """Reduces a KeyAction to the ordered list of atomic actions to apply.

    A Complex flattens to every leaf of its table. Reached through chord
    composition only one leaf is picked, but dispatched directly (for example
    an Insert-mode binding) all of them run.
    """
    if isinstance(key_action, Simple):
        return [key_action.action]
    if isinstance(key_action, Multiple):
        return list(key_action.actions)
    actions: list[Action] = []
    for nested in key_action.mapping.values():
        actions.extend(flatten_actions(nested))
    return actions


def parse_action(text: str) -> Action:
    """Parses ``"Name"`` or ``"Name(arg)"`` into an Action.

    Raises:
        ValueError: On an unknown action name or a malformed argument.
    """
    match = _ACTION_RE.match(text.strip()) if text.strip() else None
    if match is None:
        raise ValueError(f"Malformed action: {text!r}")
    name, arg = match.group("name"), match.group("arg")
    try:
        kind = ActionKind(name)
    except ValueError:
        raise ValueError(f"Unknown action: {name!r}") from None

    if kind not in _ARG_KINDS:
        if arg is not None:
            raise ValueError(f"Action {name!r} takes no argument")
        return Action(kind)
    if arg is None:
        raise ValueError(f"Action {name!r} requires an argument")

    if kind is ActionKind.ENTER_MODE:
        return Action.enter_mode(Mode.parse(arg))
    if kind is ActionKind.RESIZE:
        cols, _, rows = arg.partition(",")
        return Action.resize(int(cols), int(rows))
    if len(arg) != 1:
        raise ValueError(f"Action {name!r} expects a single character, got {arg!r}")
    return Action(kind, arg)


def parse_key_action(value: Any) -> KeyAction:
    """Builds a KeyAction from one keymap configuration value."""
    if isinstance(value, str):
        return Simple(parse_action(value))
    if isinstance(value, (list, tuple)):
        return Multiple(tuple(parse_action(item) for item in value))
    if isinstance(value, Mapping):
        return Complex(build_keymap(value))
    raise ValueError(f"Unsupported keymap value: {value!r}")


def build_keymap(table: Mapping[str, Any]) -> dict[str, KeyAction]:
    """Converts one configuration table into a label -> KeyAction trie.

    Invalid entries are logged and skipped so one typo does not disable the
    whole keymap.
    """
    keymap: dict[str, KeyAction] = {}
    for label, value in table.items():
        try:
            keymap[str(label)] = parse_key_action(value)
        except ValueError as e:
            logger.warning(f"Ignoring key binding {label!r}: {e}")
    return keymap


def build_keymaps(config: dict[str, Any]) -> dict[Mode, dict[str, KeyAction]]:
    """Builds the per-mode keymaps from ``config["keys"]``. Search has none."""
    keys = config.get("keys", {})
    keymaps = {
        Mode.NORMAL: build_keymap(keys.get("normal", {})),
        Mode.INSERT: build_keymap(keys.get("insert", {})),
        Mode.COMMAND: build_keymap(keys.get("command", {})),
    }
    logger.debug(
        "Keymaps built: %s",
        {mode.value: len(table) for mode, table in keymaps.items()},
    )
    return keymaps
