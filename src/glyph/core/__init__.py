# src/glyph/core/__init__.py
"""Public facade for glyph.core: re-export the model classes from CamelCase modules.

`Editor` is imported from `glyph.core.Editor` directly; it depends on
`glyph.ui`, which in turn imports from here.
"""

# Re-export classes/symbols from CamelCase modules
from .Actions import Action, ActionKind, Complex, KeyAction, Mode, Multiple, Simple, flatten_actions  # noqa: F401
from .Buffer import Mark, TextBuffer  # noqa: F401
from .Cursor import Cursor  # noqa: F401
from .Viewport import Cell, ChangedCell, Position, Rect, Style, Viewport  # noqa: F401


__all__ = [
    "Action",
    "ActionKind",
    "Cell",
    "ChangedCell",
    "Complex",
    "Cursor",
    "KeyAction",
    "Mark",
    "Mode",
    "Multiple",
    "Position",
    "Rect",
    "Simple",
    "Style",
    "TextBuffer",
    "Viewport",
    "flatten_actions",
]
