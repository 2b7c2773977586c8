# glyph/ui/Theme.py
"""Theme.py
========================
Colors for every rendering layer.

A theme starts from one of two built-in palettes, selected by
``editor.background`` (``dark`` or ``light``). A theme file named by
``editor.theme`` (``~/.config/glyph/themes/<name>.toml``) and the ``[theme]``
table of the main config are then merged on top, in that order.

Each entry is a table with optional ``fg``, ``bg`` and ``attributes`` keys;
colors may be names, ``#rrggbb`` strings or xterm-256 indices::

    [theme.default]
    fg = "#c9d1d9"
    bg = "default"

    [theme.tokens.keyword]
    fg = "#ff7b72"
    attributes = ["bold"]
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from glyph.core.Viewport import Style
from glyph.utils.utils import deep_merge, load_theme_file, parse_color


logger = logging.getLogger("glyph")

KNOWN_ATTRIBUTES = {"bold", "italic", "underline", "dim", "reverse"}

DARK_PALETTE: dict[str, Any] = {
    "default": {"fg": 252, "bg": "default"},
    "gutter": {"fg": 243},
    "statusline": {"fg": 255, "bg": 236},
    "statusline_mode": {"fg": 16, "bg": 110, "attributes": ["bold"]},
    "commandline": {},
    "hover": {"fg": 252, "bg": 237},
    "tokens": {
        "keyword": {"fg": "#ff7b72"},
        "builtin": {"fg": "#ffa657"},
        "function": {"fg": "#d2a8ff"},
        "class": {"fg": "#ffa657", "attributes": ["bold"]},
        "decorator": {"fg": "#d2a8ff"},
        "string": {"fg": "#a5d6ff"},
        "docstring": {"fg": "#8b949e"},
        "number": {"fg": "#79c0ff"},
        "comment": {"fg": "#8b949e", "attributes": ["italic"]},
        "operator": {"fg": "#ff7b72"},
        "tag": {"fg": "#7ee787"},
        "attribute": {"fg": "#79c0ff"},
        "error": {"fg": "red", "attributes": ["bold"]},
    },
}

LIGHT_PALETTE: dict[str, Any] = {
    "default": {"fg": 235, "bg": "default"},
    "gutter": {"fg": 246},
    "statusline": {"fg": 235, "bg": 253},
    "statusline_mode": {"fg": 255, "bg": 25, "attributes": ["bold"]},
    "commandline": {},
    "hover": {"fg": 235, "bg": 254},
    "tokens": {
        "keyword": {"fg": "#cf222e"},
        "builtin": {"fg": "#953800"},
        "function": {"fg": "#8250df"},
        "class": {"fg": "#953800", "attributes": ["bold"]},
        "decorator": {"fg": "#8250df"},
        "string": {"fg": "#0a3069"},
        "docstring": {"fg": "#6e7781"},
        "number": {"fg": "#0550ae"},
        "comment": {"fg": "#6e7781", "attributes": ["italic"]},
        "operator": {"fg": "#cf222e"},
        "tag": {"fg": "#116329"},
        "attribute": {"fg": "#0550ae"},
        "error": {"fg": "red", "attributes": ["bold"]},
    },
}


def parse_style(entry: Optional[dict[str, Any]]) -> Style:
    """Builds a Style from one theme table. Missing keys stay unset."""
    if not entry:
        return Style()
    attributes = set()
    for name in entry.get("attributes", []):
        if name in KNOWN_ATTRIBUTES:
            attributes.add(name)
        else:
            logger.warning(f"Unknown style attribute {name!r} ignored.")
    return Style(
        fg=parse_color(entry.get("fg")),
        bg=parse_color(entry.get("bg")),
        attributes=frozenset(attributes),
    )


@dataclass
class Theme:
    style: Style = field(default_factory=Style)
    gutter: Style = field(default_factory=Style)
    statusline: Style = field(default_factory=Style)
    statusline_mode: Style = field(default_factory=Style)
    commandline: Style = field(default_factory=Style)
    hover: Style = field(default_factory=Style)
    tokens: dict[str, Style] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, table: dict[str, Any]) -> "Theme":
        return cls(
            style=parse_style(table.get("default")),
            gutter=parse_style(table.get("gutter")),
            statusline=parse_style(table.get("statusline")),
            statusline_mode=parse_style(table.get("statusline_mode")),
            commandline=parse_style(table.get("commandline")),
            hover=parse_style(table.get("hover")),
            tokens={name: parse_style(entry) for name, entry in table.get("tokens", {}).items()},
        )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "Theme":
        editor_cfg = config.get("editor", {})
        background = str(editor_cfg.get("background", "dark")).lower()
        palette = LIGHT_PALETTE if background == "light" else DARK_PALETTE
        table = deep_merge(palette, load_theme_file(str(editor_cfg.get("theme", ""))))
        table = deep_merge(table, config.get("theme", {}))
        logger.debug(f"Theme built from {background} palette (theme file: {editor_cfg.get('theme') or 'none'}).")
        return cls.from_dict(table)

    def token_style(self, name: str) -> Optional[Style]:
        return self.tokens.get(name)
