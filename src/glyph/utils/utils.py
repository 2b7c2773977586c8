# glyph/utils/utils.py
"""
glyph.utils.utils
=================

Core utility functions for the glyph editor.

Key functionalities include:
- Automatic User Configuration: writes a `config.toml` populated with the
  built-in defaults into `~/.config/glyph` on first run.
- Robust Configuration Loading: loads a hardcoded default configuration, then
  recursively merges user-defined settings from `~/.config/glyph/config.toml`.
  Keymaps merge per key, so a user table for `d` extends the default chord table.
- Theme file lookup in `~/.config/glyph/themes`.
- Color helpers: named colors, `#rrggbb` to xterm-256 conversion.

The editor is always runnable, even if the user configuration is missing or
corrupted, by falling back to the embedded defaults.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import toml

logger = logging.getLogger("glyph")

# --- Constants ---
WHITE_FG_IDX = 255
DEFAULT_COLOR_IDX = -1

NAMED_COLORS: Dict[str, int] = {
    "default": DEFAULT_COLOR_IDX, "reset": DEFAULT_COLOR_IDX,
    "black": 0, "red": 1, "green": 2, "yellow": 3,
    "blue": 4, "magenta": 5, "cyan": 6, "white": 7,
    "bright_black": 8, "grey": 8, "gray": 8, "bright_red": 9, "bright_green": 10,
    "bright_yellow": 11, "bright_blue": 12, "bright_magenta": 13, "bright_cyan": 14,
    "bright_white": 15,
}

# Hardcoded representation of the default `config.toml`.
# It is the ultimate fallback, the editor can ALWAYS start with it.
DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "gutter_width": 6,
        "line_numbers": "absolute",
        "empty_line_char": "~",
        "background": "dark",
        "theme": "",
        "poll_interval_ms": 30,
    },
    "lsp": {
        "enabled": True,
        "command": ["pylsp"],
        "language_id": "python",
    },
    "logging": {
        "log_file": "",
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
    },
    "keys": {
        "normal": {
            "h": "MoveLeft", "j": "MoveDown", "k": "MoveUp", "l": "MoveRight",
            "Left": "MoveLeft", "Down": "MoveDown", "Up": "MoveUp", "Right": "MoveRight",
            "0": "MoveToLineStart", "$": "MoveToLineEnd", "Home": "MoveToLineStart", "End": "MoveToLineEnd",
            "G": "MoveToBottom", "w": "NextWord",
            "x": "DeleteCurrentChar", "X": "DeletePreviousChar",
            "i": "EnterMode(Insert)", ":": "EnterMode(Command)",
            "a": ["EnterMode(Insert)", "MoveRight"],
            "A": ["EnterMode(Insert)", "MoveToLineEnd"],
            "I": ["MoveToLineStart", "EnterMode(Insert)"],
            "o": ["InsertLineBelow", "EnterMode(Insert)"],
            "O": ["InsertLineAbove", "EnterMode(Insert)"],
            "K": "Hover",
            "C-s": "SaveBuffer",
            "g": {"g": "MoveToTop"},
            "d": {"d": "DeleteLine"},
        },
        "insert": {
            "Esc": "EnterMode(Normal)",
            "Enter": "InsertLine",
            "Backspace": "DeletePreviousChar",
            "Delete": "DeleteCurrentChar",
            "Left": "MoveLeft", "Down": "MoveDown", "Up": "MoveUp", "Right": "MoveRight",
            "Home": "MoveToLineStart", "End": "MoveToLineEnd",
            "Tab": ["InsertChar( )", "InsertChar( )", "InsertChar( )", "InsertChar( )"],
            "C-s": "SaveBuffer",
        },
        "command": {
            "Esc": "EnterMode(Normal)",
            "Enter": ["ExecuteCommand", "EnterMode(Normal)"],
            "Backspace": "DeleteCommandChar",
        },
    },
    "theme": {},
}


# --- Helper Functions ---

def get_config_dir() -> Path:
    """Returns the user configuration directory (`~/.config/glyph`)."""
    return Path.home() / ".config" / "glyph"


def get_themes_dir() -> Path:
    """Returns the directory holding user theme files."""
    return get_config_dir() / "themes"


def ensure_user_config_exists() -> None:
    """Checks for the user config file in `~/.config/glyph` and creates it if missing."""
    try:
        config_dir = get_config_dir()
        user_config_path = config_dir / "config.toml"
        config_dir.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            with open(user_config_path, "w", encoding="utf-8") as f:
                toml.dump(DEFAULT_CONFIG, f)
            logger.info(f"Created user config template at: {user_config_path}")

    except OSError as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.

    Args:
        path: Explicit config file. When omitted the user config in
            `~/.config/glyph/config.toml` is used (and created if missing).
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    if path is None:
        ensure_user_config_exists()
        path = get_config_dir() / "config.toml"

    if path.is_file():
        try:
            user_config = toml.load(path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {path}")
        except (OSError, toml.TomlDecodeError) as e:
            logger.error(f"Could not parse user config '{path}': {e}. Using defaults.")

    return final_config


def load_theme_file(name: str) -> Dict[str, Any]:
    """Reads `~/.config/glyph/themes/<name>.toml`; an empty dict if absent or broken."""
    if not name:
        return {}
    theme_path = get_themes_dir() / (name if name.endswith(".toml") else f"{name}.toml")
    if not theme_path.is_file():
        logger.warning(f"Theme '{name}' not found at {theme_path}. Using built-in palette.")
        return {}
    try:
        return toml.load(theme_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.error(f"Could not parse theme '{theme_path}': {e}. Using built-in palette.")
        return {}


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def hex_to_xterm(hex_color: str) -> int:
    """
    Converts a hexadecimal color string to the nearest xterm-256 color index.
    """
    hex_color = hex_color.lstrip("#")
    if len(hex_color) != 6:
        return WHITE_FG_IDX
    try:
        r, g, b = (int(hex_color[i:i+2], 16) for i in (0, 2, 4))
    except ValueError:
        return WHITE_FG_IDX

    if r == g == b:
        if r < 8: return 16
        if r > 248: return 231
        return round(((r - 8) / 247) * 24) + 232

    return int(
        16
        + (36 * round(r / 255 * 5))
        + (6 * round(g / 255 * 5))
        + round(b / 255 * 5)
    )


def parse_color(value: Union[str, int, None]) -> Optional[int]:
    """
    Resolves a configured color into an xterm-256 index.

    Accepts a color name ("red", "bright_blue", "default"), a `#rrggbb`
    string, or an integer index. Unknown names resolve to None (unset).
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if -1 <= value <= 255 else None
    text = str(value).strip().lower()
    if text.startswith("#"):
        return hex_to_xterm(text)
    if text.lstrip("-").isdigit():
        return parse_color(int(text))
    if text in NAMED_COLORS:
        return NAMED_COLORS[text]
    logger.warning(f"Unknown color value {value!r}; leaving it unset.")
    return None
