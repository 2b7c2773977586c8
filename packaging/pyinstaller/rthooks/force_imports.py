# packaging/pyinstaller/rthooks/force_imports.py
"""Runtime hook to force-import the editor's third-party dependencies.

- Mandatory imports: must exist in the bundled app (build guarantees that).
- Optional imports: attempted, but ignored if missing.
"""

from importlib import import_module

# Imported at top-level by glyph modules
MANDATORY = [
    "toml",
    "chardet",
    "wcwidth",
    "pygments",
    "pygments.lexers",
]

# Lexer plugins are discovered lazily by pygments; keep the common ones bundled
OPTIONAL = [
    "pygments.lexers.python",
    "pygments.lexers.rust",
    "pygments.lexers.markup",
    "pygments.lexers.configs",
]

for name in MANDATORY:
    import_module(name)

for name in OPTIONAL:
    try:
        import_module(name)
    except ImportError:
        pass


# Terminfo lookup for curses on FreeBSD
try:
    import curses

    if hasattr(curses, "setupterm"):
        try:
            curses.setupterm()
        except curses.error:
            pass
except ImportError:
    pass

try:
    import locale

    locale.setlocale(locale.LC_ALL, "")
except locale.Error:
    pass
