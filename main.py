#!/usr/bin/env python3
# /glyph/main.py
"""
glyph launcher
==============

Runs the editor from a source checkout without installing it: puts `src/`
on the import path and hands over to `glyph.main.start`.
"""

import os
import sys


# Ensure the 'glyph' package is importable for source runs.
src_root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if src_root not in sys.path:
    sys.path.insert(0, src_root)

from glyph.main import start  # noqa: E402


if __name__ == "__main__":
    start()
