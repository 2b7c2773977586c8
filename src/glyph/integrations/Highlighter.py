# glyph/integrations/Highlighter.py
"""Highlighter.py
========================
Syntax highlighting backed by Pygments.

`Highlighter.colorize` lexes a slice of text and returns non-overlapping,
ordered `HighlightSpan`s in byte offsets over that slice. Token types are
mapped to theme token styles by walking up the Pygments token tree, so
``Token.Keyword.Constant`` falls back to the ``keyword`` style when it has
no entry of its own. Tokens without a style produce no span and render with
the theme default.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.token import Token, _TokenType
from pygments.util import ClassNotFound

from glyph.core.Viewport import Style


if TYPE_CHECKING:
    from glyph.ui.Theme import Theme


logger = logging.getLogger("glyph")

# Pygments token type -> theme token style name
TOKEN_STYLE_NAMES: dict[_TokenType, str] = {
    Token.Keyword: "keyword",
    Token.Name.Builtin: "builtin",
    Token.Name.Function: "function",
    Token.Name.Class: "class",
    Token.Name.Decorator: "decorator",
    Token.Name.Tag: "tag",
    Token.Name.Attribute: "attribute",
    Token.Literal.String: "string",
    Token.Literal.String.Doc: "docstring",
    Token.Literal.Number: "number",
    Token.Comment: "comment",
    Token.Operator: "operator",
    Token.Operator.Word: "keyword",
    Token.Error: "error",
}


@dataclass(frozen=True)
class HighlightSpan:
    start: int
    end: int
    style: Style


# ==================== Highlighter Class ====================
class Highlighter:
    """Highlighter Class
    ====================
    Colorizes text for one buffer.

    Attributes:
        theme (Theme): Supplies the per-token styles.
        lexer (Lexer): Pygments lexer picked from the file name.
    """

    def __init__(self, theme: "Theme", file_name: Optional[str] = None) -> None:
        self.theme = theme
        self.lexer = self._lexer_for(file_name)
        self._style_cache: dict[_TokenType, Optional[Style]] = {}

    @staticmethod
    def _lexer_for(file_name: Optional[str]) -> Lexer:
        # Leading/trailing newlines must survive lexing or byte offsets drift.
        options = {"stripnl": False, "ensurenl": False}
        if file_name:
            try:
                lexer = get_lexer_for_filename(file_name, **options)
                logger.debug(f"Lexer for '{file_name}': {lexer.name}")
                return lexer
            except ClassNotFound:
                logger.debug(f"No lexer for '{file_name}', using plain text.")
        return TextLexer(**options)

    def style_for(self, token_type: _TokenType) -> Optional[Style]:
        if token_type in self._style_cache:
            return self._style_cache[token_type]
        style = None
        current = token_type
        while current is not None:
            name = TOKEN_STYLE_NAMES.get(current)
            if name is not None:
                style = self.theme.token_style(name)
                break
            current = current.parent
        self._style_cache[token_type] = style
        return style

    def colorize(self, text: str) -> list[HighlightSpan]:
        """Byte-offset spans over `text` for every styled token."""
        spans: list[HighlightSpan] = []
        byte_offset = 0
        try:
            tokens = list(self.lexer.get_tokens_unprocessed(text))
        except Exception:
            # Third-party lexers raise arbitrary errors on odd input; render unstyled.
            logger.exception("Pygments tokenization failed; rendering without highlighting.")
            return spans

        for _index, token_type, value in tokens:
            size = len(value.encode("utf-8"))
            style = self.style_for(token_type)
            if style is not None and size:
                spans.append(HighlightSpan(byte_offset, byte_offset + size, style))
            byte_offset += size
        return spans
