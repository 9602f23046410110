"""Page tokenizing and rendering."""

from quickref.page.formatter import render, render_lines
from quickref.page.style import Style, StyleSheet
from quickref.page.tokenizer import Tokenizer, open_page, parse_template
from quickref.page.tokens import (
    Blank,
    CommandTemplate,
    Description,
    ExampleDescription,
    Heading,
    LineToken,
    LiteralSpan,
    PlaceholderSpan,
    TokenKind,
)

__all__ = [
    "Blank",
    "CommandTemplate",
    "Description",
    "ExampleDescription",
    "Heading",
    "LineToken",
    "LiteralSpan",
    "PlaceholderSpan",
    "Style",
    "StyleSheet",
    "TokenKind",
    "Tokenizer",
    "open_page",
    "parse_template",
    "render",
    "render_lines",
]
