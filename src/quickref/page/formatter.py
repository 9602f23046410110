"""Line Formatter Module - Render page tokens as terminal lines.

Styling is an explicit argument so rendering never depends on the terminal
it happens to run in.

Public API (the "studs"):
    render_lines: Format tokens into output lines
    render: Write formatted lines to a text sink
"""

from collections.abc import Iterable, Iterator
from typing import TextIO

import click

from quickref.errors import FilesystemError
from quickref.page.style import Style, StyleSheet
from quickref.page.tokens import Blank, CommandTemplate, LineToken, PlaceholderSpan

TEXT_INDENT = "  "
TEMPLATE_INDENT = "      "


def _paint(text: str, style: Style, styling_enabled: bool) -> str:
    if not styling_enabled or not text or style.is_plain:
        return text
    # None rather than False: click emits "not bold"/"not underlined" codes for False
    return click.style(
        text,
        fg=style.foreground,
        bold=style.bold or None,
        underline=style.underline or None,
    )


def _format_token(
    token: LineToken, token_style: Style, style: StyleSheet, styling_enabled: bool
) -> str:
    if isinstance(token, Blank):
        return ""
    if isinstance(token, CommandTemplate):
        if not token.spans:
            return ""
        parts = [
            _paint(
                span.text,
                style.placeholder if isinstance(span, PlaceholderSpan) else token_style,
                styling_enabled,
            )
            for span in token.spans
        ]
        return TEMPLATE_INDENT + "".join(parts)
    return TEXT_INDENT + _paint(token.text, token_style, styling_enabled)


def render_lines(
    tokens: Iterable[LineToken], style: StyleSheet, styling_enabled: bool
) -> Iterator[str]:
    """Format tokens into output lines, one line per token.

    Args:
        tokens: Token sequence, typically a Tokenizer
        style: Style sheet
        styling_enabled: Add ANSI styling; plain text when False

    Yields:
        Output lines without line endings

    Raises:
        FormatError: Propagated from the tokenizer
    """
    for token in tokens:
        yield _format_token(token, style.for_kind(token.kind), style, styling_enabled)


def render(
    tokens: Iterable[LineToken], style: StyleSheet, styling_enabled: bool, sink: TextIO
) -> None:
    """Write formatted lines to a sink until the tokens run out.

    Raises:
        FormatError: Propagated from the tokenizer
        FilesystemError: If writing to the sink fails
    """
    try:
        for line in render_lines(tokens, style, styling_enabled):
            sink.write(line + "\n")
        sink.flush()
    except OSError as e:
        raise FilesystemError("Failed to write output", e) from e
