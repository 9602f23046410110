"""Line tokens produced by the page tokenizer.

The token set is closed: every line of a valid page becomes exactly one of
Heading, Description, ExampleDescription, CommandTemplate or Blank.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar


class TokenKind(StrEnum):
    """Kinds of page lines, used as style sheet keys."""

    HEADING = "heading"
    DESCRIPTION = "description"
    EXAMPLE_DESCRIPTION = "example_description"
    COMMAND_TEMPLATE = "command_template"
    BLANK = "blank"


@dataclass(frozen=True)
class LiteralSpan:
    """Command text typed as-is."""

    text: str


@dataclass(frozen=True)
class PlaceholderSpan:
    """User-supplied argument, written ``{{text}}`` in the page."""

    text: str


Span = LiteralSpan | PlaceholderSpan


@dataclass(frozen=True)
class Heading:
    text: str
    kind: ClassVar[TokenKind] = TokenKind.HEADING


@dataclass(frozen=True)
class Description:
    text: str
    kind: ClassVar[TokenKind] = TokenKind.DESCRIPTION


@dataclass(frozen=True)
class ExampleDescription:
    text: str
    kind: ClassVar[TokenKind] = TokenKind.EXAMPLE_DESCRIPTION


@dataclass(frozen=True)
class CommandTemplate:
    spans: tuple[Span, ...]
    kind: ClassVar[TokenKind] = TokenKind.COMMAND_TEMPLATE

    @property
    def text(self) -> str:
        """Template text with placeholder braces removed."""
        return "".join(span.text for span in self.spans)


@dataclass(frozen=True)
class Blank:
    kind: ClassVar[TokenKind] = TokenKind.BLANK


LineToken = Heading | Description | ExampleDescription | CommandTemplate | Blank
