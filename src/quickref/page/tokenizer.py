"""Page Tokenizer Module - Single-pass lexer for the tldr page dialect.

Philosophy:
- One line in, at most one token out
- Parsing state is explicit data; `step` is a pure transition function
- Lazy and forward-only: tokens are produced as lines are read

Public API (the "studs"):
    Phase: Tokenizer phases
    TokenizerState: Phase plus the open code fence, if any
    step: Pure transition (state, line) -> (state, token or None)
    finish: Transition at end of input
    parse_template: Split a command template into literal/placeholder spans
    Tokenizer: Lazy iterator of tokens over lines
    open_page: Open a page file and tokenize it

Dialect:
    # tar                                 -> Heading
    > Archiving utility.                  -> Description
    - Create an archive from files:       -> ExampleDescription
    `tar cf {{target.tar}} {{file}}`      -> CommandTemplate
    (empty line)                          -> Blank
"""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from quickref.errors import FilesystemError, FormatError
from quickref.page.tokens import (
    Blank,
    CommandTemplate,
    Description,
    ExampleDescription,
    Heading,
    LineToken,
    LiteralSpan,
    PlaceholderSpan,
    Span,
)

logger = logging.getLogger(__name__)

HEADING_MARKER = "#"
DESCRIPTION_MARKER = ">"
EXAMPLE_MARKER = "-"
CODE_MARKER = "`"
FENCE_MARKER = "```"
PLACEHOLDER_OPEN = "{{"
PLACEHOLDER_CLOSE = "}}"


class Phase(StrEnum):
    """Where the tokenizer is within a page."""

    READING_HEADING = "reading_heading"
    READING_DESCRIPTION = "reading_description"
    READING_EXAMPLES = "reading_examples"
    DONE = "done"


@dataclass(frozen=True)
class TokenizerState:
    """Tokenizer state between two lines.

    Attributes:
        phase: Current phase
        fence: Closing marker of the open code block, None outside one
    """

    phase: Phase = Phase.READING_HEADING
    fence: str | None = None


INITIAL_STATE = TokenizerState()


def parse_template(text: str) -> tuple[Span, ...]:
    """Split a command template into literal and placeholder spans.

    An unterminated ``{{`` is kept as literal text.

    Example:
        >>> parse_template("tar xf {{archive}}")
        (LiteralSpan(text='tar xf '), PlaceholderSpan(text='archive'))
    """
    spans: list[Span] = []
    pos = 0
    while pos < len(text):
        start = text.find(PLACEHOLDER_OPEN, pos)
        if start == -1:
            break
        end = text.find(PLACEHOLDER_CLOSE, start + len(PLACEHOLDER_OPEN))
        if end == -1:
            break
        if start > pos:
            spans.append(LiteralSpan(text[pos:start]))
        spans.append(PlaceholderSpan(text[start + len(PLACEHOLDER_OPEN) : end]))
        pos = end + len(PLACEHOLDER_CLOSE)
    if pos < len(text):
        spans.append(LiteralSpan(text[pos:]))
    return tuple(spans)


def step(state: TokenizerState, line: str) -> tuple[TokenizerState, LineToken | None]:
    """Consume one line.

    Args:
        state: State before the line
        line: Raw line, with or without its line ending

    Returns:
        (state after the line, token for the line or None)

    Raises:
        FormatError: If the line is not allowed here
    """
    line = line.rstrip("\r\n")

    if state.phase == Phase.DONE:
        raise FormatError("input after end of page")
    if state.fence is not None:
        return _step_in_fence(state, line)

    line = line.rstrip()
    if not line:
        return state, Blank()

    marker = line[0]
    if state.phase == Phase.READING_HEADING and marker != HEADING_MARKER:
        raise FormatError(f"page must start with a '{HEADING_MARKER}' heading")

    if marker == HEADING_MARKER:
        return TokenizerState(Phase.READING_DESCRIPTION), Heading(line.lstrip(HEADING_MARKER).strip())
    if marker == DESCRIPTION_MARKER:
        return TokenizerState(Phase.READING_DESCRIPTION), Description(line[1:].strip())
    if marker == EXAMPLE_MARKER:
        return TokenizerState(Phase.READING_EXAMPLES), ExampleDescription(line[1:].strip())
    if marker == CODE_MARKER:
        return _step_code(line)
    raise FormatError(f"unexpected line {line!r}")


def _step_code(line: str) -> tuple[TokenizerState, LineToken | None]:
    if line.startswith(FENCE_MARKER):
        return TokenizerState(Phase.READING_EXAMPLES, fence=FENCE_MARKER), None

    body = line[len(CODE_MARKER) :]
    if body.endswith(CODE_MARKER):
        return TokenizerState(Phase.READING_EXAMPLES), CommandTemplate(parse_template(body[:-1]))

    # Inline code left open; it runs until a line ending with a backtick
    state = TokenizerState(Phase.READING_EXAMPLES, fence=CODE_MARKER)
    return state, CommandTemplate(parse_template(body)) if body else None


def _step_in_fence(state: TokenizerState, line: str) -> tuple[TokenizerState, LineToken | None]:
    if state.fence == FENCE_MARKER:
        if line.startswith(FENCE_MARKER):
            return TokenizerState(state.phase), None
        return state, CommandTemplate(parse_template(line))

    closing = line.rstrip()
    if closing.endswith(CODE_MARKER):
        body = closing[: -len(CODE_MARKER)]
        return TokenizerState(state.phase), CommandTemplate(parse_template(body)) if body else None
    return state, CommandTemplate(parse_template(line))


def finish(state: TokenizerState) -> TokenizerState:
    """Transition at end of input.

    Raises:
        FormatError: If a code block is still open or the page had no heading
    """
    if state.fence is not None:
        raise FormatError("unterminated code block at end of page")
    if state.phase == Phase.READING_HEADING:
        raise FormatError("page is empty")
    return TokenizerState(Phase.DONE)


class Tokenizer:
    """Lazy, single-pass iterator of LineTokens over page lines.

    The tokenizer cannot be restarted; create a new one over a re-opened source
    to read a page again.

    Example:
        >>> tokens = list(Tokenizer(["# tar", "", "> Archiving utility."]))
        >>> tokens[0]
        Heading(text='tar')
    """

    def __init__(self, lines: Iterable[str]):
        self._lines = iter(lines)
        self._state = INITIAL_STATE
        self.line_number = 0

    @classmethod
    def from_text(cls, text: str) -> "Tokenizer":
        return cls(text.splitlines())

    @property
    def state(self) -> TokenizerState:
        return self._state

    def __iter__(self) -> Iterator[LineToken]:
        return self

    def __next__(self) -> LineToken:
        while self._state.phase != Phase.DONE:
            line = self._read_line()
            if line is None:
                self._state = finish(self._state)
                break

            self.line_number += 1
            try:
                self._state, token = step(self._state, line)
            except FormatError as e:
                raise FormatError(e.args[0], line_number=self.line_number) from None
            if token is not None:
                return token
        raise StopIteration

    def _read_line(self) -> str | None:
        try:
            return next(self._lines)
        except StopIteration:
            return None
        except UnicodeDecodeError as e:
            raise FormatError(f"page is not valid UTF-8: {e}", line_number=self.line_number + 1) from e
        except OSError as e:
            raise FilesystemError("Failed to read page", e) from e


@contextmanager
def open_page(path: Path) -> Iterator[Tokenizer]:
    """Open a page file and yield a tokenizer over it.

    The file is closed when the block exits, including on errors.

    Raises:
        FilesystemError: If the file cannot be opened
    """
    try:
        handle = open(path, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Could not open page {path}", e) from e

    logger.debug(f"Tokenizing page {path}")
    with handle:
        yield Tokenizer(handle)
