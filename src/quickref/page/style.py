"""Style sheet mapping token kinds to terminal styles."""

from dataclasses import dataclass, field

from quickref.page.tokens import TokenKind

# Color names understood by click.style
COLOR_NAMES = (
    "black",
    "red",
    "green",
    "yellow",
    "blue",
    "magenta",
    "cyan",
    "white",
    "bright_black",
    "bright_red",
    "bright_green",
    "bright_yellow",
    "bright_blue",
    "bright_magenta",
    "bright_cyan",
    "bright_white",
)


@dataclass(frozen=True)
class Style:
    """Terminal style of one kind of text.

    Attributes:
        foreground: click color name, None for the terminal default
        bold: Render in bold
        underline: Render underlined
    """

    foreground: str | None = None
    bold: bool = False
    underline: bool = False

    @property
    def is_plain(self) -> bool:
        return self.foreground is None and not self.bold and not self.underline


PLAIN = Style()


@dataclass(frozen=True)
class StyleSheet:
    """Styles for each token kind, plus placeholder spans in templates."""

    heading: Style = field(default_factory=lambda: Style(bold=True))
    description: Style = field(default_factory=Style)
    example_description: Style = field(default_factory=lambda: Style(foreground="green"))
    command_template: Style = field(default_factory=lambda: Style(foreground="cyan"))
    placeholder: Style = field(default_factory=lambda: Style(foreground="cyan", underline=True))

    def for_kind(self, kind: TokenKind) -> Style:
        """Style used for a line of the given kind."""
        styles = {
            TokenKind.HEADING: self.heading,
            TokenKind.DESCRIPTION: self.description,
            TokenKind.EXAMPLE_DESCRIPTION: self.example_description,
            TokenKind.COMMAND_TEMPLATE: self.command_template,
            TokenKind.BLANK: PLAIN,
        }
        return styles[kind]
