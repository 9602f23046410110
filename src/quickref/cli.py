"""Command-line interface for quickref.

This is the presentation shell around the core: the only module that prints
user-facing messages, resolves the running platform, or ends the process.
"""

import io
import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console

from quickref import __version__
from quickref.cache import PageCache
from quickref.click_command import QuickrefCommand
from quickref.config_manager import ConfigManager, default_cache_dir
from quickref.errors import FilesystemError, FormatError, QuickrefError
from quickref.page import StyleSheet, open_page, render
from quickref.platforms import PlatformKind, detect_platform, parse_platform
from quickref.resolver import join_command, resolve_page

logger = logging.getLogger(__name__)

NAME = "quickref"
MAX_CACHE_AGE = timedelta(days=30)
PAGES_REPO_URL = "https://github.com/tldr-pages/tldr"


def _parse_os_option(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> PlatformKind | None:
    if value is None:
        return None
    try:
        return parse_platform(value)
    except ValueError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


def _say(console: Console, message: str, style: str | None = None) -> None:
    console.print(message, style=style, markup=False, highlight=False, soft_wrap=True)


def _fail(ctx: click.Context, err_console: Console, message: str) -> NoReturn:
    _say(err_console, message, style="red")
    ctx.exit(1)


def _styling_enabled(color: str) -> bool:
    if color == "always":
        return True
    if color == "never":
        return False
    return sys.stdout.isatty()


def print_page(
    path: Path, raw_markdown: bool, style: StyleSheet, styling_enabled: bool, use_pager: bool
) -> None:
    """Render a page file (or print its markdown) to stdout.

    Raises:
        QuickrefError: If the page cannot be read or is malformed
    """
    buffer = io.StringIO()
    if raw_markdown:
        try:
            buffer.write(path.read_text(encoding="utf-8"))
        except UnicodeDecodeError as e:
            raise FormatError(f"page is not valid UTF-8: {e}") from e
        except OSError as e:
            raise FilesystemError(f"Could not open page {path}", e) from e
    else:
        with open_page(path) as tokenizer:
            render(tokenizer, style, styling_enabled, buffer)

    if use_pager:
        click.echo_via_pager(buffer.getvalue(), color=styling_enabled)
    else:
        click.echo(buffer.getvalue(), nl=False, color=styling_enabled)


def check_cache(ctx: click.Context, cache: PageCache, quiet: bool, err_console: Console) -> None:
    """Exit if the cache is missing, warn if it is stale."""
    try:
        age = cache.last_update()
    except QuickrefError as e:
        _fail(ctx, err_console, f"Could not inspect cache: {e}")
    if age is None:
        _fail(ctx, err_console, f"Cache not found. Please run `{NAME} --update`.")
    if age > MAX_CACHE_AGE and not quiet:
        _say(
            err_console,
            f"The cache hasn't been updated for more than {MAX_CACHE_AGE.days} days.\n"
            f"You should probably run `{NAME} --update` soon.",
            style="yellow",
        )


@click.command(
    name=NAME,
    cls=QuickrefCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.argument("command", nargs=-1)
@click.option(
    "-l", "--list", "list_pages", is_flag=True, help="List all commands in the cache, one per line"
)
@click.option(
    "-f",
    "--render",
    "render_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Render a specific markdown file",
)
@click.option(
    "-o",
    "--os",
    "os_override",
    callback=_parse_os_option,
    metavar="TYPE",
    help="Override the operating system [linux, osx, sunos, windows]",
)
@click.option("-u", "--update", is_flag=True, help="Update the local cache")
@click.option("-c", "--clear-cache", is_flag=True, help="Clear the local cache")
@click.option("-p", "--pager", is_flag=True, help="Use a pager to page output")
@click.option(
    "-m", "--markdown", is_flag=True, help="Display the raw markdown instead of rendering it"
)
@click.option("-q", "--quiet", is_flag=True, help="Suppress informational messages")
@click.option("--config-path", "show_config_path", is_flag=True, help="Show config file path")
@click.option("--seed-config", is_flag=True, help="Create a basic config")
@click.option(
    "--color",
    type=click.Choice(["auto", "always", "never"], case_sensitive=False),
    default="auto",
    show_default=True,
    help="Control styled output",
)
@click.option("--verbose", is_flag=True, help="Show debug logging")
@click.option("-v", "--version", "show_version", is_flag=True, help="Show version information")
@click.pass_context
def main(
    ctx: click.Context,
    command: tuple[str, ...],
    list_pages: bool,
    render_file: Path | None,
    os_override: PlatformKind | None,
    update: bool,
    clear_cache: bool,
    pager: bool,
    markdown: bool,
    quiet: bool,
    show_config_path: bool,
    seed_config: bool,
    color: str,
    verbose: bool,
    show_version: bool,
) -> None:
    """quickref - simplified, community-driven man pages (tldr).

    \b
    Examples:
        $ quickref tar
        $ quickref git commit
        $ quickref --list

    \b
    To control the cache:
        $ quickref --update
        $ quickref --clear-cache

    \b
    To render a local file (for testing):
        $ quickref --render /path/to/file.md

    \b
    CONFIGURATION:
        Config file: ~/.quickref/config.toml (or $QUICKREF_CONFIG)
        Cache directory: ~/.quickref/cache (or $QUICKREF_CACHE_DIR)
    """
    # Set up logging
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING, format="%(message)s"
    )

    console = Console()
    err_console = Console(stderr=True)

    # Resolved once here and passed into the core
    current_platform = detect_platform()

    if show_version:
        click.echo(f"{NAME} v{__version__} ({current_platform})")
        ctx.exit(0)

    platform = os_override or current_platform
    cache = PageCache(default_cache_dir())

    # Clear cache, pass through
    if clear_cache:
        try:
            cache.clear()
        except QuickrefError as e:
            _fail(ctx, err_console, f"Could not delete cache: {e}")
        if not quiet:
            _say(console, "Successfully deleted cache.")

    # Update cache, pass through
    if update:
        try:
            if quiet:
                cache.update()
            else:
                with err_console.status("Downloading tldr pages..."):
                    cache.update()
        except QuickrefError as e:
            _fail(ctx, err_console, f"Could not update cache: {e}")
        if not quiet:
            _say(console, "Successfully updated cache.")

    # Show config path, pass through
    if show_config_path:
        click.echo(f"Config path is: {ConfigManager.get_config_path()}")

    # Create a basic config and exit
    if seed_config:
        try:
            config_path = ConfigManager.seed_config()
        except QuickrefError as e:
            _fail(ctx, err_console, f"Could not create seed config: {e}")
        _say(console, f"Successfully created seed config file here: {config_path}")
        ctx.exit(0)

    try:
        config = ConfigManager.load_config()
    except QuickrefError as e:
        _fail(ctx, err_console, f"Could not load config: {e}")

    styling_enabled = _styling_enabled(color.lower())
    use_pager = pager or config.use_pager

    # Render local file and exit
    if render_file is not None:
        try:
            print_page(render_file, markdown, config.style, styling_enabled, use_pager)
        except QuickrefError as e:
            _fail(ctx, err_console, f"Could not render {render_file}: {e}")
        ctx.exit(0)

    # List cached commands and exit
    if list_pages:
        check_cache(ctx, cache, quiet, err_console)
        try:
            pages = cache.list_pages()
        except QuickrefError as e:
            _fail(ctx, err_console, f"Could not get list of pages: {e}")
        click.echo("\n".join(pages))
        ctx.exit(0)

    # Show command from cache
    if command:
        name = join_command(command)
        check_cache(ctx, cache, quiet, err_console)
        try:
            location = resolve_page(cache, name, platform)
        except QuickrefError as e:
            _fail(ctx, err_console, f"Could not look up page: {e}")

        if location is None:
            if not quiet:
                _say(console, f"Page {name} not found in cache")
                _say(console, f"Try updating with `{NAME} --update`, or submit a pull request to:")
                _say(console, PAGES_REPO_URL)
            ctx.exit(1)

        logger.debug(f"Rendering {location.path} ({location.subdirectory})")
        try:
            print_page(location.path, markdown, config.style, styling_enabled, use_pager)
        except QuickrefError as e:
            _fail(ctx, err_console, f"Could not render page {name}: {e}")
        ctx.exit(0)

    # Some flags can be run without a command
    if not (update or clear_cache or show_config_path):
        click.echo(ctx.get_help(), err=True)
        ctx.exit(1)
