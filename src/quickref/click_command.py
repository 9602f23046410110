"""Custom Click command with automatic help display on errors.

This module provides a custom Click Command class that automatically
displays the command help when a usage error occurs.
"""

import click


class QuickrefCommand(click.Command):
    """Click command that shows its help after usage errors."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        """Parse arguments, showing help on bad options or values."""
        try:
            return super().parse_args(ctx, args)
        except click.exceptions.UsageError as e:
            # Show the error message first
            click.echo(f"Error: {e.format_message()}", err=True)
            click.echo("", err=True)
            click.echo(ctx.get_help(), err=True)
            # Use ctx.exit() to properly handle Click's testing mode
            ctx.exit(e.exit_code)
            return []  # Explicit return for code clarity (never reached)
