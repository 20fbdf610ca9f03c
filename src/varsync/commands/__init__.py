"""Subcommand modules for varsync.

Provides register_commands(), which uses deferred imports to keep
``varsync --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root group."""
    # --- Groups ---
    from varsync.commands.notes import notes

    cli.add_command(notes)

    # --- Standalone commands ---
    from varsync.commands.listing import schemas, scopes
    from varsync.commands.set_cmd import set_cmd
    from varsync.commands.show import show
    from varsync.commands.validate import validate
    from varsync.commands.watch import watch

    cli.add_command(schemas)
    cli.add_command(scopes)
    cli.add_command(validate)
    cli.add_command(show)
    cli.add_command(set_cmd)
    cli.add_command(watch)
