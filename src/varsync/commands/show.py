"""Command: show the synced state of a scope."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from varsync.commands._base import VarsyncCommand, parse_scope, scope_options

if TYPE_CHECKING:
    from varsync.commands._context import AppContext


@click.command(
    cls=VarsyncCommand,
    examples="""\
  varsync show companion
  varsync show companion --scope chat
  varsync show character_card --scope message --id 12
  varsync --json show companion --scope script --id overlay""",
)
@click.argument("schema")
@scope_options
@click.pass_obj
def show(app: AppContext, schema: str, scope_type: str, scope_id: str | None) -> None:
    """Show the canonical state SCHEMA yields for a scope."""
    from varsync.services.state import StateService

    scope = parse_scope(scope_type, scope_id)
    app.emit(StateService(app.workspace).show(schema, scope))
