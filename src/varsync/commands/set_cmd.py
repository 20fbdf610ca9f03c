"""Command: assign state fields through a sync session."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from varsync.commands._base import VarsyncCommand, parse_scope, scope_options

if TYPE_CHECKING:
    from varsync.commands._context import AppContext


@click.command(
    "set",
    cls=VarsyncCommand,
    examples="""\
  varsync set companion affection=80 --scope chat
  varsync set companion mood=sad status.hunger=40
  varsync set character_card 'kinako.outfit={"top": "hoodie"}' --scope message --id 3""",
)
@click.argument("schema")
@click.argument("assignments", nargs=-1, required=True)
@scope_options
@click.pass_obj
def set_cmd(
    app: AppContext,
    schema: str,
    assignments: tuple[str, ...],
    scope_type: str,
    scope_id: str | None,
) -> None:
    """Assign PATH=VALUE pairs; the schema-corrected result is written.

    VALUE is parsed as JSON when possible, otherwise taken as a string.
    """
    from varsync.services.state import StateService

    scope = parse_scope(scope_type, scope_id)
    app.emit(StateService(app.workspace).set(schema, scope, list(assignments)))
