"""Command: poll a scope and stream state changes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from varsync.commands._base import VarsyncCommand, parse_scope, scope_options

if TYPE_CHECKING:
    from varsync.commands._context import AppContext


@click.command(
    cls=VarsyncCommand,
    examples="""\
  varsync watch companion --scope chat
  varsync watch companion --ticks 10 --interval-ms 500
  varsync watch character_card --scope message --id latest""",
)
@click.argument("schema")
@scope_options
@click.option("--ticks", type=click.IntRange(min=1), default=None, help="Stop after N polls.")
@click.option(
    "--interval-ms",
    type=click.IntRange(min=1),
    default=None,
    help="Poll interval (default: [sync] poll_interval_ms).",
)
@click.pass_obj
def watch(
    app: AppContext,
    schema: str,
    scope_type: str,
    scope_id: str | None,
    ticks: int | None,
    interval_ms: int | None,
) -> None:
    """Poll the store and print each externally applied change.

    Changes stream to stdout as compact JSON lines; the summary follows
    when polling stops (after --ticks, or on Ctrl-C).
    """
    from varsync.output.renderers import render_state_line
    from varsync.services.state import StateService

    scope = parse_scope(scope_type, scope_id)
    interval = interval_ms / 1000 if interval_ms is not None else None

    def on_change(state: dict[str, object]) -> None:
        click.echo(render_state_line(state))

    try:
        result = StateService(app.workspace).watch(
            schema, scope, ticks=ticks, interval=interval, on_change=on_change
        )
    except KeyboardInterrupt:
        click.echo("Interrupted.", err=True)
        return
    app.emit(result)
