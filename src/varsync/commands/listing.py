"""Commands: list registered schemas and stored scopes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from varsync.commands._base import VarsyncCommand

if TYPE_CHECKING:
    from varsync.commands._context import AppContext


@click.command(
    cls=VarsyncCommand,
    examples="""\
  varsync schemas
  varsync --json schemas""",
)
@click.pass_obj
def schemas(app: AppContext) -> None:
    """List registered schemas (built-in and plugin-provided)."""
    from varsync.services.state import StateService

    app.emit(StateService(app.workspace).schemas())


@click.command(
    cls=VarsyncCommand,
    examples="""\
  varsync scopes
  varsync -v scopes""",
)
@click.pass_obj
def scopes(app: AppContext) -> None:
    """List scopes that hold stored variables."""
    from varsync.services.state import StateService

    app.emit(StateService(app.workspace).scopes())
