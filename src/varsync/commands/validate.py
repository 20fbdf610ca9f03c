"""Command: validate a JSON blob against a schema without touching the store."""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING

import click

from varsync.commands._base import VarsyncCommand
from varsync.services.result import ServiceResult

if TYPE_CHECKING:
    from varsync.commands._context import AppContext


@click.command(
    cls=VarsyncCommand,
    examples="""\
  varsync validate companion state.json
  echo '{"affection": 500}' | varsync validate companion
  varsync validate schemas/pet.yaml pet.json
  varsync --json validate character_card card.json""",
)
@click.argument("schema")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_obj
def validate(app: AppContext, schema: str, source: IO[str]) -> None:
    """Validate JSON from SOURCE (default stdin) and print the canonical form.

    SCHEMA is a registered schema name or a YAML declaration file.
    """
    from varsync.services.state import StateService

    try:
        raw = json.loads(source.read())
    except json.JSONDecodeError as exc:
        app.emit(ServiceResult.failure("validate", "INVALID_JSON", f"Input is not JSON: {exc}"))
        return
    app.emit(StateService(app.workspace).validate(schema, raw))
