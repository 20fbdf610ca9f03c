"""Command group: quick and out-of-character side notes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from varsync.commands._base import VarsyncGroup
from varsync.services.notes import NOTE_KINDS, NotesService

if TYPE_CHECKING:
    from varsync.commands._context import AppContext

_NOTES_EXAMPLES = """\
  varsync notes save quick "Kinako hates thunder"
  echo "Keep replies short" | varsync notes save occ
  varsync notes show quick
  varsync -q notes show occ
  varsync notes clear quick"""

_KIND = click.Choice(NOTE_KINDS)


@click.group(cls=VarsyncGroup, examples=_NOTES_EXAMPLES)
def notes() -> None:
    """Save, show, and clear side notes mirrored into host variables."""


@notes.command(examples="""\
  varsync notes save quick "Remember the umbrella"
  cat notes.txt | varsync notes save occ""")
@click.argument("kind", type=_KIND)
@click.argument("text", required=False)
@click.pass_obj
def save(app: AppContext, kind: str, text: str | None) -> None:
    """Save TEXT (default: stdin) as KIND notes."""
    if text is None:
        text = click.get_text_stream("stdin").read()
    app.emit(NotesService(app.workspace).save(kind, text))


@notes.command(examples="""\
  varsync notes show quick
  varsync -q notes show occ > occ.txt""")
@click.argument("kind", type=_KIND)
@click.pass_obj
def show(app: AppContext, kind: str) -> None:
    """Print the stored KIND notes."""
    app.emit(NotesService(app.workspace).load(kind))


@notes.command(examples="""\
  varsync notes clear quick""")
@click.argument("kind", type=_KIND)
@click.pass_obj
def clear(app: AppContext, kind: str) -> None:
    """Remove KIND notes from every mirror scope."""
    app.emit(NotesService(app.workspace).clear(kind))
