"""Custom Click base classes with --examples support, plus shared options.

VarsyncCommand and VarsyncGroup accept an ``examples`` parameter. When
``--examples`` is passed, the command prints usage examples and exits, so
``--help`` stays short.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

from varsync.domain.scopes import ScopeKey, ScopeType

F = TypeVar("F", bound=Callable[..., Any])


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class VarsyncCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class VarsyncGroup(click.Group):
    """Click Group whose subcommands default to :class:`VarsyncCommand`."""

    command_class = VarsyncCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


def scope_options(fn: F) -> F:
    """Add ``--scope`` and ``--id`` (as ``scope_type``, ``scope_id``); see :func:`parse_scope`."""
    fn = click.option(
        "--id",
        "scope_id",
        default=None,
        help="Scope id: message index or 'latest', script id, extension id.",
    )(fn)
    fn = click.option(
        "--scope",
        "scope_type",
        type=click.Choice([t.value for t in ScopeType]),
        default=ScopeType.MESSAGE.value,
        show_default=True,
        help="Variable tier to sync with.",
    )(fn)
    return fn


def parse_scope(scope_type: str, scope_id: str | None) -> ScopeKey:
    """Build a ScopeKey from CLI values.

    Raises:
        click.BadParameter: If the tier/id combination is invalid.
    """
    try:
        return ScopeKey.parse(scope_type, scope_id)
    except ValueError as exc:
        msg = f"Invalid scope {scope_type!r} with id {scope_id!r}: {exc}"
        raise click.BadParameter(msg, param_hint="'--scope'/'--id'") from exc
