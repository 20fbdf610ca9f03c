"""Root CLI group for varsync with global flags and command registration."""

from __future__ import annotations

import click

from varsync import __version__
from varsync.commands import register_commands
from varsync.commands._context import AppContext
from varsync.config.settings import VarsyncSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="varsync")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """varsync — keep typed state in sync with a scoped variable store."""
    settings = VarsyncSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    # Tests pre-seed ctx.obj with a host to use instead of SQLite.
    host = ctx.obj.get("host") if isinstance(ctx.obj, dict) else None
    app = AppContext(settings, host=host)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
