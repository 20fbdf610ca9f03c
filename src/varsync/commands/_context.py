"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Provides the lazily opened workspace and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from varsync.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from varsync.config.settings import VarsyncSettings
    from varsync.infrastructure.hosts import VariableHost
    from varsync.services.result import ServiceResult
    from varsync.services.workspace import Workspace


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is created on first use so ``--help`` and ``--version``
    never open the variable store. *host* replaces the SQLite store (tests).
    """

    def __init__(self, settings: VarsyncSettings, *, host: VariableHost | None = None) -> None:
        self.settings = settings
        self._host = host
        self._workspace: Workspace | None = None

        from varsync.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    @property
    def workspace(self) -> Workspace:
        """The workspace (created lazily on first access)."""
        if self._workspace is None:
            from varsync.services.workspace import Workspace

            self._workspace = Workspace(self.settings, host=self._host)
        return self._workspace

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr in human mode
          so they never pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = self.output_settings
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def close(self) -> None:
        """Tear down live sessions and the store connection."""
        if self._workspace is not None:
            self._workspace.close()
            self._workspace = None
