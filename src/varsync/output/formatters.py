"""Output mode selection for ServiceResult.

Humans get Rich rendering, scripts get ``--json``, and ``--quiet`` prints
just the status line (or the note text for ``notes show``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from varsync.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Flags that pick an output mode."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)

    from varsync.output.renderers import render_quiet, render_result

    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
