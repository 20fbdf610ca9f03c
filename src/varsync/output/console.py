"""Rich Console factory and theme for varsync output.

Consoles render into a StringIO buffer so formatters keep returning plain
strings. In non-TTY environments (tests, pipes) Rich drops color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

VARSYNC_THEME = Theme(
    {
        "vs.ok": "bold green",
        "vs.error": "bold red",
        "vs.warning": "bold yellow",
        "vs.op": "bold cyan",
        "vs.key": "dim",
        "vs.scope": "bold blue",
        "vs.schema": "magenta",
        "vs.changed": "yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width (stable test output).
    """
    return Console(
        file=StringIO(),
        theme=VARSYNC_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
