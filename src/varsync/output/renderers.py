"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from varsync.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from varsync.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if result.op == "notes_show":
        return str(result.data.get("text", ""))
    return f"OK: {result.op}"


def render_state_line(state: dict[str, Any]) -> str:
    """One-line compact JSON, used by ``watch`` for streamed changes."""
    return json.dumps(state, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="vs.ok"), Text(f"  {result.op}", style="vs.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}:", style="vs.key")
    if key == "scope":
        v = Text(str(value), style="vs.scope")
    elif key == "schema":
        v = Text(str(value), style="vs.schema")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, ensure_ascii=False, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v)


def _state_table(state: dict[str, Any], *, prefix: str = "") -> Table:
    """Flatten nested state into a path/value table."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Path", style="vs.key", no_wrap=True)
    table.add_column("Value")
    for path, value in _flatten(state, prefix):
        table.add_row(path, json.dumps(value, ensure_ascii=False))
    return table


def _flatten(node: Any, prefix: str) -> list[tuple[str, Any]]:
    if isinstance(node, dict) and node:
        rows: list[tuple[str, Any]] = []
        for key, value in node.items():
            rows.extend(_flatten(value, f"{prefix}.{key}" if prefix else str(key)))
        return rows
    return [(prefix or "<root>", node)]


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text("ERROR", style="vs.error"), Text(f"  {result.op}", style="vs.op"), " — ", msg)
    if not err:
        return
    for item in err.detail.get("errors", []):
        console.print(f"  [vs.error]✗[/vs.error] {item['path']}: {item['message']}")
    if verbose:
        for k, v in err.detail.items():
            if k != "errors":
                console.print(f"    {k}: {v}")


# ── State renderers ───────────────────────────────────────────────────


def _render_state(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render show/validate/set/watch: header fields, then the state table."""
    _status_line(console, result)
    d = result.data
    for key in ("schema", "scope", "ticks", "changes", "writes"):
        if key in d:
            _field(console, key, d[key])
    if d.get("normalized"):
        console.print("  [vs.changed]normalized[/vs.changed] input differs from canonical form")
    if "canonical" in d and not d["canonical"]:
        console.print("  [vs.changed]store holds a non-canonical blob[/vs.changed]")
    if "changed" in d:
        _field(console, "changed", d["changed"])
    for item in d.get("corrected", []):
        console.print(
            f"  [vs.changed]corrected[/vs.changed] {item['path']}: "
            f"{item['requested']!r} → {item['stored']!r}"
        )
    state = d.get("state")
    if isinstance(state, dict):
        console.print()
        console.print(_state_table(state))


# ── Listing renderers ─────────────────────────────────────────────────


def _render_schemas(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Name", style="vs.schema", no_wrap=True)
    table.add_column("Model")
    table.add_column("Fields", style="dim")
    for item in result.data.get("items", []):
        table.add_row(item["name"], item["model"], ", ".join(item["fields"]))
    console.print(table)


def _render_scopes(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print("  (no stored scopes)")
        return
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Store ID", style="vs.scope", no_wrap=True)
    table.add_column("Tier")
    if verbose:
        table.add_column("Modified", style="dim")
    for item in items:
        row = [item["store_id"], item["scope_type"]]
        if verbose:
            row.append(str(item.get("modified") or ""))
        table.add_row(*row)
    console.print(table)


# ── Notes renderers ───────────────────────────────────────────────────


def _render_note(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    if not d.get("text"):
        console.print(f"  (no {d.get('kind')} notes)")
        return
    if verbose:
        _field(console, "scope", d.get("scope"))
    console.print(d["text"], markup=False)


def _render_note_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "kind", d.get("kind"))
    if "length" in d:
        _field(console, "length", d["length"])
    _field(console, "scopes", ", ".join(d.get("scopes", [])) or "-")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "schemas": _render_schemas,
    "scopes": _render_scopes,
    "validate": _render_state,
    "show": _render_state,
    "set": _render_state,
    "watch": _render_state,
    "notes_show": _render_note,
    "notes_save": _render_note_mutation,
    "notes_clear": _render_note_mutation,
}
