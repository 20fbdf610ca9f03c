"""StateService — inspect and edit synced state from the command line.

Every operation goes through the same machinery a long-lived consumer
uses: a schema validator and a shared sync session from the workspace
registry. Edits therefore land in the store in canonical form only.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from varsync.domain.validation import dump
from varsync.errors import SchemaDefinitionError, StoreError
from varsync.services.base import BaseService
from varsync.services.result import ServiceResult
from varsync.sync.cell import deep_equal

if TYPE_CHECKING:
    from varsync.domain.scopes import ScopeKey
    from varsync.domain.validation import SchemaValidator, ValidationResult


# ---------------------------------------------------------------------------
# Dotted path assignments
# ---------------------------------------------------------------------------


def parse_value(text: str) -> Any:
    """JSON when it parses (``20``, ``true``, ``{"a": 1}``), else the raw string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def parse_assignment(text: str) -> tuple[list[str], Any]:
    """Split ``status.hunger=20`` into ``(["status", "hunger"], 20)``.

    Raises:
        ValueError: Missing ``=`` or an empty path segment.
    """
    path, sep, value = text.partition("=")
    if not sep:
        msg = f"Expected PATH=VALUE, got {text!r}"
        raise ValueError(msg)
    parts = path.strip().split(".")
    if not all(parts):
        msg = f"Invalid path {path!r}"
        raise ValueError(msg)
    return parts, parse_value(value)


def get_path(blob: Any, path: list[str]) -> Any:
    node = blob
    for part in path:
        if isinstance(node, Mapping) and part in node:
            node = node[part]
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            return None
    return node


def set_path(blob: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign *value* at *path*, creating intermediate mappings.

    Raises:
        ValueError: If the path runs through a scalar or past a list end.
    """
    node: Any = blob
    for depth, part in enumerate(path):
        last = depth == len(path) - 1
        if isinstance(node, list):
            if not part.isdigit() or int(part) >= len(node):
                msg = f"No list element {'.'.join(path[: depth + 1])}"
                raise ValueError(msg)
            if last:
                node[int(part)] = value
                return
            node = node[int(part)]
        elif isinstance(node, dict):
            if last:
                node[part] = value
                return
            if not isinstance(node.get(part), (dict, list)):
                node[part] = {}
            node = node[part]
        else:
            msg = f"Cannot assign below scalar at {'.'.join(path[:depth])}"
            raise ValueError(msg)


def _error_detail(result: ValidationResult[Any]) -> dict[str, Any]:
    return {"errors": [e.to_dict() for e in result.errors]}


# ---------------------------------------------------------------------------
# StateService
# ---------------------------------------------------------------------------


class StateService(BaseService):
    """Schema listing, validation, and scope inspection/editing."""

    def schemas(self) -> ServiceResult:
        """List registered schemas with their top-level fields."""
        from varsync.schemas import SCHEMA_REGISTRY

        self._workspace.load_plugins()
        items = [
            {
                "name": name,
                "model": model.__name__,
                "fields": [info.alias or field for field, info in model.model_fields.items()],
            }
            for name, model in sorted(SCHEMA_REGISTRY.items())
        ]
        return ServiceResult(ok=True, op="schemas", data={"items": items, "count": len(items)})

    def scopes(self) -> ServiceResult:
        """List every scope the store holds variables for."""
        op = "scopes"
        host = self._workspace.host
        lister = getattr(host, "list_scopes", None)
        if lister is None:
            return ServiceResult.failure(op, "UNSUPPORTED", f"{type(host).__name__} cannot list scopes")
        try:
            items = lister()
        except StoreError as exc:
            return ServiceResult.failure(op, "STORE_ERROR", str(exc))
        return ServiceResult(ok=True, op=op, data={"items": items, "count": len(items)})

    def validate(self, schema: str, raw: Any) -> ServiceResult:
        """Validate a blob without touching the store."""
        op = "validate"
        validator, failure = self._resolve(op, schema)
        if failure is not None:
            return failure
        result = validator.validate(raw)
        if result.value is None:
            return ServiceResult.failure(
                op,
                "VALIDATION_FAILED",
                f"{len(result.errors)} field(s) failed: {result.summary()}",
                **_error_detail(result),
            )
        state = dump(result.value)
        return ServiceResult(
            ok=True,
            op=op,
            data={"schema": validator.name, "state": state, "normalized": not deep_equal(raw, state)},
        )

    def show(self, schema: str, scope: ScopeKey) -> ServiceResult:
        """Current synced state of *scope*, plus what the store literally holds."""
        op = "show"
        validator, failure = self._resolve(op, schema)
        if failure is not None:
            return failure
        try:
            raw = self._workspace.adapter().read(scope)
            with self._workspace.registry.acquire(scope, validator) as session:
                state = dump(session.get())
        except StoreError as exc:
            return ServiceResult.failure(op, "STORE_ERROR", str(exc), scope=str(scope))

        warnings: list[str] = []
        check = validator.validate(raw)
        if not check.ok:
            warnings.append(f"Stored state is invalid, showing defaults: {check.summary()}")
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "schema": validator.name,
                "scope": str(scope),
                "state": state,
                "canonical": deep_equal(raw, state),
            },
            warnings=warnings,
        )

    def set(self, schema: str, scope: ScopeKey, assignments: list[str]) -> ServiceResult:
        """Apply ``PATH=VALUE`` assignments through a sync session.

        Values the schema corrects (clamped numbers, unknown enum members)
        are reported under ``corrected``.

        The session is ticked first, so a non-canonical stored blob is
        rewritten in canonical form even when the assignments change nothing.
        """
        op = "set"
        if not assignments:
            return ServiceResult.failure(op, "INVALID_ASSIGNMENT", "No assignments given")
        try:
            parsed = [parse_assignment(a) for a in assignments]
        except ValueError as exc:
            return ServiceResult.failure(op, "INVALID_ASSIGNMENT", str(exc))

        validator, failure = self._resolve(op, schema)
        if failure is not None:
            return failure

        try:
            with self._workspace.registry.acquire(scope, validator) as session:
                session.engine.tick()
                blob = dump(session.get())
                try:
                    for path, value in parsed:
                        set_path(blob, path, value)
                except ValueError as exc:
                    return ServiceResult.failure(op, "INVALID_ASSIGNMENT", str(exc))
                result = validator.validate(blob)
                if result.value is None:
                    return ServiceResult.failure(
                        op,
                        "VALIDATION_FAILED",
                        f"Assignment rejected: {result.summary()}",
                        **_error_detail(result),
                    )
                changed = session.set(result.value)
                state = dump(session.get())
        except StoreError as exc:
            return ServiceResult.failure(op, "STORE_ERROR", str(exc), scope=str(scope))

        corrected = [
            {"path": ".".join(path), "requested": value, "stored": get_path(state, path)}
            for path, value in parsed
            if get_path(state, path) != value
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "schema": validator.name,
                "scope": str(scope),
                "changed": changed,
                "corrected": corrected,
                "state": state,
            },
        )

    def watch(
        self,
        schema: str,
        scope: ScopeKey,
        *,
        ticks: int | None = None,
        interval: float | None = None,
        on_change: Callable[[dict[str, Any]], None] | None = None,
        stop: threading.Event | None = None,
    ) -> ServiceResult:
        """Poll *scope*, calling *on_change* with each inbound state change.

        Runs *ticks* polls (forever when None) *interval* seconds apart,
        or until *stop* is set.
        """
        op = "watch"
        validator, failure = self._resolve(op, schema)
        if failure is not None:
            return failure
        wait = interval if interval is not None else self._workspace.settings.sync.poll_interval
        stop = stop or threading.Event()

        count = changes = 0
        try:
            with self._workspace.registry.acquire(scope, validator) as session:
                engine = session.engine
                while ticks is None or count < ticks:
                    if stop.wait(wait):
                        break
                    count += 1
                    if engine.tick():
                        changes += 1
                        if on_change is not None:
                            on_change(dump(session.get()))
                state = dump(session.get())
                writes = engine.writes
        except StoreError as exc:
            return ServiceResult.failure(op, "STORE_ERROR", str(exc), scope=str(scope))

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "schema": validator.name,
                "scope": str(scope),
                "ticks": count,
                "changes": changes,
                "writes": writes,
                "state": state,
            },
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _resolve(
        self, op: str, schema: str
    ) -> tuple[SchemaValidator[Any], None] | tuple[None, ServiceResult]:
        try:
            return self._workspace.validator(schema), None
        except KeyError as exc:
            return None, ServiceResult.failure(op, "UNKNOWN_SCHEMA", str(exc.args[0]))
        except SchemaDefinitionError as exc:
            return None, ServiceResult.failure(op, "SCHEMA_INVALID", str(exc))
        except OSError as exc:
            return None, ServiceResult.failure(op, "SCHEMA_INVALID", f"Cannot read {schema}: {exc}")
