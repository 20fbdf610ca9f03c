"""Host variable stores — where scoped variables actually live.

The sync core only needs two calls from a host: fetch the variable mapping
of a scope, and replace it. :class:`MemoryVariableHost` keeps everything
in-process (tests, embedding); the SQLite host lives in
:mod:`varsync.infrastructure.database.host`.

Message scopes addressed as ``latest`` are resolved by the host on every
call, so a session bound to the latest message follows new messages.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from varsync.domain.scopes import ScopeKey


@runtime_checkable
class VariableHost(Protocol):
    """Minimal host variable API."""

    def get_variables(self, scope: ScopeKey) -> dict[str, Any]:
        """Return a snapshot of every variable stored at *scope*."""
        ...

    def replace_variables(self, scope: ScopeKey, variables: Mapping[str, Any]) -> None:
        """Replace the whole variable mapping at *scope*."""
        ...


class MemoryVariableHost:
    """Thread-safe in-process host.

    Parameters:
        message_count: Number of chat messages; ``latest`` resolves to the
            last one (index 0 when the chat is empty).
    """

    def __init__(self, *, message_count: int = 0) -> None:
        self.message_count = message_count
        self._data: dict[str, dict[str, Any]] = {}
        self._types: dict[str, str] = {}
        self._lock = threading.Lock()
        self.reads = 0
        self.writes = 0

    def get_variables(self, scope: ScopeKey) -> dict[str, Any]:
        key = scope.resolved(max(self.message_count, 1)).store_id
        with self._lock:
            self.reads += 1
            return copy.deepcopy(self._data.get(key, {}))

    def replace_variables(self, scope: ScopeKey, variables: Mapping[str, Any]) -> None:
        key = scope.resolved(max(self.message_count, 1)).store_id
        with self._lock:
            self.writes += 1
            self._data[key] = copy.deepcopy(dict(variables))
            self._types[key] = str(scope.type)

    def list_scopes(self) -> list[dict[str, Any]]:
        """Every stored scope, sorted by id."""
        with self._lock:
            return [
                {"store_id": key, "scope_type": self._types[key], "modified": None}
                for key in sorted(self._data)
            ]
