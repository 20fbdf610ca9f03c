"""External store adapter — the domain's sub-key of a scope's variables.

A scope's variable mapping is shared with other writers (card scripts,
macros, other extensions), so the adapter only ever touches its own key
(``stat_data`` by default): reads return a snapshot of that key, writes
re-read the mapping, replace the key and write the mapping back.

No retries. Last write wins at mapping granularity; every read is stale
the moment it returns.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from varsync.errors import StoreReadError, StoreWriteError

if TYPE_CHECKING:
    from varsync.domain.scopes import ScopeKey
    from varsync.infrastructure.hosts import VariableHost

logger = structlog.get_logger(__name__)

DEFAULT_DATA_KEY = "stat_data"


def _get_path(variables: Mapping[str, Any], path: list[str]) -> Any:
    node: Any = variables
    for part in path:
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


def _set_path(variables: dict[str, Any], path: list[str], value: Any) -> None:
    node = variables
    for part in path[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[path[-1]] = value


class VariableStoreAdapter:
    """Read/write one sub-key of a host scope.

    Parameters:
        host: The host variable API.
        key: Sub-key holding the domain blob; dots address nested keys.
    """

    def __init__(self, host: VariableHost, *, key: str = DEFAULT_DATA_KEY) -> None:
        if not key:
            msg = "Adapter key must not be empty"
            raise ValueError(msg)
        self.host = host
        self.key = key
        self._path = key.split(".")

    def read(self, scope: ScopeKey) -> Any:
        """Snapshot of the sub-key at *scope*; ``{}`` when absent.

        Non-mapping content is returned as-is for the validator to reject.

        Raises:
            StoreReadError: If the host read fails.
        """
        try:
            variables = self.host.get_variables(scope)
        except StoreReadError:
            raise
        except Exception as exc:
            msg = f"Reading {scope} failed: {exc}"
            raise StoreReadError(msg, scope=scope) from exc
        blob = _get_path(variables or {}, self._path)
        if blob is None:
            return {}
        return copy.deepcopy(blob)

    def write(self, scope: ScopeKey, blob: Mapping[str, Any]) -> None:
        """Merge *blob* into the scope's variables under :attr:`key`.

        Sibling keys are preserved.

        Raises:
            StoreWriteError: If the host read-modify-write fails.
        """
        try:
            variables = dict(self.host.get_variables(scope) or {})
            _set_path(variables, self._path, copy.deepcopy(dict(blob)))
            self.host.replace_variables(scope, variables)
        except StoreWriteError:
            raise
        except Exception as exc:
            msg = f"Writing {scope} failed: {exc}"
            raise StoreWriteError(msg, scope=scope) from exc
        logger.debug("store.write", scope=str(scope), key=self.key)
