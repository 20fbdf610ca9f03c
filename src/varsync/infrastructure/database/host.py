"""SqlVariableHost — the host variable API backed by SQLite.

``latest`` message scopes resolve to the highest message index stored
so far (0 for an empty chat), on every call.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert

from varsync.domain.scopes import ScopeType
from varsync.errors import StoreReadError, StoreWriteError
from varsync.infrastructure.database.schema import variables

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from varsync.domain.scopes import ScopeKey


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(UTC).isoformat(timespec="milliseconds")


class SqlVariableHost:
    """Scoped variables persisted in the ``variables`` table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_variables(self, scope: ScopeKey) -> dict[str, Any]:
        with self._engine.connect() as conn:
            resolved = self._resolve(conn, scope)
            payload = conn.execute(
                select(variables.c.payload).where(variables.c.store_id == resolved.store_id)
            ).scalar_one_or_none()
        if payload is None:
            return {}
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            msg = f"Corrupt payload for {resolved}: {exc}"
            raise StoreReadError(msg, scope=scope) from exc
        return data if isinstance(data, dict) else {}

    def replace_variables(self, scope: ScopeKey, variables_: Mapping[str, Any]) -> None:
        try:
            payload = json.dumps(dict(variables_), ensure_ascii=False, sort_keys=True)
        except (TypeError, ValueError) as exc:
            msg = f"Variables for {scope} are not JSON-serializable: {exc}"
            raise StoreWriteError(msg, scope=scope) from exc

        with self._engine.begin() as conn:
            resolved = self._resolve(conn, scope)
            values = {
                "store_id": resolved.store_id,
                "scope_type": str(resolved.type),
                "message_id": resolved.message_id,
                "payload": payload,
                "modified": now_iso(),
            }
            stmt = insert(variables).values(**values)
            conn.execute(
                stmt.on_conflict_do_update(
                    index_elements=[variables.c.store_id],
                    set_={"payload": stmt.excluded.payload, "modified": stmt.excluded.modified},
                )
            )

    @property
    def message_count(self) -> int:
        """Number of messages implied by the highest stored message index."""
        with self._engine.connect() as conn:
            return self._message_count(conn)

    def list_scopes(self) -> list[dict[str, Any]]:
        """Every stored scope with its modification stamp, sorted by id."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(variables.c.store_id, variables.c.scope_type, variables.c.modified)
                .order_by(variables.c.store_id)
            ).fetchall()
        return [
            {"store_id": row.store_id, "scope_type": row.scope_type, "modified": row.modified}
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _message_count(self, conn: Connection) -> int:
        highest = conn.execute(
            select(func.max(variables.c.message_id)).where(
                variables.c.scope_type == str(ScopeType.MESSAGE)
            )
        ).scalar_one_or_none()
        return 0 if highest is None else highest + 1

    def _resolve(self, conn: Connection, scope: ScopeKey) -> ScopeKey:
        if scope.message_id is None or scope.message_id >= 0:
            return scope
        return scope.resolved(max(self._message_count(conn), 1))
