"""Session registry — one sync engine per scope, shared by every consumer.

Two components bound to the same scope must see the same cell; two engines
on one scope would each write the other's inbound applies back out. The
registry hands out reference-counted :class:`SyncSession` handles and
destroys the engine when the last one is released.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog
from pydantic import BaseModel

from varsync.errors import SessionDestroyedError
from varsync.sync.engine import DEFAULT_POLL_INTERVAL, SyncEngine

if TYPE_CHECKING:
    from collections.abc import Callable

    import pluggy

    from varsync.domain.lifecycle import SessionState
    from varsync.domain.scopes import ScopeKey
    from varsync.domain.validation import SchemaValidator
    from varsync.infrastructure.adapter import VariableStoreAdapter
    from varsync.sync.cell import ReactiveCell

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class SyncSession(Generic[M]):
    """A consumer's handle on a shared sync engine.

    Usable as a context manager; leaving the block releases the handle.
    """

    def __init__(self, registry: SessionRegistry, engine: SyncEngine[M]) -> None:
        self._registry = registry
        self._engine = engine
        self._released = False

    @property
    def scope(self) -> ScopeKey:
        return self._engine.scope

    @property
    def state(self) -> SessionState:
        return self._engine.state

    @property
    def engine(self) -> SyncEngine[M]:
        return self._engine

    @property
    def cell(self) -> ReactiveCell[M]:
        if self._released:
            msg = f"Session handle for {self.scope} was released"
            raise SessionDestroyedError(msg)
        return self._engine.cell

    def get(self) -> M:
        return self.cell.get()

    def set(self, value: M) -> bool:
        """Replace the shared value; persisted through the engine."""
        return self.cell.set(value)

    def update(self, fn: Callable[[M], M | None]) -> bool:
        """Apply *fn* to a copy of the current value and set the result.

        *fn* may mutate its argument in place and return ``None``.
        """
        current = self.get()
        result = fn(current)
        return self.set(current if result is None else result)

    def subscribe(self, fn: Callable[[M], None]) -> Callable[[], None]:
        return self.cell.subscribe(fn)

    def release(self) -> None:
        """Drop this handle. Idempotent."""
        if self._released:
            return
        self._released = True
        self._registry._release(self._engine)

    def __enter__(self) -> SyncSession[M]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


class _Entry:
    __slots__ = ("engine", "consumers")

    def __init__(self, engine: SyncEngine[Any]) -> None:
        self.engine = engine
        self.consumers = 0


class SessionRegistry:
    """Shared sync sessions keyed by scope.

    Parameters:
        adapter: Store adapter every engine uses.
        poll_interval: Seconds between ticks for new engines.
        poll: Start poll threads (``False`` leaves ticking to the caller).
        hooks: Plugin hook relay passed to every engine.
    """

    def __init__(
        self,
        adapter: VariableStoreAdapter,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll: bool = True,
        hooks: pluggy.HookRelay | None = None,
    ) -> None:
        self.adapter = adapter
        self.poll_interval = poll_interval
        self.poll = poll
        self._hooks = hooks
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def acquire(
        self,
        scope: ScopeKey,
        validator: SchemaValidator[M],
        *,
        initializer: Callable[[], Any] | None = None,
    ) -> SyncSession[M]:
        """Return a handle on the scope's engine, starting one if needed.

        The initializer only matters for the first acquisition of a scope.

        Raises:
            ValueError: If the scope is already bound to another schema.
            StoreReadError: If starting a new engine fails to read the store.
        """
        key = scope.store_id
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                engine = SyncEngine(
                    self.adapter,
                    scope,
                    validator,
                    poll_interval=self.poll_interval,
                    initializer=initializer,
                    hooks=self._hooks,
                )
                engine.start(poll=self.poll)
                entry = _Entry(engine)
                self._entries[key] = entry
                logger.debug("registry.engine_started", scope=str(scope), schema=validator.name)
            elif entry.engine.validator.name != validator.name:
                msg = (
                    f"Scope {scope} is already bound to schema "
                    f"{entry.engine.validator.name!r}, not {validator.name!r}"
                )
                raise ValueError(msg)
            entry.consumers += 1
            return SyncSession(self, entry.engine)

    def get(self, scope: ScopeKey) -> SyncEngine[Any] | None:
        """The live engine for *scope*, if any."""
        with self._lock:
            entry = self._entries.get(scope.store_id)
            return entry.engine if entry else None

    def consumers(self, scope: ScopeKey) -> int:
        with self._lock:
            entry = self._entries.get(scope.store_id)
            return entry.consumers if entry else 0

    def tick_all(self) -> int:
        """Tick every live engine once; returns how many cells changed."""
        with self._lock:
            engines = [entry.engine for entry in self._entries.values()]
        return sum(1 for engine in engines if engine.tick())

    def close(self) -> None:
        """Destroy every engine regardless of outstanding handles."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for entry in entries:
            entry.engine.destroy()

    def _release(self, engine: SyncEngine[Any]) -> None:
        key = engine.scope.store_id
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.engine is not engine:
                return
            entry.consumers -= 1
            if entry.consumers > 0:
                return
            del self._entries[key]
        engine.destroy()
        logger.debug("registry.engine_destroyed", scope=str(engine.scope))

    def __len__(self) -> int:
        return len(self._entries)

    def __enter__(self) -> SessionRegistry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
