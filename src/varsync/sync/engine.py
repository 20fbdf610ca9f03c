"""SyncEngine — keeps one reactive cell and one store scope in agreement.

Three flows:

- **Initialization**: read the store, validate, seed the cell (suppressed).
  A failing blob falls back to the initializer (only when the store was
  empty) or to the schema defaults. Nothing is written at init.
- **Inbound** (:meth:`SyncEngine.tick`, driven by the poll thread): read,
  validate, apply to the cell under suppression when it differs, and write
  the canonical form back when the stored blob was not canonical.
- **Outbound** (cell subscription): validate the consumer's value; apply
  the canonical form back to the cell (suppressed) and write it. Invalid
  values are reverted to the last good value and never written.

INVARIANT: inbound applies never trigger an outbound write, and a tick
never runs concurrently with itself or with an outbound propagation.
Both hold the cell lock for their whole duration.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog
from pydantic import BaseModel

from varsync.domain.lifecycle import SESSION_TRANSITIONS, SessionState, is_valid_transition
from varsync.domain.validation import FieldError, dump, is_empty_blob
from varsync.errors import SessionDestroyedError, StoreError, StoreWriteError
from varsync.sync.cell import ReactiveCell, deep_equal

if TYPE_CHECKING:
    from collections.abc import Callable

    import pluggy

    from varsync.domain.scopes import ScopeKey
    from varsync.domain.validation import SchemaValidator
    from varsync.infrastructure.adapter import VariableStoreAdapter

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_POLL_INTERVAL = 2.0
_JOIN_TIMEOUT = 5.0


class SyncEngine(Generic[M]):
    """Bind a :class:`ReactiveCell` to one scope of a variable store.

    Parameters:
        adapter: Store adapter for the domain sub-key.
        scope: Scope the cell mirrors.
        validator: Schema applied in both directions.
        poll_interval: Seconds between inbound ticks.
        initializer: Produces seed data when the store is empty.
        hooks: Plugin hook relay; ``None`` disables hook dispatch.
    """

    def __init__(
        self,
        adapter: VariableStoreAdapter,
        scope: ScopeKey,
        validator: SchemaValidator[M],
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        initializer: Callable[[], Any] | None = None,
        hooks: pluggy.HookRelay | None = None,
    ) -> None:
        if poll_interval <= 0:
            msg = f"poll_interval must be positive, got {poll_interval}"
            raise ValueError(msg)
        self.adapter = adapter
        self.scope = scope
        self.validator = validator
        self.poll_interval = poll_interval
        self._initializer = initializer
        self._hooks = hooks

        self._state = SessionState.UNINITIALIZED
        self._cell: ReactiveCell[M] | None = None
        self._last_good: M | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_tick_error: str | None = None
        self._log = logger.bind(scope=str(scope), schema=validator.name)

        self.ticks = 0
        self.writes = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def cell(self) -> ReactiveCell[M]:
        """The bound cell.

        Raises:
            SessionDestroyedError: After :meth:`destroy`.
            RuntimeError: Before :meth:`start`.
        """
        if self._state is SessionState.DESTROYED:
            msg = f"Sync session for {self.scope} was destroyed"
            raise SessionDestroyedError(msg)
        if self._cell is None:
            msg = f"Sync session for {self.scope} has not been started"
            raise RuntimeError(msg)
        return self._cell

    def start(self, *, poll: bool = True) -> ReactiveCell[M]:
        """Seed the cell from the store and begin polling.

        Idempotent once ready. With ``poll=False`` no thread is started and
        the caller drives :meth:`tick` itself.

        Raises:
            StoreReadError: If the initial read fails.
            SessionDestroyedError: If the engine was already destroyed.
        """
        if self._state is SessionState.READY:
            return self.cell
        self._check_transition(SessionState.READY)

        raw = self.adapter.read(self.scope)
        initial = self._initial_value(raw)

        cell: ReactiveCell[M] = ReactiveCell(self.validator.defaults())
        with cell.suppressed():
            cell.set(initial)
        self._cell = cell
        self._last_good = initial
        self._unsubscribe = cell.subscribe(self._on_local_change)
        self._state = SessionState.READY
        self._log.debug("sync.started", poll=poll, interval=self.poll_interval)

        if poll:
            self._start_polling()
        return cell

    def destroy(self) -> None:
        """Stop polling, detach from the cell, and refuse further use. Idempotent."""
        if self._state is SessionState.DESTROYED:
            return
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=_JOIN_TIMEOUT)
        self._thread = None

        cell = self._cell
        if cell is None:
            self._state = SessionState.DESTROYED
        else:
            with cell.lock:
                if self._unsubscribe is not None:
                    self._unsubscribe()
                    self._unsubscribe = None
                self._state = SessionState.DESTROYED
        self._log.debug("sync.destroyed", ticks=self.ticks, writes=self.writes)

    def _check_transition(self, target: SessionState) -> None:
        if is_valid_transition(self._state, target, SESSION_TRANSITIONS):
            return
        if self._state is SessionState.DESTROYED:
            msg = f"Sync session for {self.scope} was destroyed"
            raise SessionDestroyedError(msg)
        msg = f"Invalid session transition {self._state} -> {target}"
        raise RuntimeError(msg)

    def _initial_value(self, raw: Any) -> M:
        result = self.validator.validate(raw)
        if result.value is not None:
            return result.value

        empty = is_empty_blob(raw)
        self._log.warning("sync.initial_invalid", empty=empty, errors=result.summary())
        self._emit_validation_failure(result.errors, origin="initial")

        if empty and self._initializer is not None:
            try:
                seed = self._initializer()
            except Exception:
                self._log.warning("sync.initializer_failed", exc_info=True)
            else:
                seeded = self.validator.validate(seed)
                if seeded.value is not None:
                    return seeded.value
                self._log.warning("sync.initializer_invalid", errors=seeded.summary())
        return self.validator.defaults()

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """Run one inbound pass. Returns True when the cell changed.

        Read failures and invalid blobs skip the tick; the cell keeps its
        value. A failed normalization write is logged, not raised.
        """
        if self._state is not SessionState.READY:
            return False
        cell = self.cell
        with cell.lock:
            if self._state is not SessionState.READY:
                return False
            self.ticks += 1
            try:
                raw = self.adapter.read(self.scope)
            except StoreError as exc:
                self._log.warning("sync.tick_read_failed", error=str(exc))
                return False

            result = self.validator.validate(raw)
            if result.value is None:
                self._note_invalid_tick(result.errors)
                return False
            self._last_tick_error = None
            canonical = result.value

            changed = False
            if not cell.matches(canonical):
                with cell.suppressed():
                    cell.set(canonical)
                self._last_good = canonical
                changed = True
                self._log.debug("sync.inbound_applied")
                self._emit("post_inbound_apply", scope=str(self.scope), data=dump(canonical))

            if not deep_equal(raw, dump(canonical)):
                try:
                    self._write(canonical, origin="normalize")
                except StoreWriteError as exc:
                    self._log.warning("sync.normalize_write_failed", error=str(exc))
            return changed

    def _note_invalid_tick(self, errors: tuple[FieldError, ...]) -> None:
        summary = "; ".join(f"{e.path}: {e.message}" for e in errors)
        if summary == self._last_tick_error:
            self._log.debug("sync.tick_skipped", errors=summary)
            return
        self._last_tick_error = summary
        self._log.warning("sync.tick_skipped", errors=summary)
        self._emit_validation_failure(errors, origin="inbound")

    def _start_polling(self) -> None:
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            name=f"varsync-poll[{self.scope}]",
            daemon=True,
        )
        self._thread.start()

    def _poll_loop(self) -> None:
        while not self._stop.wait(self.poll_interval):
            try:
                self.tick()
            except Exception:
                self._log.exception("sync.tick_failed")

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def _on_local_change(self, value: M) -> None:
        """Cell subscriber: validate, canonicalize and persist a consumer write.

        Runs under the cell lock. Store write failures propagate to the
        consumer's ``set`` call.
        """
        if self._state is not SessionState.READY:
            return
        cell = self.cell
        result = self.validator.validate(value)
        if result.value is None:
            self._log.warning("sync.local_invalid", errors=result.summary())
            self._emit_validation_failure(result.errors, origin="local")
            with cell.suppressed():
                cell.replace(self._last_good)
            return

        canonical = result.value
        # The cell holds validator output only, even when the consumer's
        # value already dumps to the canonical form.
        with cell.suppressed():
            cell.replace(canonical)
        self._last_good = canonical
        self._write(canonical, origin="local")

    def _write(self, value: M, *, origin: str) -> None:
        data = dump(value)
        self.adapter.write(self.scope, data)
        self.writes += 1
        self._log.debug("sync.store_write", origin=origin)
        self._emit("post_store_write", scope=str(self.scope), data=data, origin=origin)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _emit_validation_failure(self, errors: tuple[FieldError, ...], *, origin: str) -> None:
        self._emit(
            "on_validation_failure",
            scope=str(self.scope),
            errors=[e.to_dict() for e in errors],
            origin=origin,
        )

    def _emit(self, hook_name: str, **payload: Any) -> None:
        """Dispatch a plugin hook. No-op without a hook relay.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self._hooks is None:
            return
        try:
            getattr(self._hooks, hook_name)(**payload)
        except Exception:
            self._log.warning("sync.hook_failed", hook=hook_name, exc_info=True)

    def __repr__(self) -> str:
        return f"SyncEngine({self.scope}, {self.validator.name}, {self._state})"
