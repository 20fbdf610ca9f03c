"""ReactiveCell — observable holder for one validated domain object.

Mutations notify subscribers unless they happen inside a suppressed block.
The sync engine applies inbound values under suppression so they do not
echo back out as writes.

INVARIANT: ``set`` with a value deep-equal to the current one is a no-op.
This is the primary feedback-loop breaker.

Values are copied on the way in and out, so consumers cannot mutate the
held object behind the cell's back. All access runs under one re-entrant
lock; a suppressed block holds it for its whole duration, which keeps
suppression from leaking into mutations made by other threads.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")
R = TypeVar("R")

Subscriber = Callable[[T], None]


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, warnings=False)
    return value


def deep_equal(left: Any, right: Any) -> bool:
    """Structural equality; pydantic models compare by canonical dump."""
    return _plain(left) == _plain(right)


class ReactiveCell(Generic[T]):
    """Observable mutable holder.

    Parameters:
        initial: Starting value (no notification).
        equals: Equality used to detect no-op writes.
    """

    def __init__(
        self,
        initial: T,
        *,
        equals: Callable[[Any, Any], bool] = deep_equal,
    ) -> None:
        self._value = copy.deepcopy(initial)
        self._equals = equals
        self._subscribers: list[Subscriber[T]] = []
        self._suppress_depth = 0
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        """The lock guarding every read, write and notification."""
        return self._lock

    @property
    def is_suppressed(self) -> bool:
        return self._suppress_depth > 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def get(self) -> T:
        """Return a copy of the current value."""
        with self._lock:
            return copy.deepcopy(self._value)

    def matches(self, value: Any) -> bool:
        """Whether *value* deep-equals the current value."""
        with self._lock:
            return self._equals(self._value, value)

    def set(self, value: T) -> bool:
        """Replace the value and notify subscribers.

        Returns False (nothing stored, nobody notified) when *value*
        deep-equals the current value. Inside a suppressed block the value
        is stored without notification. A subscriber exception propagates
        to the caller; the new value stays stored.
        """
        with self._lock:
            if self._equals(self._value, value):
                return False
            self._value = copy.deepcopy(value)
            if self._suppress_depth:
                return True
            for subscriber in list(self._subscribers):
                subscriber(copy.deepcopy(self._value))
            return True

    def replace(self, value: T) -> None:
        """Store *value* unconditionally, skipping the no-op check.

        Used to swap an equal-by-dump value for its canonical instance.
        Notifies subscribers unless suppressed.
        """
        with self._lock:
            self._value = copy.deepcopy(value)
            if self._suppress_depth:
                return
            for subscriber in list(self._subscribers):
                subscriber(copy.deepcopy(self._value))

    def subscribe(self, fn: Subscriber[T]) -> Callable[[], None]:
        """Register *fn* for change notifications; returns an unsubscribe callable."""
        with self._lock:
            self._subscribers.append(fn)

        def unsubscribe() -> None:
            with self._lock:
                if fn in self._subscribers:
                    self._subscribers.remove(fn)

        return unsubscribe

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        """Block during which mutations skip notification. Nests."""
        with self._lock:
            self._suppress_depth += 1
            try:
                yield
            finally:
                self._suppress_depth -= 1

    def with_suppressed(self, fn: Callable[[], R]) -> R:
        """Run *fn* inside :meth:`suppressed` and return its result."""
        with self.suppressed():
            return fn()

    def __repr__(self) -> str:
        return f"ReactiveCell({self._value!r})"
