"""Tests for ReactiveCell — change detection, notification, suppression."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from tests.conftest import Pet
from varsync.sync.cell import ReactiveCell, deep_equal


class TestDeepEqual:
    def test_plain_structures(self) -> None:
        assert deep_equal({"a": [1, {"b": 2}]}, {"a": [1, {"b": 2}]})
        assert not deep_equal({"a": 1}, {"a": 2})

    def test_models_compare_by_dump(self) -> None:
        assert deep_equal(Pet(affection=3), Pet(affection=3, mood="happy"))
        assert not deep_equal(Pet(affection=3), Pet(affection=4))

    def test_model_against_blob(self) -> None:
        assert deep_equal(Pet(affection=3), {"affection": 3, "mood": "happy"})
        assert not deep_equal(Pet(affection=3), {"affection": 3})


class TestSet:
    def test_notifies_on_change(self) -> None:
        cell = ReactiveCell({"n": 1})
        seen: list[Any] = []
        cell.subscribe(seen.append)
        assert cell.set({"n": 2}) is True
        assert seen == [{"n": 2}]

    def test_equal_value_is_noop(self) -> None:
        cell = ReactiveCell({"n": 1})
        seen: list[Any] = []
        cell.subscribe(seen.append)
        assert cell.set({"n": 1}) is False
        assert seen == []

    def test_equal_model_is_noop(self) -> None:
        cell = ReactiveCell(Pet(affection=10))
        seen: list[Any] = []
        cell.subscribe(seen.append)
        assert cell.set(Pet(affection=10)) is False
        assert seen == []

    def test_custom_equality(self) -> None:
        cell = ReactiveCell(1, equals=lambda a, b: a is b)
        assert cell.set(1) is False

    def test_subscriber_error_propagates_value_kept(self) -> None:
        cell = ReactiveCell(0)

        def boom(_value: int) -> None:
            msg = "subscriber failed"
            raise RuntimeError(msg)

        cell.subscribe(boom)
        with pytest.raises(RuntimeError, match="subscriber failed"):
            cell.set(1)
        assert cell.get() == 1


class TestReplace:
    def test_swaps_equal_value(self) -> None:
        cell: ReactiveCell[Any] = ReactiveCell({"affection": 3, "mood": "happy"})
        with cell.suppressed():
            cell.replace(Pet(affection=3))
        assert isinstance(cell.get(), Pet)

    def test_notifies_outside_suppression(self) -> None:
        cell = ReactiveCell({"n": 1})
        seen: list[Any] = []
        cell.subscribe(seen.append)
        cell.replace({"n": 1})
        assert seen == [{"n": 1}]


class TestCopies:
    def test_get_returns_copy(self) -> None:
        cell = ReactiveCell({"items": [1]})
        cell.get()["items"].append(2)
        assert cell.get() == {"items": [1]}

    def test_set_stores_copy(self) -> None:
        cell = ReactiveCell({})
        value = {"items": [1]}
        cell.set(value)
        value["items"].append(2)
        assert cell.get() == {"items": [1]}

    def test_subscribers_get_independent_copies(self) -> None:
        cell = ReactiveCell({"n": 0})

        def mutate(value: dict[str, Any]) -> None:
            value["n"] = 99

        seen: list[Any] = []
        cell.subscribe(mutate)
        cell.subscribe(seen.append)
        cell.set({"n": 1})
        assert seen == [{"n": 1}]
        assert cell.get() == {"n": 1}


class TestSubscriptions:
    def test_unsubscribe(self) -> None:
        cell = ReactiveCell(0)
        seen: list[int] = []
        unsubscribe = cell.subscribe(seen.append)
        assert cell.subscriber_count == 1
        unsubscribe()
        unsubscribe()
        cell.set(1)
        assert seen == []
        assert cell.subscriber_count == 0

    def test_unsubscribe_during_notification(self) -> None:
        cell = ReactiveCell(0)
        seen: list[int] = []
        unsubscribe: Any = None

        def once(value: int) -> None:
            seen.append(value)
            unsubscribe()

        unsubscribe = cell.subscribe(once)
        cell.set(1)
        cell.set(2)
        assert seen == [1]


class TestSuppression:
    def test_suppressed_set_stores_silently(self) -> None:
        cell = ReactiveCell(0)
        seen: list[int] = []
        cell.subscribe(seen.append)
        with cell.suppressed():
            assert cell.is_suppressed
            assert cell.set(5) is True
        assert not cell.is_suppressed
        assert cell.get() == 5
        assert seen == []

    def test_nested_suppression(self) -> None:
        cell = ReactiveCell(0)
        seen: list[int] = []
        cell.subscribe(seen.append)
        with cell.suppressed():
            with cell.suppressed():
                cell.set(1)
            assert cell.is_suppressed
            cell.set(2)
        cell.set(3)
        assert seen == [3]

    def test_suppression_released_on_error(self) -> None:
        cell = ReactiveCell(0)
        with pytest.raises(ValueError), cell.suppressed():
            raise ValueError
        assert not cell.is_suppressed

    def test_with_suppressed_returns_result(self) -> None:
        cell = ReactiveCell(0)
        seen: list[int] = []
        cell.subscribe(seen.append)
        assert cell.with_suppressed(lambda: cell.set(7)) is True
        assert seen == []

    def test_suppression_does_not_leak_across_threads(self) -> None:
        cell = ReactiveCell(0)
        seen: list[int] = []
        cell.subscribe(seen.append)
        inside = threading.Event()
        release = threading.Event()

        def hold() -> None:
            with cell.suppressed():
                inside.set()
                release.wait(5)

        holder = threading.Thread(target=hold)
        holder.start()
        inside.wait(5)

        writer = threading.Thread(target=cell.set, args=(1,))
        writer.start()
        writer.join(0.1)
        assert writer.is_alive()
        release.set()
        holder.join(5)
        writer.join(5)
        assert seen == [1]
