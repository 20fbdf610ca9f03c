"""Tests for the sync session lifecycle map."""

from __future__ import annotations

import pytest

from varsync.domain.lifecycle import SESSION_TRANSITIONS, SessionState, is_valid_transition


class TestSessionTransitions:
    @pytest.mark.parametrize(
        ("current", "target"),
        [("uninitialized", "ready"), ("uninitialized", "destroyed"), ("ready", "destroyed")],
    )
    def test_allowed(self, current: str, target: str) -> None:
        assert is_valid_transition(current, target, SESSION_TRANSITIONS)

    @pytest.mark.parametrize(
        ("current", "target"),
        [("ready", "uninitialized"), ("destroyed", "ready"), ("destroyed", "uninitialized")],
    )
    def test_rejected(self, current: str, target: str) -> None:
        assert not is_valid_transition(current, target, SESSION_TRANSITIONS)

    def test_destroyed_is_terminal(self) -> None:
        assert SESSION_TRANSITIONS[SessionState.DESTROYED] == []

    def test_every_state_has_an_entry(self) -> None:
        assert set(SESSION_TRANSITIONS) == {s.value for s in SessionState}
