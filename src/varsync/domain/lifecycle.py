"""Sync session lifecycle.

A session is created uninitialized, becomes ready once its cell has been
seeded from the store, and is destroyed on teardown. Destroyed is terminal.
"""

from __future__ import annotations

from enum import StrEnum


class SessionState(StrEnum):
    """Lifecycle states of a sync session."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DESTROYED = "destroyed"


SESSION_TRANSITIONS: dict[str, list[str]] = {
    "uninitialized": ["ready", "destroyed"],
    "ready": ["destroyed"],
    "destroyed": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]],
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed
