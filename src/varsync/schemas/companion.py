"""Companion stats — one character's affection, mood, inventory and memories.

Every stat is required: a blank store does not validate, and sessions
seed from :attr:`Companion.fallback_data` instead.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, Field

from varsync.domain.fields import Percent, choice, clamped

MAX_SAFE_INTEGER = 2**53 - 1

Mood = choice("happy", "angry", "sad", "excited", "bored", fallback="happy")
Timestamp = clamped(0, MAX_SAFE_INTEGER)


class InventoryItem(BaseModel):
    description: str
    quantity: Percent


class Status(BaseModel):
    hunger: Percent
    fatigue: Percent
    happiness: Percent


class MemoryEntry(BaseModel):
    event: str
    timestamp: Timestamp


class Companion(BaseModel):
    """Stats tracked for a single companion character."""

    fallback_data: ClassVar[dict[str, Any]] = {
        "affection": 50,
        "mood": "happy",
        "energy": 100,
        "trust": 50,
        "dependency": 0,
        "status": {"hunger": 0, "fatigue": 0, "happiness": 50},
    }

    affection: Percent
    mood: Mood
    energy: Percent
    trust: Percent
    dependency: Percent
    inventory: dict[str, InventoryItem] = Field(default_factory=dict)
    titles: list[str] = Field(default_factory=list)
    status: Status
    memory: list[MemoryEntry] = Field(default_factory=list)
