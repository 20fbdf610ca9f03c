"""Character card state — world clock, Kinako's mood and bond, Sato's bag.

``kinako.$affection_stage`` is derived from ``kinako.affection`` on every
validation pass; Sato's used-up inventory entries are dropped.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Self

from pydantic import BaseModel, Field, field_validator, model_validator

from varsync.domain.fields import Number, choice, clamped, derived, tiered

AffectionStage = Literal["distant", "warming_up", "attached", "deeply_bonded", "devoted"]

STAGE_THRESHOLDS: list[tuple[float, str]] = [
    (20, "distant"),
    (40, "warming_up"),
    (60, "attached"),
    (80, "deeply_bonded"),
]

OutfitSlot = Literal["top", "bottom", "underwear", "accessories", "costume"]

Affection = clamped(0, 100, default=50)
EnergyLevel = clamped(0, 100, default=80)
InterestLevel = clamped(0, 10)
KinakoMood = choice(
    "happy", "playful", "pouty", "sleepy", "curious", "tantrum", "clingy", fallback="playful"
)
Stage = derived(AffectionStage, "attached", alias="$affection_stage")


def _now_stamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M")


class World(BaseModel):
    current_time: str = Field(default_factory=_now_stamp, description="YYYY-MM-DD HH:MM")
    current_location: str = "Unknown"
    weather: str = "Sunny"
    recent_events: dict[str, str] = Field(default_factory=dict)


class FavoriteThing(BaseModel):
    description: str
    interest_level: InterestLevel


class Kinako(BaseModel):
    affection: Affection
    mood: KinakoMood
    energy_level: EnergyLevel
    outfit: dict[OutfitSlot, str] = Field(default_factory=dict)
    current_activity: str = "Playing"
    favorite_things: dict[str, FavoriteThing] = Field(default_factory=dict)
    affection_stage: Stage

    @model_validator(mode="after")
    def _derive_stage(self) -> Self:
        self.affection_stage = tiered(self.affection, STAGE_THRESHOLDS, "devoted")
        return self


class SatoItem(BaseModel):
    description: str
    quantity: Number


class Sato(BaseModel):
    inventory: dict[str, SatoItem] = Field(default_factory=dict)
    kinako_gifts_received: dict[str, str] = Field(default_factory=dict)
    relationship_notes: str = ""

    @field_validator("inventory")
    @classmethod
    def _drop_used_up(cls, value: dict[str, SatoItem]) -> dict[str, SatoItem]:
        return {name: item for name, item in value.items() if item.quantity > 0}


class CharacterCard(BaseModel):
    """Full card state; an empty blob validates to all defaults."""

    world: World = Field(default_factory=World)
    kinako: Kinako = Field(default_factory=Kinako)
    sato: Sato = Field(default_factory=Sato)
