"""Tests for the built-in schemas and the schema registry."""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from varsync.domain.validation import SchemaValidator, dump
from varsync.schemas import SCHEMA_REGISTRY, get_schema, register_schema
from varsync.schemas.character_card import CharacterCard
from varsync.schemas.companion import Companion


class TestRegistry:
    def test_builtins_registered(self) -> None:
        assert SCHEMA_REGISTRY["companion"] is Companion
        assert SCHEMA_REGISTRY["character_card"] is CharacterCard

    def test_unknown_schema_lists_known(self) -> None:
        with pytest.raises(KeyError, match="known: character_card, companion"):
            get_schema("nope")

    def test_register(self) -> None:
        class Tiny(BaseModel):
            x: int = 0

        register_schema("tiny", Tiny)
        assert get_schema("tiny") is Tiny

    def test_register_rejects_non_model(self) -> None:
        with pytest.raises(TypeError):
            register_schema("bad", dict)  # type: ignore[arg-type]

    def test_register_rejects_empty_name(self) -> None:
        class Tiny(BaseModel):
            pass

        with pytest.raises(ValueError):
            register_schema("", Tiny)


class TestCompanion:
    @pytest.fixture
    def validator(self) -> SchemaValidator[Companion]:
        return SchemaValidator(Companion, name="companion")

    def test_empty_blob_is_invalid(self, validator: SchemaValidator[Companion]) -> None:
        assert not validator.validate({}).ok

    def test_defaults(self, validator: SchemaValidator[Companion]) -> None:
        state = dump(validator.defaults())
        assert state["affection"] == 50
        assert state["status"] == {"hunger": 0, "fatigue": 0, "happiness": 50}
        assert state["inventory"] == {}
        assert state["memory"] == []

    def test_normalizes_noisy_blob(self, validator: SchemaValidator[Companion]) -> None:
        blob = dict(Companion.fallback_data)
        blob.update(
            affection="150",
            mood="furious",
            inventory={"apple": {"description": "red", "quantity": -3}},
            memory=[{"event": "met", "timestamp": "1700000000000"}],
        )
        state = dump(validator.validate(blob).value)
        assert state["affection"] == 100
        assert state["mood"] == "happy"
        assert state["inventory"]["apple"]["quantity"] == 0
        assert state["memory"][0]["timestamp"] == 1_700_000_000_000

    def test_missing_status_field(self, validator: SchemaValidator[Companion]) -> None:
        blob = dict(Companion.fallback_data, status={"hunger": 1})
        result = validator.validate(blob)
        assert {e.path for e in result.errors} == {"status.fatigue", "status.happiness"}


class TestCharacterCard:
    @pytest.fixture
    def validator(self) -> SchemaValidator[CharacterCard]:
        return SchemaValidator(CharacterCard, name="character_card")

    def test_empty_blob_validates(self, validator: SchemaValidator[CharacterCard]) -> None:
        result = validator.validate({})
        assert result.ok
        kinako = dump(result.value)["kinako"]
        assert kinako["affection"] == 50
        assert kinako["$affection_stage"] == "attached"
        assert kinako["mood"] == "playful"

    @pytest.mark.parametrize(
        ("affection", "stage"),
        [(0, "distant"), (20, "warming_up"), (59, "attached"), (79, "deeply_bonded"), (80, "devoted")],
    )
    def test_stage_follows_affection(
        self, validator: SchemaValidator[CharacterCard], affection: int, stage: str
    ) -> None:
        result = validator.validate({"kinako": {"affection": affection}})
        assert dump(result.value)["kinako"]["$affection_stage"] == stage

    def test_stored_stage_is_ignored(self, validator: SchemaValidator[CharacterCard]) -> None:
        result = validator.validate({"kinako": {"affection": 5, "$affection_stage": "devoted"}})
        assert dump(result.value)["kinako"]["$affection_stage"] == "distant"

    def test_used_up_items_dropped(self, validator: SchemaValidator[CharacterCard]) -> None:
        blob = {
            "sato": {
                "inventory": {
                    "snack": {"description": "cookie", "quantity": 0},
                    "ball": {"description": "red ball", "quantity": "2"},
                }
            }
        }
        inventory = dump(validator.validate(blob).value)["sato"]["inventory"]
        assert inventory == {"ball": {"description": "red ball", "quantity": 2}}

    def test_unknown_outfit_slot_rejected(self, validator: SchemaValidator[CharacterCard]) -> None:
        result = validator.validate({"kinako": {"outfit": {"hat": "straw"}}})
        assert not result.ok

    def test_canonical_form_is_stable(self, validator: SchemaValidator[CharacterCard]) -> None:
        first = dump(validator.validate({"kinako": {"affection": "99", "mood": "??"}}).value)
        assert dump(validator.validate(first).value) == first
