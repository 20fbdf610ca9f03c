"""Tests for SchemaValidator — canonical output, structured errors, defaults."""

from __future__ import annotations

from typing import Any, ClassVar

import pytest
from pydantic import BaseModel

from tests.conftest import Pet
from varsync.domain.validation import FieldError, SchemaValidator, dump, is_empty_blob
from varsync.errors import SchemaDefinitionError


class TestValidate:
    def test_valid_blob(self, pet_validator: SchemaValidator[Pet]) -> None:
        result = pet_validator.validate({"affection": 70, "mood": "sad"})
        assert result.ok
        assert result.value == Pet(affection=70, mood="sad")
        assert result.errors == ()

    def test_clamps_into_range(self, pet_validator: SchemaValidator[Pet]) -> None:
        assert dump(pet_validator.validate({"affection": 500}).value) == {
            "affection": 100,
            "mood": "happy",
        }
        assert pet_validator.validate({"affection": -5}).value.affection == 0

    def test_missing_required_field(self, pet_validator: SchemaValidator[Pet]) -> None:
        result = pet_validator.validate({"mood": "sad"})
        assert not result.ok
        assert result.value is None
        assert [e.path for e in result.errors] == ["affection"]

    def test_none_is_empty(self, pet_validator: SchemaValidator[Pet]) -> None:
        result = pet_validator.validate(None)
        assert not result.ok
        assert result.errors[0].path == "affection"

    def test_non_mapping_is_root_error(self, pet_validator: SchemaValidator[Pet]) -> None:
        result = pet_validator.validate([1, 2])
        assert not result.ok
        assert result.errors[0].loc == ()
        assert result.errors[0].path == "<root>"
        assert "expected a mapping" in result.errors[0].message

    def test_accepts_model_instances(self, pet_validator: SchemaValidator[Pet]) -> None:
        pet = Pet(affection=20, mood="sad")
        assert pet_validator.validate(pet).value == pet

    def test_extra_keys_dropped(self, pet_validator: SchemaValidator[Pet]) -> None:
        result = pet_validator.validate({"affection": 1, "legacy": True})
        assert dump(result.value) == {"affection": 1, "mood": "happy"}

    def test_never_raises_on_garbage(self, pet_validator: SchemaValidator[Pet]) -> None:
        for raw in ("text", 42, {"affection": object()}, {"affection": "many"}):
            assert not pet_validator.validate(raw).ok

    def test_summary_lists_every_error(self, pet_validator: SchemaValidator[Pet]) -> None:
        result = pet_validator.validate({"affection": "many"})
        assert result.summary().startswith("affection:")


class TestIdempotence:
    @pytest.mark.parametrize(
        "raw",
        [
            {"affection": 500, "mood": "furious"},
            {"affection": "12", "mood": "sad"},
            {"affection": -3.5},
        ],
    )
    def test_validate_is_fixed_point(self, pet_validator: SchemaValidator[Pet], raw: Any) -> None:
        first = pet_validator.validate(raw).value
        second = pet_validator.validate(dump(first)).value
        assert second == first
        assert dump(second) == dump(first)


class TestDefaults:
    def test_defaults_from_fallback_data(self, pet_validator: SchemaValidator[Pet]) -> None:
        assert dump(pet_validator.defaults()) == {"affection": 50, "mood": "happy"}

    def test_explicit_fallback_overrides(self) -> None:
        validator = SchemaValidator(Pet, fallback={"affection": 5, "mood": "sad"})
        assert validator.defaults() == Pet(affection=5, mood="sad")

    def test_defaults_are_independent_copies(self, pet_validator: SchemaValidator[Pet]) -> None:
        first = pet_validator.defaults()
        first.affection = 99
        assert pet_validator.defaults().affection == 50

    def test_unusable_fallback_rejected(self) -> None:
        class Strict(BaseModel):
            fallback_data: ClassVar[dict[str, Any]] = {}
            name: str

        with pytest.raises(SchemaDefinitionError, match="no valid defaults"):
            SchemaValidator(Strict)

    def test_name_defaults_to_model(self) -> None:
        assert SchemaValidator(Pet).name == "Pet"
        assert repr(SchemaValidator(Pet, name="pet")) == "SchemaValidator(pet)"


class TestHelpers:
    def test_is_empty_blob(self) -> None:
        assert is_empty_blob(None)
        assert is_empty_blob({})
        assert not is_empty_blob({"a": 1})
        assert not is_empty_blob("")

    def test_field_error_to_dict(self) -> None:
        error = FieldError(("status", "hunger"), "bad", 3)
        assert error.to_dict() == {"path": "status.hunger", "message": "bad"}
