"""Schema validation — raw store blobs in, canonical domain objects out.

:class:`SchemaValidator` wraps a pydantic model. Validation never raises:
failures come back as a :class:`ValidationResult` listing every failing
field, so callers can fall back to defaults or keep their last good state.

INVARIANT: validation is a fixed point on its own output:
``validate(dump(v)).value == v`` for every successfully validated ``v``.
Derived fields are recomputed on every pass, never cached.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import pydantic
from pydantic import BaseModel

from varsync.errors import SchemaDefinitionError

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class FieldError:
    """One failing field: location inside the blob, message, offending input."""

    loc: tuple[str | int, ...]
    message: str
    input: Any = None

    @property
    def path(self) -> str:
        return ".".join(str(part) for part in self.loc) or "<root>"

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "message": self.message}


@dataclass(frozen=True)
class ValidationResult(Generic[M]):
    """Outcome of :meth:`SchemaValidator.validate`.

    Exactly one of ``value`` / ``errors`` is populated.
    """

    value: M | None = None
    errors: tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors

    def summary(self) -> str:
        return "; ".join(f"{e.path}: {e.message}" for e in self.errors)


def dump(value: BaseModel) -> dict[str, Any]:
    """Canonical plain-data form of a validated object (what the store sees)."""
    return value.model_dump(mode="json", by_alias=True)


def is_empty_blob(raw: Any) -> bool:
    """True when the store had nothing at all (as opposed to garbage)."""
    return raw is None or (isinstance(raw, Mapping) and not raw)


class SchemaValidator(Generic[M]):
    """Validate raw blobs against a pydantic *model*.

    Parameters:
        model: The domain model class.
        fallback: Blob whose validation yields :meth:`defaults`. Defaults to
            the model's ``fallback_data`` class attribute, or ``{}``.
        name: Display name (defaults to the model class name).

    Raises:
        SchemaDefinitionError: If the fallback blob does not validate;
            a schema must always have a usable default object.
    """

    def __init__(
        self,
        model: type[M],
        *,
        fallback: Mapping[str, Any] | None = None,
        name: str | None = None,
    ) -> None:
        self.model = model
        self.name = name or model.__name__
        if fallback is None:
            fallback = getattr(model, "fallback_data", None) or {}
        self._fallback = dict(fallback)

        probe = self.validate(self._fallback)
        if not probe.ok:
            msg = f"Schema {self.name!r} has no valid defaults: {probe.summary()}"
            raise SchemaDefinitionError(msg)

    def validate(self, raw: Any) -> ValidationResult[M]:
        """Validate *raw* (mapping, model instance, or ``None``)."""
        if raw is None:
            raw = {}
        elif isinstance(raw, BaseModel):
            raw = dump(raw)

        if not isinstance(raw, Mapping):
            error = FieldError((), f"expected a mapping, got {type(raw).__name__}", raw)
            return ValidationResult(errors=(error,))

        try:
            value = self.model.model_validate(dict(raw))
        except pydantic.ValidationError as exc:
            errors = tuple(
                FieldError(tuple(err["loc"]), err["msg"], err.get("input"))
                for err in exc.errors()
            )
            return ValidationResult(errors=errors)
        return ValidationResult(value=value)

    def defaults(self) -> M:
        """The statically known fallback object.

        Re-validated on each call so default factories (timestamps) stay fresh.
        """
        result = self.validate(self._fallback)
        if result.value is None:
            msg = f"Schema {self.name!r} defaults stopped validating: {result.summary()}"
            raise SchemaDefinitionError(msg)
        return result.value

    def canonicalize(self, value: M) -> dict[str, Any]:
        """Plain-data canonical form of *value*."""
        return dump(value)

    def __repr__(self) -> str:
        return f"SchemaValidator({self.name})"
