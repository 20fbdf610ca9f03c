"""Declarative schemas — compile a YAML field table into a pydantic model.

Lets a card author describe state without writing Python::

    name: pet
    fields:
      affection: {type: number, range: [0, 100], default: 50}
      mood: {type: enum, values: [happy, sad], default: happy}
      inventory:
        type: record
        values:
          type: object
          fields:
            description: {type: string}
            quantity: {type: number, range: [0, 99]}
      stage:
        type: derived
        source: affection
        thresholds: [[30, cold], [70, warm]]
        top: devoted
    fallback:
      affection: 10

Field kinds: ``number``, ``enum``, ``string``, ``bool``, ``list``,
``record``, ``object`` and ``derived``. A field without ``default`` is
required, except containers (empty) and objects whose own fields all have
defaults.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, create_model, model_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from varsync.domain.fields import Number, choice, clamped, derived, tiered
from varsync.domain.validation import SchemaValidator
from varsync.errors import SchemaDefinitionError

_SCALARS: dict[str, Any] = {"string": str, "bool": bool}


@dataclass(frozen=True)
class SchemaDeclaration:
    """A compiled declarative schema."""

    name: str
    model: type[BaseModel]
    fallback: dict[str, Any] = field(default_factory=dict)

    def validator(self) -> SchemaValidator[Any]:
        return SchemaValidator(self.model, fallback=self.fallback or None, name=self.name)


def load_schema_file(path: Path) -> SchemaDeclaration:
    """Read and compile a YAML schema declaration.

    Raises:
        SchemaDefinitionError: On unreadable YAML or a malformed declaration.
    """
    try:
        doc = YAML(typ="safe", pure=True).load(path.read_text(encoding="utf-8"))
    except YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise SchemaDefinitionError(msg) from exc
    if not isinstance(doc, Mapping):
        msg = f"{path}: expected a mapping at the top level"
        raise SchemaDefinitionError(msg)
    return compile_declaration(doc, default_name=path.stem)


def compile_declaration(doc: Mapping[str, Any], *, default_name: str = "schema") -> SchemaDeclaration:
    """Compile a parsed declaration document."""
    name = str(doc.get("name") or default_name)
    fields = doc.get("fields")
    if not isinstance(fields, Mapping) or not fields:
        msg = f"Schema {name!r} declares no fields"
        raise SchemaDefinitionError(msg)
    fallback = doc.get("fallback") or {}
    if not isinstance(fallback, Mapping):
        msg = f"Schema {name!r}: fallback must be a mapping"
        raise SchemaDefinitionError(msg)
    model = _compile_object(_model_name(name), fields)
    return SchemaDeclaration(name=name, model=model, fallback=dict(fallback))


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def _model_name(name: str) -> str:
    return "".join(part.capitalize() for part in name.replace("-", "_").split("_")) or "Schema"


def _compile_object(model_name: str, fields: Mapping[str, Any]) -> type[BaseModel]:
    definitions: dict[str, Any] = {}
    validators: dict[str, Any] = {}

    for field_name, spec in fields.items():
        if not isinstance(spec, Mapping):
            msg = f"{model_name}.{field_name}: field spec must be a mapping"
            raise SchemaDefinitionError(msg)
        if spec.get("type") == "derived":
            definitions[field_name] = _derived_field(model_name, field_name, spec, fields)
            validators[f"_derive_{field_name}"] = _derive_validator(field_name, spec)
        else:
            definitions[field_name] = _field(f"{model_name}{_model_name(field_name)}", spec)

    try:
        return create_model(model_name, __validators__=validators, **definitions)
    except (TypeError, ValueError) as exc:
        msg = f"{model_name}: {exc}"
        raise SchemaDefinitionError(msg) from exc


def _field(qualname: str, spec: Mapping[str, Any]) -> tuple[Any, Any]:
    """Return a ``(annotation, default)`` pair for :func:`create_model`."""
    kind = spec.get("type")
    has_default = "default" in spec
    default = spec.get("default", ...)

    if kind == "number":
        bounds = spec.get("range")
        if bounds is None:
            return Number, default
        if not (isinstance(bounds, list) and len(bounds) == 2):
            msg = f"{qualname}: range must be [lo, hi]"
            raise SchemaDefinitionError(msg)
        lo, hi = bounds
        if has_default and not lo <= default <= hi:
            msg = f"{qualname}: default {default!r} outside range [{lo}, {hi}]"
            raise SchemaDefinitionError(msg)
        return clamped(lo, hi), default

    if kind == "enum":
        values = spec.get("values") or []
        fallback = spec.get("default", values[0] if values else None)
        return choice(*map(str, values), fallback=str(fallback)), fallback

    if kind in _SCALARS:
        return _SCALARS[kind], default

    if kind == "list":
        item_ann, _ = _field(f"{qualname}Item", _shape(spec.get("items", "string")))
        return list[item_ann], Field(default_factory=list)  # type: ignore[valid-type]

    if kind == "record":
        value_ann, _ = _field(f"{qualname}Value", _shape(spec.get("values", "string")))
        return dict[str, value_ann], Field(default_factory=dict)  # type: ignore[valid-type]

    if kind == "object":
        nested = spec.get("fields")
        if not isinstance(nested, Mapping) or not nested:
            msg = f"{qualname}: object fields must be a non-empty mapping"
            raise SchemaDefinitionError(msg)
        model = _compile_object(qualname, nested)
        if has_default:
            return model, default
        return model, _object_default(model)

    msg = f"{qualname}: unknown field type {kind!r}"
    raise SchemaDefinitionError(msg)


def _shape(spec: Any) -> Mapping[str, Any]:
    """Item/value shapes may be spelled as a bare kind name."""
    if isinstance(spec, str):
        return {"type": spec}
    if isinstance(spec, Mapping):
        return spec
    msg = f"Invalid shape {spec!r}"
    raise SchemaDefinitionError(msg)


def _object_default(model: type[BaseModel]) -> Any:
    """Default factory when every nested field has a default, else required."""
    try:
        model()
    except ValueError:
        return ...
    return Field(default_factory=model)


def _derived_field(
    model_name: str,
    field_name: str,
    spec: Mapping[str, Any],
    siblings: Mapping[str, Any],
) -> tuple[Any, Any]:
    source = spec.get("source")
    source_spec = siblings.get(source)
    if not isinstance(source_spec, Mapping) or source_spec.get("type") != "number":
        msg = f"{model_name}.{field_name}: source {source!r} must name a sibling number field"
        raise SchemaDefinitionError(msg)
    thresholds, top = _tiers(f"{model_name}.{field_name}", spec)
    labels = [label for _, label in thresholds] + [top]
    default = str(spec.get("default", labels[0]))
    annotation = derived(str, default, alias=spec.get("alias"))
    if default not in labels:
        msg = f"{model_name}.{field_name}: default {default!r} is not a tier label"
        raise SchemaDefinitionError(msg)
    return annotation, default


def _tiers(qualname: str, spec: Mapping[str, Any]) -> tuple[list[tuple[float, str]], str]:
    raw = spec.get("thresholds")
    top = spec.get("top")
    if top is None:
        msg = f"{qualname}: derived fields need a top label"
        raise SchemaDefinitionError(msg)
    if not isinstance(raw, list) or not raw:
        msg = f"{qualname}: thresholds must be a non-empty list of [bound, label]"
        raise SchemaDefinitionError(msg)
    pairs: list[tuple[float, str]] = []
    for entry in raw:
        if not (isinstance(entry, list) and len(entry) == 2):
            msg = f"{qualname}: bad threshold {entry!r}"
            raise SchemaDefinitionError(msg)
        pairs.append((float(entry[0]), str(entry[1])))
    if [bound for bound, _ in pairs] != sorted(bound for bound, _ in pairs):
        msg = f"{qualname}: thresholds must ascend"
        raise SchemaDefinitionError(msg)
    return pairs, str(top)


def _derive_validator(field_name: str, spec: Mapping[str, Any]) -> Any:
    source = spec["source"]
    thresholds, top = _tiers(field_name, spec)

    def _derive(self: BaseModel) -> BaseModel:
        setattr(self, field_name, tiered(getattr(self, source), thresholds, top))
        return self

    derive: Callable[..., Any] = model_validator(mode="after")(_derive)
    return derive
