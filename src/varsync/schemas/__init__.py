"""Built-in schema definitions, looked up by name.

Plugins extend the registry through the ``register_schemas`` hook.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from varsync.schemas.character_card import CharacterCard
from varsync.schemas.companion import Companion

if TYPE_CHECKING:
    from pydantic import BaseModel

SCHEMA_REGISTRY: dict[str, type[BaseModel]] = {
    "companion": Companion,
    "character_card": CharacterCard,
}


def register_schema(name: str, model: type[BaseModel]) -> None:
    """Register *model* under *name*.

    Raises:
        TypeError: If *model* is not a pydantic model class.
        ValueError: If *name* is empty.
    """
    from pydantic import BaseModel

    if not name:
        msg = "Schema name must not be empty"
        raise ValueError(msg)
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        msg = f"Schema {name!r} must be a pydantic model class, got {model!r}"
        raise TypeError(msg)
    SCHEMA_REGISTRY[name] = model


def get_schema(name: str) -> type[BaseModel]:
    """Look up a registered schema.

    Raises:
        KeyError: If no schema is registered under *name*.
    """
    try:
        return SCHEMA_REGISTRY[name]
    except KeyError:
        known = ", ".join(sorted(SCHEMA_REGISTRY))
        msg = f"Unknown schema {name!r} (known: {known})"
        raise KeyError(msg) from None
