"""Scope keys — addressable locations in the host variable store.

A scope selects one persistence tier from the closed :class:`ScopeType`
enumeration, plus the id the tier needs (message index, script id,
extension id). Message scopes default to the most recent message,
spelled ``latest`` and stored as ``-1``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, field_validator, model_validator

LATEST_MESSAGE = -1


class ScopeType(StrEnum):
    """Persistence tiers offered by the host."""

    MESSAGE = "message"
    CHAT = "chat"
    CHARACTER = "character"
    PRESET = "preset"
    GLOBAL = "global"
    SCRIPT = "script"
    EXTENSION = "extension"


# Tiers that require an id, and the field carrying it.
_ID_FIELDS: dict[ScopeType, str] = {
    ScopeType.SCRIPT: "script_id",
    ScopeType.EXTENSION: "extension_id",
}


class ScopeKey(BaseModel):
    """Identifies one variable location in the host store.

    Attributes:
        type: Persistence tier.
        message_id: Message index for ``message`` scopes. Negative values
            count from the end; ``-1`` (``latest``) is the newest message.
        script_id: Owning script for ``script`` scopes.
        extension_id: Owning extension for ``extension`` scopes.
    """

    model_config = {"frozen": True}

    type: ScopeType
    message_id: int | None = None
    script_id: str | None = None
    extension_id: str | None = None

    @field_validator("message_id", mode="before")
    @classmethod
    def _parse_latest(cls, value: Any) -> Any:
        if value == "latest":
            return LATEST_MESSAGE
        return value

    @model_validator(mode="before")
    @classmethod
    def _default_latest(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("type") == ScopeType.MESSAGE:
            if data.get("message_id") is None:
                return {**data, "message_id": LATEST_MESSAGE}
        return data

    @model_validator(mode="after")
    def _check_ids(self) -> Self:
        if self.type != ScopeType.MESSAGE and self.message_id is not None:
            msg = f"message_id is only valid for message scopes, not {self.type}"
            raise ValueError(msg)

        for scope_type, field_name in _ID_FIELDS.items():
            value = getattr(self, field_name)
            if self.type == scope_type and not value:
                msg = f"{self.type} scopes require {field_name}"
                raise ValueError(msg)
            if self.type != scope_type and value is not None:
                msg = f"{field_name} is only valid for {scope_type} scopes"
                raise ValueError(msg)
        return self

    @classmethod
    def parse(cls, type_: str, id_: str | None = None) -> ScopeKey:
        """Build a scope from a tier name and an optional textual id.

        Examples:
            >>> ScopeKey.parse("message", "3").message_id
            3
            >>> ScopeKey.parse("script", "notes").script_id
            'notes'
        """
        scope_type = ScopeType(type_)
        if scope_type == ScopeType.MESSAGE:
            message_id: Any = id_ if id_ in (None, "latest") else int(id_)
            return cls(type=scope_type, message_id=message_id)
        field_name = _ID_FIELDS.get(scope_type)
        if field_name is None:
            if id_ is not None:
                msg = f"{scope_type} scopes take no id"
                raise ValueError(msg)
            return cls(type=scope_type)
        return cls(type=scope_type, **{field_name: id_})

    @property
    def is_latest_message(self) -> bool:
        return self.type == ScopeType.MESSAGE and self.message_id == LATEST_MESSAGE

    @property
    def store_id(self) -> str:
        """Stable identifier: sorted ``field=value`` parts joined by dots.

        Examples:
            >>> ScopeKey(type="chat").store_id
            'vars.type=chat'
            >>> ScopeKey(type="message", message_id=4).store_id
            'vars.message_id=4.type=message'
        """
        parts = {k: v for k, v in self.model_dump(mode="json").items() if v is not None}
        return "vars." + ".".join(f"{k}={parts[k]}" for k in sorted(parts))

    def resolved(self, message_count: int) -> ScopeKey:
        """Return this scope with a negative message index made absolute.

        Non-message scopes, and absolute indices, are returned unchanged.
        """
        if self.type != ScopeType.MESSAGE or self.message_id is None or self.message_id >= 0:
            return self
        return self.model_copy(update={"message_id": max(message_count + self.message_id, 0)})

    def __str__(self) -> str:
        if self.type == ScopeType.MESSAGE:
            label = "latest" if self.is_latest_message else str(self.message_id)
            return f"message:{label}"
        field_name = _ID_FIELDS.get(self.type)
        if field_name is not None:
            return f"{self.type}:{getattr(self, field_name)}"
        return str(self.type)
