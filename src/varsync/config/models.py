"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, varsync.toml only contains
overrides. An empty file (or none at all) is a working configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from varsync.domain.scopes import ScopeType

# --- varsync.toml sections ---


class SyncConfig(BaseModel):
    """[sync] section."""

    model_config = {"frozen": True}

    poll_interval_ms: int = 2000
    data_key: str = "stat_data"

    @field_validator("poll_interval_ms")
    @classmethod
    def _positive_interval(cls, value: int) -> int:
        if value <= 0:
            msg = "poll_interval_ms must be positive"
            raise ValueError(msg)
        return value

    @field_validator("data_key")
    @classmethod
    def _non_empty_key(cls, value: str) -> str:
        if not value.strip():
            msg = "data_key must not be empty"
            raise ValueError(msg)
        return value

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    path: Path = Path(".varsync/variables.db")


class NotesConfig(BaseModel):
    """[notes] section."""

    model_config = {"frozen": True}

    quick_key: str = "overlaySidebar_quickNotes"
    occ_key: str = "overlaySidebar_OCC"
    mirror_scopes: list[ScopeType] = Field(
        default_factory=lambda: [ScopeType.SCRIPT, ScopeType.CHAT],
    )
    script_id: str = "overlay-sidebar"

    @field_validator("mirror_scopes")
    @classmethod
    def _no_extension_scope(cls, value: list[ScopeType]) -> list[ScopeType]:
        if ScopeType.EXTENSION in value:
            msg = "notes cannot mirror into extension scopes"
            raise ValueError(msg)
        return value


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: Path = Path(".varsync/plugins")
