"""Shared pytest fixtures and test helpers for varsync tests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, ClassVar

import pytest
import structlog
from click.testing import CliRunner
from pydantic import BaseModel
from sqlalchemy.engine import Engine

from varsync.config.settings import VarsyncSettings
from varsync.domain.fields import choice, clamped
from varsync.domain.scopes import ScopeKey
from varsync.domain.validation import SchemaValidator
from varsync.infrastructure.adapter import VariableStoreAdapter
from varsync.infrastructure.database import SqlVariableHost, init_database
from varsync.infrastructure.hosts import MemoryVariableHost
from varsync.plugins import PluginManager, hookimpl
from varsync.schemas import SCHEMA_REGISTRY
from varsync.services.workspace import Workspace

Affection = clamped(0, 100)
PetMood = choice("happy", "sad", fallback="happy")


class Pet(BaseModel):
    """Small schema: one required clamped stat and an enum with fallback."""

    fallback_data: ClassVar[dict[str, Any]] = {"affection": 50}

    affection: Affection
    mood: PetMood


@pytest.fixture(autouse=True)
def _reset_logging() -> Any:
    """Undo CLI logging setup so handlers never outlive a test's streams."""
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _restore_schema_registry() -> Any:
    saved = dict(SCHEMA_REGISTRY)
    yield
    SCHEMA_REGISTRY.clear()
    SCHEMA_REGISTRY.update(saved)


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("VARSYNC_CONFIG", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def host() -> MemoryVariableHost:
    return MemoryVariableHost(message_count=3)


@pytest.fixture
def adapter(host: MemoryVariableHost) -> VariableStoreAdapter:
    return VariableStoreAdapter(host)


@pytest.fixture
def chat_scope() -> ScopeKey:
    return ScopeKey(type="chat")


@pytest.fixture
def pet_validator() -> SchemaValidator[Pet]:
    return SchemaValidator(Pet, name="pet")


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def plugin_manager(recorder: Recorder) -> PluginManager:
    pm = PluginManager()
    pm.register_plugin(recorder, name="recorder")
    return pm


@pytest.fixture
def db_engine(tmp_path: Path) -> Engine:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path / "vars.db")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sql_host(db_engine: Engine) -> SqlVariableHost:
    return SqlVariableHost(db_engine)


@pytest.fixture
def settings(tmp_path: Path) -> VarsyncSettings:
    return VarsyncSettings.from_cli(root=tmp_path)


@pytest.fixture
def workspace(settings: VarsyncSettings, host: MemoryVariableHost) -> Workspace:
    ws = Workspace(settings, host=host)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI tests from an empty temp directory (fresh SQLite store)."""
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def seed(host: MemoryVariableHost, scope: ScopeKey, blob: Any, *, key: str = "stat_data") -> None:
    """Store *blob* under *key*, preserving sibling variables."""
    variables = host.get_variables(scope)
    variables[key] = blob
    host.replace_variables(scope, variables)


def stored(host: Any, scope: ScopeKey, *, key: str = "stat_data") -> Any:
    return host.get_variables(scope).get(key)


class Recorder:
    """Plugin that records every sync event it receives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def named(self, name: str) -> list[Any]:
        return [payload for event, payload in self.events if event == name]

    @hookimpl
    def post_inbound_apply(self, scope: str, data: dict[str, Any]) -> None:
        self.events.append(("inbound", data))

    @hookimpl
    def post_store_write(self, scope: str, data: dict[str, Any], origin: str) -> None:
        self.events.append(("write", (origin, data)))

    @hookimpl
    def on_validation_failure(self, scope: str, errors: list[dict[str, Any]], origin: str) -> None:
        self.events.append(("invalid", (origin, errors)))
