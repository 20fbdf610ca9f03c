"""Workspace — the single dependency injected into every service.

Owns the host store, the plugin manager and the session registry, all
created lazily so ``--help`` never opens the database. Tests inject a
:class:`~varsync.infrastructure.hosts.MemoryVariableHost` instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from varsync.domain.declarative import load_schema_file
from varsync.domain.validation import SchemaValidator
from varsync.infrastructure.adapter import VariableStoreAdapter
from varsync.infrastructure.database import SqlVariableHost, init_database
from varsync.plugins.manager import PluginManager
from varsync.schemas import get_schema
from varsync.sync.registry import SessionRegistry

if TYPE_CHECKING:
    from typing import Any

    from varsync.config.settings import VarsyncSettings
    from varsync.infrastructure.hosts import VariableHost

logger = logging.getLogger(__name__)

_SCHEMA_SUFFIXES = (".yaml", ".yml")


class Workspace:
    """Lazily wired store, plugins and sync sessions for one project root."""

    def __init__(self, settings: VarsyncSettings, *, host: VariableHost | None = None) -> None:
        self.settings = settings
        self._host = host
        self._owns_engine = host is None
        self._plugins: PluginManager | None = None
        self._registry: SessionRegistry | None = None

    @property
    def root(self) -> Path:
        return self.settings.root

    @property
    def host(self) -> VariableHost:
        """The host store; opens the SQLite database on first access."""
        if self._host is None:
            engine = init_database(self.settings.store_path)
            self._host = SqlVariableHost(engine)
            logger.debug("Opened variable store at %s", self.settings.store_path)
        return self._host

    @property
    def plugin_manager(self) -> PluginManager:
        """Plugin manager, loaded on first access when plugins are enabled."""
        return self.load_plugins()

    def load_plugins(self) -> PluginManager:
        """Discover plugins once; they may contribute hooks and schemas."""
        if self._plugins is None:
            self._plugins = PluginManager()
            if self.settings.plugins.enabled:
                names = self._plugins.discover_and_load(local_dir=self.settings.plugin_dir)
                logger.debug("Loaded plugins: %s", names)
        return self._plugins

    @property
    def registry(self) -> SessionRegistry:
        """Shared sync sessions.

        No poll threads are started; long-running commands tick explicitly.
        """
        if self._registry is None:
            self._registry = SessionRegistry(
                self.adapter(),
                poll_interval=self.settings.sync.poll_interval,
                poll=False,
                hooks=self.plugin_manager.hook,
            )
        return self._registry

    def adapter(self, key: str | None = None) -> VariableStoreAdapter:
        return VariableStoreAdapter(self.host, key=key or self.settings.sync.data_key)

    def validator(self, schema: str) -> SchemaValidator[Any]:
        """Resolve *schema* to a validator.

        *schema* is a registered name, or a path to a YAML declaration
        (absolute, or relative to the project root).

        Raises:
            KeyError: Unknown schema name.
            SchemaDefinitionError: Broken declaration or model defaults.
        """
        if schema.endswith(_SCHEMA_SUFFIXES):
            path = Path(schema)
            if not path.is_absolute() and not path.exists():
                path = self.root / path
            return load_schema_file(path).validator()
        self.load_plugins()
        return SchemaValidator(get_schema(schema), name=schema)

    def close(self) -> None:
        """Destroy live sessions and release the database engine."""
        if self._registry is not None:
            self._registry.close()
            self._registry = None
        if self._owns_engine and isinstance(self._host, SqlVariableHost):
            self._host.engine.dispose()
