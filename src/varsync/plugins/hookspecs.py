"""Pluggy hook specifications for varsync sync events and schema registration.

Sync events fire synchronously from the engine, under the cell lock, so
implementations should return quickly. One setup-time hook lets plugins
contribute schemas.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from pydantic import BaseModel

hookspec = pluggy.HookspecMarker("varsync")


class VarsyncHookSpec:
    """Hook specifications for the varsync plugin system."""

    @hookspec
    def post_inbound_apply(self, scope: str, data: dict[str, Any]) -> None:
        """Called after an external change was applied to a cell."""

    @hookspec
    def post_store_write(self, scope: str, data: dict[str, Any], origin: str) -> None:
        """Called after a canonical snapshot was written to the store.

        *origin* is ``local`` for consumer mutations and ``normalize`` for
        tick write-backs of non-canonical blobs.
        """

    @hookspec
    def on_validation_failure(
        self,
        scope: str,
        errors: list[dict[str, Any]],
        origin: str,
    ) -> None:
        """Called when a blob or a consumer value failed validation.

        *origin* is ``initial``, ``inbound`` or ``local``.
        """

    @hookspec
    def register_schemas(self) -> dict[str, type[BaseModel]] | None:
        """Return name -> model mappings to extend SCHEMA_REGISTRY."""
