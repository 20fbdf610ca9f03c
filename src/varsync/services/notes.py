"""NotesService — free-text side notes mirrored into host variables.

Two kinds per chat: ``quick`` notes and ``occ`` (out-of-character) notes.
They are plain strings, never validated, written to every mirror scope
(script and chat by default) so host macros can read them wherever they
look. Loading prefers the first mirror scope that holds a non-empty note.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from varsync.domain.scopes import ScopeKey, ScopeType
from varsync.errors import StoreError
from varsync.services.base import BaseService
from varsync.services.result import ServiceResult

if TYPE_CHECKING:
    from varsync.config.models import NotesConfig

logger = logging.getLogger(__name__)

NOTE_KINDS = ("quick", "occ")


class NotesService(BaseService):
    """Save, load and clear side notes."""

    @property
    def _config(self) -> NotesConfig:
        return self._workspace.settings.notes

    def save(self, kind: str, text: str) -> ServiceResult:
        """Write *text* to every mirror scope."""
        op = "notes_save"
        key, failure = self._key(op, kind)
        if failure is not None:
            return failure
        written: list[str] = []
        try:
            for scope in self._mirror_scopes():
                variables = self._workspace.host.get_variables(scope)
                variables[key] = text
                self._workspace.host.replace_variables(scope, variables)
                written.append(str(scope))
        except StoreError as exc:
            return ServiceResult.failure(op, "STORE_ERROR", str(exc), written=written)
        logger.debug("Saved %s notes (%d chars) to %s", kind, len(text), written)
        return ServiceResult(
            ok=True,
            op=op,
            data={"kind": kind, "key": key, "length": len(text), "scopes": written},
        )

    def load(self, kind: str) -> ServiceResult:
        """Return the first non-empty note among the mirror scopes."""
        op = "notes_show"
        key, failure = self._key(op, kind)
        if failure is not None:
            return failure
        text, source = "", None
        try:
            for scope in self._mirror_scopes():
                value = self._workspace.host.get_variables(scope).get(key)
                if isinstance(value, str) and value:
                    text, source = value, str(scope)
                    break
        except StoreError as exc:
            return ServiceResult.failure(op, "STORE_ERROR", str(exc))
        return ServiceResult(
            ok=True,
            op=op,
            data={"kind": kind, "key": key, "text": text, "scope": source},
        )

    def clear(self, kind: str) -> ServiceResult:
        """Remove the note from every mirror scope."""
        op = "notes_clear"
        key, failure = self._key(op, kind)
        if failure is not None:
            return failure
        cleared: list[str] = []
        try:
            for scope in self._mirror_scopes():
                variables = self._workspace.host.get_variables(scope)
                if key not in variables:
                    continue
                del variables[key]
                self._workspace.host.replace_variables(scope, variables)
                cleared.append(str(scope))
        except StoreError as exc:
            return ServiceResult.failure(op, "STORE_ERROR", str(exc), cleared=cleared)
        return ServiceResult(ok=True, op=op, data={"kind": kind, "key": key, "scopes": cleared})

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _key(self, op: str, kind: str) -> tuple[str, None] | tuple[None, ServiceResult]:
        if kind == "quick":
            return self._config.quick_key, None
        if kind == "occ":
            return self._config.occ_key, None
        return None, ServiceResult.failure(
            op, "UNKNOWN_KIND", f"Unknown note kind {kind!r} (expected one of {', '.join(NOTE_KINDS)})"
        )

    def _mirror_scopes(self) -> list[ScopeKey]:
        scopes: list[ScopeKey] = []
        for scope_type in self._config.mirror_scopes:
            if scope_type == ScopeType.SCRIPT:
                scopes.append(ScopeKey(type=scope_type, script_id=self._config.script_id))
            else:
                scopes.append(ScopeKey(type=scope_type))
        return scopes
