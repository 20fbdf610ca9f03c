"""Exception hierarchy for varsync.

Schema validation failures are not exceptions: they travel as
:class:`~varsync.domain.validation.ValidationResult` values. Only store
failures, broken schema declarations and use-after-teardown raise.
"""

from __future__ import annotations

from typing import Any


class VarsyncError(Exception):
    """Base class for all varsync errors."""


class StoreError(VarsyncError):
    """A host variable store operation failed."""

    def __init__(self, message: str, *, scope: Any = None) -> None:
        super().__init__(message)
        self.scope = scope


class StoreReadError(StoreError):
    """Reading a scope from the host store failed."""


class StoreWriteError(StoreError):
    """Writing a scope to the host store failed."""


class SchemaDefinitionError(VarsyncError):
    """A schema declaration is unusable (bad field spec, no valid defaults)."""


class SessionDestroyedError(VarsyncError):
    """A sync session was used after teardown."""
