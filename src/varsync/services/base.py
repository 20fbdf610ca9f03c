"""BaseService — foundation for all varsync services.

Every service receives a :class:`~varsync.services.workspace.Workspace` at
construction time; it provides the host store, the plugin hooks and the
shared sync sessions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from varsync.services.workspace import Workspace


class BaseService:
    """Base for service-layer classes.

    Usage::

        class StateService(BaseService):
            def show(self, schema: str, scope: ScopeKey) -> ServiceResult:
                with self._workspace.registry.acquire(scope, validator) as session:
                    ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace
