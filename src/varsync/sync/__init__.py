"""Sync layer — reactive cell, sync engine and the session registry.

Depends on domain and infrastructure. The engine owns the only path
between a cell and the store; consumers go through the cell.
"""

from varsync.sync.cell import ReactiveCell, deep_equal
from varsync.sync.engine import DEFAULT_POLL_INTERVAL, SyncEngine
from varsync.sync.registry import SessionRegistry, SyncSession

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "ReactiveCell",
    "SessionRegistry",
    "SyncEngine",
    "SyncSession",
    "deep_equal",
]
