"""Locating varsync.toml.

An explicit ``VARSYNC_CONFIG`` path is authoritative: when it names a
missing file, no config is used at all. Otherwise the nearest
``varsync.toml`` in the start directory or one of its ancestors applies.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "varsync.toml"
CONFIG_ENV_VAR = "VARSYNC_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Path of the config governing *start* (default: cwd), or None."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        explicit = Path(override)
        return explicit if explicit.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
