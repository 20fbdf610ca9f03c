"""SQLite variable host via SQLAlchemy Core."""

from varsync.infrastructure.database.engine import create_db_engine, init_database
from varsync.infrastructure.database.host import SqlVariableHost
from varsync.infrastructure.database.schema import metadata, variables

__all__ = [
    "SqlVariableHost",
    "create_db_engine",
    "init_database",
    "metadata",
    "variables",
]
