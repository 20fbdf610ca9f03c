"""SQLAlchemy Core table definitions for the variable database.

One row per resolved scope. ``payload`` is the scope's whole variable
mapping as a JSON object; the sync adapter only edits its own sub-key.
"""

from __future__ import annotations

from sqlalchemy import Column, Index, Integer, MetaData, Table, Text

metadata = MetaData()

variables = Table(
    "variables",
    metadata,
    Column("store_id", Text, primary_key=True),
    Column("scope_type", Text, nullable=False),
    Column("message_id", Integer),  # message scopes only, always absolute
    Column("payload", Text, nullable=False),  # JSON object
    Column("modified", Text, nullable=False),
    Index("ix_variables_scope_type", "scope_type", "message_id"),
)
