"""
Jotter Backend: Key-Value Entry SQLAlchemy Model
=================================================

What:  ORM model for the flat key-value table that stores every profile and note.
How:   One row per key. The value column is JSON (JSONB on PostgreSQL).
Who:   Used by SqlKeyValueStore and by Alembic for schema management.

Key Layout:
    user:<userId>:profile            → User Profile JSON
    user:<userId>:note:<noteId>      → Note JSON

    Prefix scans (`user:<userId>:note:`) hit the primary key index on PostgreSQL
    when the column uses the C collation or text_pattern_ops; the migration
    adds a text_pattern_ops index for that purpose.
"""

from typing import Any

from sqlalchemy import JSON, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from jotter.config import settings
from jotter.database import Base

# JSONB on PostgreSQL, generic JSON (TEXT-backed) elsewhere
JSONValue = JSON().with_variant(JSONB(), "postgresql")


class KeyValueEntry(Base):
    """
    A single key → JSON value mapping.

    Lifecycle:
        Written by `set` (insert or overwrite), removed by `delete`.
        Values are replaced wholesale; there are no partial updates.
    """

    __tablename__ = settings.kv_table_name

    key: Mapped[str] = mapped_column(
        Text,
        primary_key=True,
        comment="Namespaced key, e.g. user:<id>:note:<id>",
    )

    value: Mapped[Any] = mapped_column(
        JSONValue,
        nullable=False,
        comment="JSON document stored under the key",
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key='{self.key}')>"
