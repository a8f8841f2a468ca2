"""Create kv_store table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the key-value table that holds every profile and note document.
How:   TEXT primary key plus a JSONB value column. On PostgreSQL a second
       text_pattern_ops index serves `LIKE 'user:<id>:note:%'` prefix scans
       regardless of the database collation. The table name follows
       KV_TABLE_NAME at the time the migration runs.

Rollback: downgrade() drops the table and all stored documents.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from jotter.config import settings

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def names():
    """(table, prefix index) for the configured KV_TABLE_NAME."""
    table = settings.kv_table_name
    return table, f"idx_{table}_key_prefix"


def upgrade() -> None:
    table, index = names()
    op.create_table(
        table,
        sa.Column(
            "key",
            sa.Text(),
            nullable=False,
            comment="Namespaced key, e.g. user:<id>:note:<id>",
        ),
        sa.Column(
            "value",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
            comment="JSON document stored under the key",
        ),
        sa.PrimaryKeyConstraint("key"),
    )

    if op.get_bind().dialect.name == "postgresql":
        op.create_index(
            index,
            table,
            [sa.text("key text_pattern_ops")],
        )


def downgrade() -> None:
    """Drop the table. Destructive: every profile and note is lost."""
    table, index = names()
    if op.get_bind().dialect.name == "postgresql":
        op.drop_index(index, table_name=table)
    op.drop_table(table)
