"""Runtime DB compatibility helpers for older SQLite schemas.

These helpers backfill additive schema changes for deployments that still rely
on ``SQLModel.metadata.create_all()`` instead of migrations. ``create_all``
never alters an existing table, so an ``allocation`` table created before
settlement bookkeeping existed only has the status column.
"""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

_ALLOCATION_SETTLEMENT_COLUMNS = {
    "transfer_id": "VARCHAR",
    "status_reason": "VARCHAR",
    "attempts": "INTEGER NOT NULL DEFAULT 0",
    "settled_at": "DATETIME",
}


def ensure_schema_compat(engine: Engine) -> None:
    """Apply additive compatibility upgrades for existing SQLite databases."""
    if engine.dialect.name != "sqlite":
        return

    with engine.begin() as conn:
        _ensure_allocation_settlement_columns(conn)
        _ensure_index(conn, "ix_allocation_cut_id", "allocation", "cut_id")


def _ensure_allocation_settlement_columns(conn: Connection) -> None:
    if not _table_exists(conn, "allocation"):
        return

    for column_name, ddl in _ALLOCATION_SETTLEMENT_COLUMNS.items():
        if not _column_exists(conn, "allocation", column_name):
            conn.execute(text(f"ALTER TABLE allocation ADD COLUMN {column_name} {ddl}"))
            logger.info("Applied compatibility upgrade: added allocation.%s", column_name)


def _table_exists(conn: Connection, table_name: str) -> bool:
    return (
        conn.execute(
            text(
                "SELECT 1 FROM sqlite_master "
                "WHERE type = 'table' AND name = :name LIMIT 1"
            ),
            {"name": table_name},
        ).first()
        is not None
    )


def _column_exists(conn: Connection, table_name: str, column_name: str) -> bool:
    rows = conn.execute(text(f"PRAGMA table_info({table_name})")).fetchall()
    return any(row[1] == column_name for row in rows)


def _ensure_index(
    conn: Connection, index_name: str, table_name: str, column_name: str
) -> None:
    if not _table_exists(conn, table_name):
        return
    exists = conn.execute(
        text(
            "SELECT 1 FROM sqlite_master "
            "WHERE type = 'index' AND name = :name LIMIT 1"
        ),
        {"name": index_name},
    ).first()
    if exists is None:
        conn.execute(text(f"CREATE INDEX {index_name} ON {table_name} ({column_name})"))
