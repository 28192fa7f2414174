"""DuckDB connection and schema init."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import duckdb

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

SCHEMA_SQL = """
-- Sequences for insertion order
CREATE SEQUENCE IF NOT EXISTS member_seq START 1;
CREATE SEQUENCE IF NOT EXISTS list_seq START 1;

-- Hash records: one row per (key, field)
CREATE TABLE IF NOT EXISTS records (
    key             VARCHAR NOT NULL,
    field           VARCHAR NOT NULL,
    value           VARCHAR NOT NULL,
    PRIMARY KEY (key, field)
);

-- Membership sets (market index, per-market bet index, global bet index)
CREATE TABLE IF NOT EXISTS set_members (
    key             VARCHAR NOT NULL,
    member          VARCHAR NOT NULL,
    seq             BIGINT NOT NULL DEFAULT nextval('member_seq'),
    PRIMARY KEY (key, member)
);

-- Append-only lists (frame interaction log)
CREATE TABLE IF NOT EXISTS list_items (
    id              BIGINT PRIMARY KEY DEFAULT nextval('list_seq'),
    key             VARCHAR NOT NULL,
    value           VARCHAR NOT NULL
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager.
    ":memory:" opens a throwaway in-process database."""
    if str(db_path) == ":memory:":
        return duckdb.connect(":memory:")
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables and sequences if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise
