"""DuckDB-backed ledger store."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import TYPE_CHECKING

import duckdb
import structlog

from whispermarket.errors import StoreError
from whispermarket.storage.base import LedgerStore
from whispermarket.storage.db import get_connection, init_schema

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

log = structlog.get_logger(__name__)


class DuckDBLedgerStore(LedgerStore):
    """Records, sets and lists in DuckDB tables. One connection shared behind a re-entrant lock;
    atomic scopes run in a single DuckDB transaction."""

    def __init__(self, conn: DuckDBPyConnection) -> None:
        self._conn = conn
        self._lock = RLock()
        self._depth = 0
        with self._guard():
            init_schema(conn)

    @classmethod
    def open(cls, db_path: str | Path) -> DuckDBLedgerStore:
        try:
            conn = get_connection(db_path)
        except duckdb.Error as e:
            log.error("store_open_failed", db_path=str(db_path), error=str(e))
            raise StoreError(f"Cannot open ledger database {db_path}") from e
        return cls(conn)

    @contextmanager
    def _guard(self) -> Iterator[DuckDBPyConnection]:
        with self._lock:
            try:
                yield self._conn
            except duckdb.Error as e:
                log.error("store_error", error=str(e))
                raise StoreError("Ledger store operation failed") from e

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                with self._guard() as conn:
                    conn.execute("BEGIN TRANSACTION")
            self._depth += 1
            try:
                yield
            except BaseException:
                self._depth -= 1
                if outermost:
                    self._rollback()
                raise
            self._depth -= 1
            if outermost:
                try:
                    with self._guard() as conn:
                        conn.execute("COMMIT")
                except StoreError:
                    self._rollback()
                    raise

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
        except duckdb.Error as e:
            # No open transaction left to roll back (DuckDB aborts some on error).
            log.debug("rollback_skipped", error=str(e))

    def get_record(self, key: str) -> dict[str, str]:
        with self._guard() as conn:
            rows = conn.execute("SELECT field, value FROM records WHERE key = ?", [key]).fetchall()
        return {field: value for field, value in rows}

    def set_fields(self, key: str, fields: dict[str, str]) -> None:
        if not fields:
            return
        with self._guard() as conn:
            conn.executemany(
                """
                INSERT INTO records (key, field, value) VALUES (?, ?, ?)
                ON CONFLICT (key, field) DO UPDATE SET value = excluded.value
                """,
                [[key, field, str(value)] for field, value in fields.items()],
            )

    def increment_field(self, key: str, field: str, amount: int) -> int:
        with self.atomic(), self._guard() as conn:
            row = conn.execute(
                "SELECT value FROM records WHERE key = ? AND field = ?", [key, field]
            ).fetchone()
            try:
                current = int(row[0]) if row and row[0] else 0
            except ValueError as e:
                raise StoreError(f"Field {key}.{field} is not an integer") from e
            new_value = current + amount
            conn.execute(
                """
                INSERT INTO records (key, field, value) VALUES (?, ?, ?)
                ON CONFLICT (key, field) DO UPDATE SET value = excluded.value
                """,
                [key, field, str(new_value)],
            )
        return new_value

    def delete(self, key: str) -> None:
        with self.atomic(), self._guard() as conn:
            conn.execute("DELETE FROM records WHERE key = ?", [key])
            conn.execute("DELETE FROM set_members WHERE key = ?", [key])
            conn.execute("DELETE FROM list_items WHERE key = ?", [key])

    def add_to_set(self, key: str, member: str) -> None:
        with self._guard() as conn:
            conn.execute(
                "INSERT INTO set_members (key, member) VALUES (?, ?) ON CONFLICT DO NOTHING",
                [key, member],
            )

    def remove_from_set(self, key: str, member: str) -> None:
        with self._guard() as conn:
            conn.execute("DELETE FROM set_members WHERE key = ? AND member = ?", [key, member])

    def set_members(self, key: str) -> list[str]:
        with self._guard() as conn:
            rows = conn.execute(
                "SELECT member FROM set_members WHERE key = ? ORDER BY seq", [key]
            ).fetchall()
        return [r[0] for r in rows]

    def append_to_list(self, key: str, value: str) -> None:
        with self._guard() as conn:
            conn.execute("INSERT INTO list_items (key, value) VALUES (?, ?)", [key, value])

    def list_range(self, key: str, start: int = 0, stop: int | None = None) -> list[str]:
        with self._guard() as conn:
            rows = conn.execute(
                "SELECT value FROM list_items WHERE key = ? ORDER BY id DESC", [key]
            ).fetchall()
        return [r[0] for r in rows][start:stop]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
