"""Ledger store backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from whispermarket.storage.base import LedgerStore
from whispermarket.storage.memory import InMemoryLedgerStore

if TYPE_CHECKING:
    from whispermarket.config import Settings


def open_store(settings: Settings) -> LedgerStore:
    """Open the store backend named in [storage] backend."""
    if settings.store_backend == "memory":
        return InMemoryLedgerStore()
    if settings.store_backend == "duckdb":
        from whispermarket.storage.duck import DuckDBLedgerStore

        return DuckDBLedgerStore.open(settings.db_path)
    raise ValueError(f"Unknown storage backend: {settings.store_backend!r}")


__all__ = ["LedgerStore", "InMemoryLedgerStore", "open_store"]
