"""Shared CLI helpers: open the configured store and report ledger errors."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from whispermarket.errors import LedgerError
from whispermarket.ledger import BetLedger, MarketRegistry
from whispermarket.storage import open_store


@contextmanager
def ledger(ctx: typer.Context) -> Iterator[BetLedger]:
    """Yield a BetLedger (its registry at .registry); LedgerError exits with status 1."""
    settings = ctx.obj["settings"]
    store = open_store(settings)
    try:
        yield BetLedger(MarketRegistry(store))
    except LedgerError as e:
        typer.echo(f"Error ({e.code}): {e.message}", err=True)
        raise typer.Exit(1) from e
    finally:
        store.close()
