"""Bets subcommand: list, place, position."""

from __future__ import annotations

import typer

from whispermarket.cli.context import ledger

app = typer.Typer(help="Place and list bets")


@app.command("list")
def list_bets(
    ctx: typer.Context,
    market: str | None = typer.Option(None, "--market", "-m", help="Filter by market id"),
    bettor: str | None = typer.Option(None, "--bettor", "-b", help="Filter by bettor identity"),
) -> None:
    """List bets."""
    with ledger(ctx) as bets:
        rows = bets.list_bets(market_id=market, bettor=bettor)
        for b in rows:
            side = "yes" if b.outcome else "no"
            typer.echo(f"  {b.id}  {b.market_id}  {b.bettor}  {side:<3}  {b.amount}")
        typer.echo(f"Total: {len(rows)} bets")


@app.command("place")
def place(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Market id"),
    bettor: str = typer.Option(..., "--bettor", "-b", help="Bettor identity"),
    outcome: bool = typer.Option(..., "--yes/--no", help="Side to back"),
    amount: str = typer.Option(..., "--amount", "-a", help="Stake in wei"),
) -> None:
    """Place a bet on one side of a market."""
    with ledger(ctx) as bets:
        bet = bets.place_bet(market_id, bettor, outcome, amount)
        typer.echo(f"Placed {bet.id}: {bet.amount} on {'yes' if outcome else 'no'}")


@app.command("position")
def position(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Market id"),
    bettor: str = typer.Option(..., "--bettor", "-b", help="Bettor identity"),
) -> None:
    """Show a bettor's stake on each side of a market."""
    with ledger(ctx) as bets:
        p = bets.position(market_id, bettor)
        typer.echo(f"{p.bettor} on {p.market_id}: yes {p.yes_amount}, no {p.no_amount} ({p.bet_count} bets)")
        if p.resolved:
            typer.echo("Can claim winnings." if p.winning else "Nothing to claim.")
