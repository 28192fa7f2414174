"""Markets subcommand: list, show, create, resolve, delete."""

from __future__ import annotations

import typer

from whispermarket.cli.context import ledger
from whispermarket.ledger.odds import format_amount, probabilities
from whispermarket.ledger.registry import now_ms

app = typer.Typer(help="Create, inspect and resolve markets")

HOUR_MS = 3600 * 1000


def _status(market) -> str:
    if not market.resolved:
        return "open"
    return "resolved:yes" if market.outcome else "resolved:no"


@app.command("list")
def list_markets(
    ctx: typer.Context,
    category: str | None = typer.Option(None, "--category", "-c", help="Filter by category"),
    visibility: str | None = typer.Option(None, "--visibility", help="public | private | whisper"),
    creator: str | None = typer.Option(None, "--creator", help="Filter by creator identity"),
    tag: str | None = typer.Option(None, "--tag", "-t", help="Filter by tag"),
    resolved: bool | None = typer.Option(None, "--resolved/--open", help="Only resolved or only open markets"),
    viewer: str | None = typer.Option(None, "--viewer", help="Hide private markets this identity cannot access"),
) -> None:
    """List markets in the ledger."""
    with ledger(ctx) as bets:
        markets = bets.registry.list_markets(
            category=category,
            visibility=visibility,
            creator=creator,
            resolved=resolved,
            tag=tag,
            viewer=viewer,
        )
        for m in markets:
            yes_pct, _ = probabilities(m)
            typer.echo(
                f"  {m.id}  {m.visibility:<8} {_status(m):<12} {yes_pct:>3}% yes  "
                f"{format_amount(m.total_pool):>14}  {m.question[:60]}"
            )
        typer.echo(f"Total: {len(markets)} markets")


@app.command("show")
def show(ctx: typer.Context, market_id: str = typer.Argument(..., help="Market id")) -> None:
    """Show one market with its odds and bets."""
    with ledger(ctx) as bets:
        m = bets.registry.get(market_id)
        yes_pct, no_pct = probabilities(m)
        typer.echo(f"{m.question}")
        typer.echo(f"  id:          {m.id}")
        typer.echo(f"  description: {m.description}")
        typer.echo(f"  creator:     {m.creator}")
        typer.echo(f"  category:    {m.category}  tags: {', '.join(m.tags) or '-'}")
        typer.echo(f"  visibility:  {m.visibility}")
        if m.access_list is not None:
            typer.echo(f"  access list: {', '.join(m.access_list) or '(nobody)'}")
        typer.echo(f"  expires at:  {m.expires_at}")
        typer.echo(f"  status:      {_status(m)}")
        typer.echo(f"  yes: {format_amount(m.total_yes_amount)} ({yes_pct}%)  no: {format_amount(m.total_no_amount)} ({no_pct}%)")
        for b in bets.list_bets(market_id=market_id):
            side = "yes" if b.outcome else "no"
            typer.echo(f"    {b.id}  {b.bettor}  {side:<3}  {b.amount}")


@app.command("create")
def create(
    ctx: typer.Context,
    question: str = typer.Option(..., "--question", "-q", help="Yes/no question"),
    description: str = typer.Option("", "--description", "-d", help="Resolution criteria"),
    creator: str = typer.Option(..., "--creator", help="Creator identity"),
    category: str = typer.Option("general", "--category", "-c", help="Category"),
    visibility: str = typer.Option("public", "--visibility", help="public | private | whisper"),
    expires_at: int | None = typer.Option(None, "--expires-at", help="Betting deadline, ms epoch"),
    expires_in: float = typer.Option(24.0, "--expires-in", help="Hours from now (ignored with --expires-at)"),
    tag: list[str] = typer.Option([], "--tag", "-t", help="Tag (repeatable)"),
    allow: list[str] = typer.Option([], "--allow", help="Identity on the access list (repeatable, private only)"),
) -> None:
    """Create a market."""
    if expires_at is None:
        expires_at = now_ms() + int(expires_in * HOUR_MS)
    with ledger(ctx) as bets:
        m = bets.registry.create(
            question=question,
            description=description or question,
            creator=creator,
            expires_at=expires_at,
            category=category,
            visibility=visibility,
            tags=tag,
            access_list=allow,
        )
        typer.echo(f"Created market {m.id}")


@app.command("resolve")
def resolve(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Market id"),
    outcome: bool = typer.Option(..., "--yes/--no", help="Winning side"),
) -> None:
    """Resolve a market. Resolution is final."""
    with ledger(ctx) as bets:
        m = bets.registry.resolve(market_id, outcome)
        typer.echo(f"Resolved {m.id}: {'yes' if outcome else 'no'}")


@app.command("delete")
def delete(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Market id"),
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation"),
) -> None:
    """Delete a market and all of its bets."""
    if not force:
        typer.confirm(f"Delete {market_id} and its bets?", abort=True)
    with ledger(ctx) as bets:
        bets.registry.delete(market_id)
        typer.echo(f"Deleted {market_id}")
