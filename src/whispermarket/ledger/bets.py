"""Bet ledger - validate and record bets, keep pool totals in step with them."""

from __future__ import annotations

from typing import Any

import structlog

from whispermarket.errors import AccessDenied, MarketClosed, MarketExpired, ValidationError
from whispermarket.ledger.access import is_permitted, normalize_identity
from whispermarket.ledger.registry import MarketRegistry, new_id
from whispermarket.models import Bet, Position
from whispermarket.storage.base import BETS_INDEX, bet_key, market_bets_key, market_key

log = structlog.get_logger(__name__)


def parse_amount(raw: Any) -> int:
    """Positive integer amount in wei, from an int or a base-10 digit string."""
    if isinstance(raw, bool):
        raise ValidationError("amount must be a positive integer")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isdigit() and raw.strip().isascii():
        value = int(raw.strip())
    else:
        raise ValidationError("amount must be a positive integer")
    if value <= 0:
        raise ValidationError("amount must be a positive integer")
    return value


class BetLedger:
    """Bets as hash records under bet:{id}, indexed per market and globally."""

    def __init__(self, registry: MarketRegistry) -> None:
        self.registry = registry
        self.store = registry.store

    def place_bet(self, market_id: str | None, bettor: str | None, outcome: bool | None, amount: Any) -> Bet:
        if not market_id or not bettor or outcome is None or amount is None or amount == "":
            raise ValidationError("Missing required fields: marketId, bettor, outcome, amount")
        if not isinstance(outcome, bool):
            raise ValidationError("outcome must be a boolean")

        # Checks and writes share one atomic scope: a concurrent resolve or bet
        # cannot slip in between them.
        with self.store.atomic():
            market = self.registry.get(market_id)
            if market.resolved:
                raise MarketClosed(f"Market is already resolved: {market_id}")
            now = self.registry.clock()
            if market.expires_at <= now:
                raise MarketExpired(f"Market has expired: {market_id}")
            if not is_permitted(market, bettor):
                raise AccessDenied(f"No access to private market: {market_id}")
            value = parse_amount(amount)

            bet = Bet(
                id=new_id("bet", now),
                market_id=market_id,
                bettor=bettor,
                outcome=outcome,
                amount=value,
                timestamp=now,
            )
            pool_field = "totalYesAmount" if outcome else "totalNoAmount"
            new_total = self.store.increment_field(market_key(market_id), pool_field, value)
            self.store.set_fields(bet_key(bet.id), bet.to_fields())
            self.store.add_to_set(market_bets_key(market_id), bet.id)
            self.store.add_to_set(BETS_INDEX, bet.id)
        log.info(
            "bet_placed",
            market_id=market_id,
            bet_id=bet.id,
            bettor=bettor,
            outcome=outcome,
            amount=str(value),
            pool_total=str(new_total),
        )
        return bet

    def find(self, bet_id: str) -> Bet | None:
        fields = self.store.get_record(bet_key(bet_id))
        if not fields:
            return None
        return Bet.from_fields(fields, bet_id=bet_id)

    def list_bets(self, market_id: str | None = None, bettor: str | None = None) -> list[Bet]:
        """Bets matching every supplied filter. A market filter reads only that market's index."""
        index = market_bets_key(market_id) if market_id else BETS_INDEX
        wanted = normalize_identity(bettor) if bettor else None
        bets = []
        for bet_id in self.store.set_members(index):
            bet = self.find(bet_id)
            if bet is None:
                continue
            if wanted and normalize_identity(bet.bettor) != wanted:
                continue
            bets.append(bet)
        return bets

    def position(self, market_id: str, bettor: str) -> Position:
        """Stake per side for one bettor, and whether it includes the winning side."""
        market = self.registry.get(market_id)
        wanted = normalize_identity(bettor)
        yes_amount = no_amount = count = 0
        for bet in self.list_bets(market_id=market_id):
            if normalize_identity(bet.bettor) != wanted:
                continue
            count += 1
            if bet.outcome:
                yes_amount += bet.amount
            else:
                no_amount += bet.amount
        winning = market.resolved and (yes_amount if market.outcome else no_amount) > 0
        return Position(
            market_id=market_id,
            bettor=bettor,
            yes_amount=yes_amount,
            no_amount=no_amount,
            bet_count=count,
            resolved=market.resolved,
            winning=winning,
        )
