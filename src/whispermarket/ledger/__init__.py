"""Market registry, bet ledger, access policy and odds."""

from whispermarket.ledger.access import is_permitted
from whispermarket.ledger.bets import BetLedger, parse_amount
from whispermarket.ledger.registry import MarketRegistry, now_ms

__all__ = ["MarketRegistry", "BetLedger", "is_permitted", "parse_amount", "now_ms"]
