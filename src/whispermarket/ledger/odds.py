"""Implied odds and pool display helpers. Integer arithmetic only."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_EVEN, Decimal

from whispermarket.models import Market

WEI_PER_ETHER = 10**18
_BILLION_ETHER_WEI = 10**27


def probabilities(market: Market) -> tuple[int, int]:
    """(yes %, no %) from pool shares, 50/50 on an empty pool. Yes share rounds down."""
    total = market.total_pool
    if total <= 0:
        return 50, 50
    yes = market.total_yes_amount * 100 // total
    return yes, 100 - yes


def format_amount(wei: int) -> str:
    """Ether amount with two decimals; 1e27 wei and above shown in billions of ETH."""
    if wei >= _BILLION_ETHER_WEI:
        value, suffix = Decimal(wei) / Decimal(_BILLION_ETHER_WEI), "B ETH"
    else:
        value, suffix = Decimal(wei) / Decimal(WEI_PER_ETHER), " ETH"
    return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_EVEN)}{suffix}"


def rank_by_pool(markets: Iterable[Market]) -> list[Market]:
    """Largest total pool first; ties keep input order."""
    return sorted(markets, key=lambda m: m.total_pool, reverse=True)
