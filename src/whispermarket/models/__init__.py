"""Canonical schema (Pydantic) - Market, Bet, Position."""

from whispermarket.models.bet import Bet, Position
from whispermarket.models.market import VISIBILITIES, Market, Visibility

__all__ = [
    "Market",
    "Visibility",
    "VISIBILITIES",
    "Bet",
    "Position",
]
