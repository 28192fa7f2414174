"""Market registry - create, read, filter, resolve and purge markets."""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable, Iterable
from typing import Any

import structlog

from whispermarket.errors import MarketClosed, NotFound, ValidationError
from whispermarket.ledger.access import is_permitted
from whispermarket.models import VISIBILITIES, Market
from whispermarket.storage.base import (
    BETS_INDEX,
    MARKETS_INDEX,
    LedgerStore,
    bet_key,
    market_bets_key,
    market_key,
)

log = structlog.get_logger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id(prefix: str, ts_ms: int) -> str:
    return f"{prefix}_{ts_ms}_{uuid.uuid4().hex[:8]}"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_tags(tags: Iterable[str] | None) -> list[str]:
    """Drop blanks and duplicates, keep first-seen order."""
    out: list[str] = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in out:
            out.append(tag)
    return out


class MarketRegistry:
    """Markets as hash records under market:{id}, indexed by the `markets` set."""

    def __init__(self, store: LedgerStore, clock: Clock = now_ms) -> None:
        self.store = store
        self.clock = clock

    def create(
        self,
        question: str | None,
        description: str | None,
        creator: str | None,
        expires_at: int | None,
        category: str | None,
        visibility: str | None,
        tags: Iterable[str] | None = None,
        access_list: Iterable[str] | None = None,
    ) -> Market:
        required = {
            "question": question,
            "description": description,
            "creator": creator,
            "expiresAt": expires_at,
            "category": category,
            "visibility": visibility,
        }
        missing = [name for name, value in required.items() if _is_blank(value)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if visibility not in VISIBILITIES:
            raise ValidationError(f"Invalid visibility {visibility!r}; expected one of {', '.join(VISIBILITIES)}")
        if isinstance(expires_at, bool) or not isinstance(expires_at, int):
            raise ValidationError("expiresAt must be an integer timestamp in milliseconds")

        created_at = self.clock()
        market = Market(
            id=new_id("market", created_at),
            question=question,
            description=description,
            creator=creator,
            created_at=created_at,
            expires_at=expires_at,
            category=category,
            tags=_clean_tags(tags),
            visibility=visibility,
            access_list=_clean_tags(access_list) if visibility == "private" else None,
        )
        with self.store.atomic():
            self.store.set_fields(market_key(market.id), market.to_fields())
            self.store.add_to_set(MARKETS_INDEX, market.id)
        log.info("market_created", market_id=market.id, creator=creator, visibility=visibility)
        return market

    def find(self, market_id: str) -> Market | None:
        fields = self.store.get_record(market_key(market_id))
        if not fields:
            return None
        return Market.from_fields(fields)

    def get(self, market_id: str) -> Market:
        market = self.find(market_id)
        if market is None:
            raise NotFound(f"Market not found: {market_id}")
        return market

    def list_markets(
        self,
        category: str | None = None,
        visibility: str | None = None,
        creator: str | None = None,
        resolved: bool | None = None,
        tag: str | None = None,
        viewer: str | None = None,
    ) -> list[Market]:
        """Markets matching every supplied filter, in index insertion order."""
        markets = []
        for market_id in self.store.set_members(MARKETS_INDEX):
            market = self.find(market_id)
            if market is None:
                continue  # index entry outlived its record
            if category and market.category != category:
                continue
            if visibility and market.visibility != visibility:
                continue
            if creator and market.creator != creator:
                continue
            if resolved is not None and market.resolved != resolved:
                continue
            if tag and tag not in market.tags:
                continue
            if viewer and not is_permitted(market, viewer):
                continue
            markets.append(market)
        return markets

    def resolve(self, market_id: str, outcome: bool) -> Market:
        """Fix the market outcome. Resolution is terminal; a second call raises MarketClosed."""
        if not isinstance(outcome, bool):
            raise ValidationError("outcome must be a boolean")
        with self.store.atomic():
            market = self.get(market_id)
            if market.resolved:
                raise MarketClosed(f"Market is already resolved: {market_id}")
            market = market.model_copy(update={"resolved": True, "outcome": outcome})
            self.store.set_fields(
                market_key(market_id),
                {"resolved": "true", "outcome": "true" if outcome else "false"},
            )
        log.info("market_resolved", market_id=market_id, outcome=outcome)
        return market

    def delete(self, market_id: str) -> None:
        """Purge the market, its index entry, its bets and its bet index."""
        with self.store.atomic():
            self.get(market_id)
            bet_ids = self.store.set_members(market_bets_key(market_id))
            self.store.delete(market_key(market_id))
            self.store.remove_from_set(MARKETS_INDEX, market_id)
            for bet_id in bet_ids:
                self.store.delete(bet_key(bet_id))
                self.store.remove_from_set(BETS_INDEX, bet_id)
            self.store.delete(market_bets_key(market_id))
        log.info("market_deleted", market_id=market_id, bets_removed=len(bet_ids))
