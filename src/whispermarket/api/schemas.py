"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from whispermarket.models import Bet, Market, Position


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. not_found, market_closed")


class SuccessResponse(BaseModel):
    success: bool = True


# --- Markets ---
# Request fields are optional so missing ones are reported by the ledger as 400s.
class MarketCreateRequest(_CamelModel):
    question: str | None = None
    description: str | None = None
    creator: str | None = None
    expires_at: int | None = Field(None, description="Betting deadline, ms epoch")
    category: str | None = None
    tags: list[str] | None = None
    visibility: str | None = Field(None, description="public | private | whisper")
    access_list: list[str] | None = Field(None, description="Allowed identities (private markets only)")


class MarketUpdateRequest(_CamelModel):
    resolved: StrictBool | None = None
    outcome: StrictBool | None = None


class OddsResponse(_CamelModel):
    yes_percentage: int
    no_percentage: int
    total_pool: str = Field(..., description="Total staked, wei")
    yes_display: str
    no_display: str


class MarketResponse(BaseModel):
    market: Market


class MarketsListResponse(BaseModel):
    markets: list[Market]


class MarketDetailResponse(BaseModel):
    market: Market
    bets: list[Bet]
    odds: OddsResponse


# --- Bets ---
class BetCreateRequest(_CamelModel):
    market_id: str | None = None
    bettor: str | None = None
    outcome: StrictBool | None = None
    amount: StrictStr | StrictInt | None = Field(None, description="Positive integer amount in wei")


class BetResponse(BaseModel):
    bet: Bet


class BetsListResponse(BaseModel):
    bets: list[Bet]


class PositionResponse(BaseModel):
    position: Position


# --- Contract calls ---
class BetTransactionRequest(_CamelModel):
    market_id: int | str
    outcome: bool
    amount: str = Field(..., description="Ether amount, e.g. 0.01")


class CreateMarketTransactionRequest(_CamelModel):
    question: str
    description: str
    expires_at: int
    category: str
    visibility: str
    access_list: list[str] = Field(default_factory=list)


class ResolveTransactionRequest(_CamelModel):
    market_id: int | str
    outcome: bool


class ClaimTransactionRequest(_CamelModel):
    market_id: int | str
