"""FastAPI backend: markets, bets, contract calls, frames."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from whispermarket.api import frames
from whispermarket.api.schemas import (
    BetCreateRequest,
    BetResponse,
    BetsListResponse,
    BetTransactionRequest,
    ClaimTransactionRequest,
    CreateMarketTransactionRequest,
    ErrorResponse,
    HealthResponse,
    MarketCreateRequest,
    MarketDetailResponse,
    MarketResponse,
    MarketsListResponse,
    MarketUpdateRequest,
    OddsResponse,
    PositionResponse,
    ResolveTransactionRequest,
    SuccessResponse,
)
from whispermarket.chain import ContractCallBuilder
from whispermarket.config import Settings, configure_logging, get_settings
from whispermarket.errors import LedgerError, StoreError, ValidationError
from whispermarket.frames import FrameService
from whispermarket.ledger import BetLedger, MarketRegistry, now_ms
from whispermarket.ledger.odds import format_amount, probabilities
from whispermarket.ledger.registry import Clock
from whispermarket.models import Market
from whispermarket.storage import LedgerStore, open_store

log = structlog.get_logger(__name__)

# Set by run_api() so the app factory picks up the requested profile.
_config_profile: str | None = None
_config_dir: Path | None = None


@dataclass
class Services:
    """Per-app ledger components sharing one store."""

    store: LedgerStore
    registry: MarketRegistry
    bets: BetLedger
    frames: FrameService
    contracts: ContractCallBuilder


def build_services(store: LedgerStore, settings: Settings, clock: Clock = now_ms) -> Services:
    registry = MarketRegistry(store, clock=clock)
    return Services(
        store=store,
        registry=registry,
        bets=BetLedger(registry),
        frames=FrameService(registry, base_url=settings.base_url, page_size=settings.frame_page_size),
        contracts=ContractCallBuilder(
            settings.contract_address,
            chain_id=settings.chain_id,
            paymaster_url=settings.paymaster_url,
        ),
    )


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def _services(request: Request) -> Services:
    return request.app.state.services


def _odds(market: Market) -> OddsResponse:
    yes_pct, no_pct = probabilities(market)
    return OddsResponse(
        yes_percentage=yes_pct,
        no_percentage=no_pct,
        total_pool=str(market.total_pool),
        yes_display=format_amount(market.total_yes_amount),
        no_display=format_amount(market.total_no_amount),
    )


_ERROR_RESPONSES = {
    400: {"description": "Invalid input or market closed/expired", "model": ErrorResponse},
    403: {"description": "Not on the private market's access list", "model": ErrorResponse},
    404: {"description": "Market not found", "model": ErrorResponse},
}

_TX_ERROR_RESPONSES = {
    400: {"description": "Invalid market id, ether amount or visibility", "model": ErrorResponse},
}


def create_app(
    settings: Settings | None = None,
    store: LedgerStore | None = None,
    clock: Clock = now_ms,
) -> FastAPI:
    """Build the API. Without a store, one is opened from settings at startup and closed at shutdown."""
    settings = settings or get_settings(_config_profile, config_dir=_config_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        opened = None
        if getattr(app.state, "services", None) is None:
            opened = open_store(settings)
            app.state.services = build_services(opened, settings, clock)
        log.info("api_started", backend=settings.store_backend)
        yield
        if opened is not None:
            opened.close()
            app.state.services = None

    app = FastAPI(title="Whisper Market API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.state.services = build_services(store, settings, clock) if store is not None else None

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        if isinstance(exc, StoreError):
            log.error("store_error", path=request.url.path, error=exc.message, exc_info=exc)
            return _error_json(exc.code, "Ledger store unavailable", exc.status_code)
        return _error_json(exc.code, exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request: {where} {first.get('msg', '')}".strip()
        return _error_json(ValidationError.code, message, 400)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/markets", response_model=MarketsListResponse)
    def markets_list(
        request: Request,
        category: str | None = Query(None),
        visibility: str | None = Query(None),
        creator: str | None = Query(None),
        resolved: bool | None = Query(None),
        tag: str | None = Query(None),
        viewer: str | None = Query(None, description="Hide private markets this identity cannot access"),
    ) -> MarketsListResponse:
        """List markets; every supplied filter must match."""
        markets = _services(request).registry.list_markets(
            category=category,
            visibility=visibility,
            creator=creator,
            resolved=resolved,
            tag=tag,
            viewer=viewer,
        )
        return MarketsListResponse(markets=markets)

    @app.post("/markets", response_model=MarketResponse, status_code=201, responses=_ERROR_RESPONSES)
    def markets_create(request: Request, body: MarketCreateRequest) -> MarketResponse:
        market = _services(request).registry.create(
            question=body.question,
            description=body.description,
            creator=body.creator,
            expires_at=body.expires_at,
            category=body.category,
            visibility=body.visibility,
            tags=body.tags,
            access_list=body.access_list,
        )
        return MarketResponse(market=market)

    @app.get("/markets/{market_id}", response_model=MarketDetailResponse, responses=_ERROR_RESPONSES)
    def markets_detail(request: Request, market_id: str) -> MarketDetailResponse:
        """Market with its bets and implied odds."""
        services = _services(request)
        market = services.registry.get(market_id)
        bets = services.bets.list_bets(market_id=market_id)
        return MarketDetailResponse(market=market, bets=bets, odds=_odds(market))

    @app.put("/markets/{market_id}", response_model=MarketResponse, responses=_ERROR_RESPONSES)
    def markets_resolve(request: Request, market_id: str, body: MarketUpdateRequest) -> MarketResponse:
        """Resolve a market. Only {resolved: true, outcome} is accepted."""
        registry = _services(request).registry
        registry.get(market_id)
        if body.resolved is None or body.outcome is None:
            raise ValidationError("Invalid update parameters: resolved and outcome are required")
        if not body.resolved:
            raise ValidationError("Resolution cannot be undone")
        return MarketResponse(market=registry.resolve(market_id, body.outcome))

    @app.delete("/markets/{market_id}", response_model=SuccessResponse, responses=_ERROR_RESPONSES)
    def markets_delete(request: Request, market_id: str) -> SuccessResponse:
        _services(request).registry.delete(market_id)
        return SuccessResponse(success=True)

    @app.get("/markets/{market_id}/position", response_model=PositionResponse, responses=_ERROR_RESPONSES)
    def markets_position(request: Request, market_id: str, bettor: str = Query(...)) -> PositionResponse:
        """Stake per side for one bettor and whether it can claim winnings."""
        return PositionResponse(position=_services(request).bets.position(market_id, bettor))

    @app.get("/bets", response_model=BetsListResponse)
    def bets_list(
        request: Request,
        market_id: str | None = Query(None, alias="marketId"),
        bettor: str | None = Query(None),
    ) -> BetsListResponse:
        return BetsListResponse(bets=_services(request).bets.list_bets(market_id=market_id, bettor=bettor))

    @app.post("/bets", response_model=BetResponse, status_code=201, responses=_ERROR_RESPONSES)
    def bets_place(request: Request, body: BetCreateRequest) -> BetResponse:
        bet = _services(request).bets.place_bet(
            market_id=body.market_id,
            bettor=body.bettor,
            outcome=body.outcome,
            amount=body.amount,
        )
        return BetResponse(bet=bet)

    @app.post("/transactions/bet", responses=_TX_ERROR_RESPONSES)
    def transactions_bet(request: Request, body: BetTransactionRequest) -> dict:
        call = _services(request).contracts.bet(body.market_id, body.outcome, body.amount)
        return call.to_dict()

    @app.post("/transactions/create-market", responses=_TX_ERROR_RESPONSES)
    def transactions_create_market(request: Request, body: CreateMarketTransactionRequest) -> dict:
        call = _services(request).contracts.create_market(
            body.question,
            body.description,
            body.expires_at,
            body.category,
            body.visibility,
            body.access_list,
        )
        return call.to_dict()

    @app.post("/transactions/resolve", responses=_TX_ERROR_RESPONSES)
    def transactions_resolve(request: Request, body: ResolveTransactionRequest) -> dict:
        return _services(request).contracts.resolve_market(body.market_id, body.outcome).to_dict()

    @app.post("/transactions/claim", responses=_TX_ERROR_RESPONSES)
    def transactions_claim(request: Request, body: ClaimTransactionRequest) -> dict:
        return _services(request).contracts.claim_winnings(body.market_id).to_dict()

    app.include_router(frames.router)
    return app


def run_api(
    host: str = "127.0.0.1",
    port: int = 8000,
    profile: str | None = None,
    config_dir: Path | None = None,
) -> None:
    global _config_profile, _config_dir
    _config_profile = profile
    _config_dir = config_dir
    import uvicorn
    uvicorn.run("whispermarket.api.main:create_app", factory=True, host=host, port=port, reload=False)
