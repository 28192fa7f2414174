"""Frame interactions: featured market, paging, redirects into the web app; webhook log."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import structlog

from whispermarket.frames.render import error_frame, home_frame, market_url, redirect_frame
from whispermarket.ledger.odds import rank_by_pool
from whispermarket.ledger.registry import MarketRegistry
from whispermarket.models import Market
from whispermarket.storage.base import FRAME_INTERACTIONS

log = structlog.get_logger(__name__)

BUTTON_VIEW = 1
BUTTON_BET_YES = 2
BUTTON_BET_NO = 3
BUTTON_MORE = 4


@dataclass
class FrameAction:
    """Untrusted frame message fields (signature verification is out of scope)."""

    button_index: int
    fid: int | None = None
    page: int = 1
    market_id: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> FrameAction:
        """Parse {untrustedData: {buttonIndex, fid, state}}. Raises ValueError if unusable."""
        data = payload.get("untrustedData")
        if not isinstance(data, dict):
            raise ValueError("missing untrustedData")
        button = data.get("buttonIndex")
        if isinstance(button, bool) or not isinstance(button, int):
            raise ValueError("buttonIndex must be an integer")
        fid = data.get("fid")
        state = _parse_state(data.get("state"))
        page = state.get("page")
        market_id = state.get("marketId")
        return cls(
            button_index=button,
            fid=fid if isinstance(fid, int) and not isinstance(fid, bool) else None,
            page=page if isinstance(page, int) and not isinstance(page, bool) and page >= 1 else 1,
            market_id=str(market_id) if market_id else None,
        )


def _parse_state(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str) and raw:
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return value if isinstance(value, dict) else {}
    return {}


class FrameService:
    """Serves frame documents; private markets are never featured."""

    def __init__(self, registry: MarketRegistry, base_url: str, page_size: int = 5) -> None:
        self.registry = registry
        self.base_url = base_url
        self.page_size = max(1, page_size)

    def _page(self, page: int) -> list[Market]:
        markets = [m for m in self.registry.list_markets() if m.visibility != "private"]
        start = (page - 1) * self.page_size
        return markets[start : start + self.page_size]

    def _featured(self, page: int) -> Market | None:
        ranked = rank_by_pool(self._page(page))
        return ranked[0] if ranked else None

    def initial(self) -> str:
        featured = self._featured(1)
        return home_frame(self.base_url, featured.id if featured else None)

    def handle(self, action: FrameAction) -> tuple[int, str]:
        """Return (status code, html) for a button press."""
        log.info("frame_action", button=action.button_index, fid=action.fid, page=action.page)
        if action.button_index == BUTTON_MORE:
            next_page = action.page + 1
            if not self._page(next_page):
                next_page = 1  # past the end: wrap around
            featured = self._featured(next_page)
            return 200, home_frame(self.base_url, featured.id if featured else None, page=next_page)

        if action.button_index in (BUTTON_VIEW, BUTTON_BET_YES, BUTTON_BET_NO):
            market_id = action.market_id
            if market_id is None:
                featured = self._featured(action.page)
                market_id = featured.id if featured else None
            if market_id is None:
                return 400, error_frame(self.base_url, "No markets available")
            if action.button_index == BUTTON_VIEW:
                return 200, redirect_frame(
                    self.base_url,
                    market_url(self.base_url, market_id),
                    image="redirect.png",
                    button="Go to App",
                    heading="Redirecting to market details...",
                )
            outcome = "yes" if action.button_index == BUTTON_BET_YES else "no"
            return 200, redirect_frame(
                self.base_url,
                market_url(self.base_url, market_id, action="bet", outcome=outcome),
                image="bet.png",
                button="Place Bet",
                heading="Redirecting to place your bet...",
            )

        return 400, error_frame(self.base_url, "Invalid action")

    def invalid(self) -> str:
        return error_frame(self.base_url, "Invalid request")

    def record_interaction(self, fid: Any, button_index: Any, cast_id: Any, input_text: Any, timestamp: int) -> None:
        """Append a frame.action webhook event to the interaction log (analytics only)."""
        entry = {
            "fid": fid,
            "buttonIndex": button_index,
            "castId": cast_id,
            "inputText": input_text,
            "timestamp": timestamp,
        }
        self.registry.store.append_to_list(FRAME_INTERACTIONS, json.dumps(entry))
        log.info("frame_interaction", fid=fid, button=button_index)
