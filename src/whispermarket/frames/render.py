"""Frame HTML documents (fc:frame meta tags) rendered from Jinja2 templates."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote, urlencode

from jinja2 import Environment, PackageLoader

TITLE = "Whisper Network Prediction Market"
HOME_BUTTONS = ("View Market", "Bet Yes", "Bet No", "More Markets")

_env = Environment(loader=PackageLoader("whispermarket.frames", "templates"), autoescape=True)


def _render(**context: Any) -> str:
    return _env.get_template("frame.html.j2").render(**context)


def og_image_url(base_url: str, market_id: str | None) -> str:
    return f"{base_url}/api/og?{urlencode({'marketId': market_id or ''})}"


def market_url(base_url: str, market_id: str, **params: str) -> str:
    url = f"{base_url}/market/{quote(market_id, safe='')}"
    if params:
        url += "?" + urlencode(params)
    return url


def home_frame(base_url: str, featured_id: str | None, page: int | None = None) -> str:
    """Featured-market frame with the four navigation buttons. State is carried when page is set."""
    state = None
    if page is not None:
        state = json.dumps({"page": page, "marketId": featured_id}, separators=(",", ":"))
    return _render(
        image_url=og_image_url(base_url, featured_id),
        buttons=HOME_BUTTONS,
        post_url=f"{base_url}/api/frame",
        state=state,
        heading=TITLE,
    )


def redirect_frame(base_url: str, target_url: str, image: str, button: str, heading: str) -> str:
    return _render(
        image_url=f"{base_url}/{image}",
        buttons=(button,),
        redirect_url=target_url,
        heading=heading,
    )


def error_frame(base_url: str, heading: str) -> str:
    return _render(
        image_url=f"{base_url}/error.png",
        buttons=("Try Again",),
        post_url=f"{base_url}/api/frame",
        heading=heading,
    )
