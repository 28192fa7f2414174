"""Social-feed frame endpoints and the interaction webhook."""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse

from whispermarket.frames import FrameAction, FrameService

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["frames"])


def _frames(request: Request) -> FrameService:
    return request.app.state.services.frames


@router.get("/frame", response_class=HTMLResponse)
def frame_initial(request: Request) -> HTMLResponse:
    return HTMLResponse(_frames(request).initial())


@router.post("/frame", response_class=HTMLResponse)
async def frame_action(request: Request) -> HTMLResponse:
    frames = _frames(request)
    try:
        payload = json.loads(await request.body())
        action = FrameAction.from_payload(payload if isinstance(payload, dict) else {})
    except ValueError as e:
        log.warning("frame_bad_request", error=str(e))
        return HTMLResponse(frames.invalid(), status_code=400)
    status_code, html = frames.handle(action)
    return HTMLResponse(html, status_code=status_code)


@router.post("/webhook")
async def webhook(request: Request) -> JSONResponse:
    """Record frame.action events. The signature header must be present; it is not verified."""
    if not request.headers.get("x-farcaster-signature"):
        return JSONResponse(status_code=401, content={"detail": "Missing signature", "code": "unauthorized"})
    try:
        body = json.loads(await request.body())
    except ValueError:
        return JSONResponse(status_code=400, content={"detail": "Invalid JSON body", "code": "validation_error"})
    if not isinstance(body, dict):
        body = {}
    if body.get("type") == "frame.action":
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        _frames(request).record_interaction(
            fid=data.get("fid"),
            button_index=data.get("buttonIndex"),
            cast_id=data.get("castId"),
            input_text=data.get("inputText"),
            timestamp=_frames(request).registry.clock(),
        )
    return JSONResponse(content={"success": True})
