"""Login routes for the local shell.

Endpoints
~~~~~~~~~
* ``GET /auth/login`` — redirect the browser to the provider consent page
* ``GET /auth/deeplink?uri=...`` — hand a captured redirect URI to the session manager
* ``GET /session`` — whether a session is stored
* ``DELETE /session`` — forget the stored session
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from emotion_wellbeing.auth import AuthManager
from emotion_wellbeing.exceptions import AuthError

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["auth"])


def _auth(request: Request) -> AuthManager:
    return request.app.state.pipeline.auth


@router.get("/auth/login", summary="Start the OAuth flow")
async def login(request: Request):
    try:
        url = await _auth(request).authorization_url()
    except AuthError as exc:
        raise HTTPException(502, str(exc)) from exc
    return RedirectResponse(url)


@router.get("/auth/deeplink", summary="Complete login from a redirect URI")
async def deeplink(request: Request, uri: str = Query(..., description="Full callback URI")):
    outcome = await _auth(request).complete_login(uri)
    if not outcome.success:
        raise HTTPException(400, outcome.reason)
    return {"success": True}


@router.get("/session", summary="Session status")
async def session_status(request: Request):
    session = await _auth(request).get_session()
    return {"authenticated": session is not None}


@router.delete("/session", summary="Log out")
async def logout(request: Request):
    removed = await _auth(request).clear_session()
    return {"cleared": removed}
