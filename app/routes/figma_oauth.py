"""Figma OAuth2 endpoints.

- GET /api/figmaOAuthStart        redirect to Figma (or JSON with auth_url)
- GET /api/figmaOAuthCallback     exchange the code, store the token, HTML page
- GET /api/figmaOAuthStatus       configured / authorized / expired
- GET /api/figmaOAuthDiagnostics  masked configuration for troubleshooting

When client credentials are missing every endpoint except diagnostics
answers 503 and points at the manual-token alternative.
"""

from __future__ import annotations

import logging
from html import escape
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.dependencies import get_oauth_client
from app.repositories.oauth_token import OAuthTokenRepository
from designetica.integrations.figma_oauth import (
    FigmaOAuthClient,
    OAuthError,
    OAuthState,
)

logger = logging.getLogger("designetica.routes.figma_oauth")

router = APIRouter(prefix="/api", tags=["figma-oauth"])

NOT_CONFIGURED_MESSAGE = (
    "Figma OAuth is not configured. Set FIGMA_CLIENT_ID and FIGMA_CLIENT_SECRET, "
    "or use a personal access token (FIGMA_ACCESS_TOKEN) instead."
)


def _not_configured() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "status": OAuthState.NOT_CONFIGURED.value,
            "error": NOT_CONFIGURED_MESSAGE,
            "alternative": "manual_token",
        },
    )


def _html_page(title: str, body: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        status_code=status_code,
        content=f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{escape(title)}</title></head>
<body style="font-family:'Segoe UI',sans-serif;padding:32px;">
  <h1>{escape(title)}</h1>
  {body}
</body>
</html>""",
    )


def _wants_json(request: Request, fmt: Optional[str]) -> bool:
    if fmt == "json":
        return True
    return "application/json" in request.headers.get("accept", "")


@router.get("/figmaOAuthStart")
async def figma_oauth_start(
    request: Request,
    format: Optional[str] = None,
    oauth: FigmaOAuthClient = Depends(get_oauth_client),
    session: AsyncSession = Depends(get_session),
):
    if not oauth.is_configured:
        return _not_configured()

    token = await OAuthTokenRepository(session).get_latest()
    if oauth.state_of(token) == OAuthState.VALID:
        return {"status": "already_authorized", "expires_at": token.expires_at.isoformat()}

    state = oauth.new_state()
    auth_url = oauth.authorization_url(state)
    logger.info("figma_oauth_start: AUTH_REQUIRED, redirecting to Figma")
    if _wants_json(request, format):
        return {
            "status": "authorization_required",
            "auth_url": auth_url,
            "redirect_uri": oauth.redirect_uri,
            "state": state,
        }
    return RedirectResponse(auth_url, status_code=302)


@router.get("/figmaOAuthCallback")
async def figma_oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    oauth: FigmaOAuthClient = Depends(get_oauth_client),
    session: AsyncSession = Depends(get_session),
):
    if not oauth.is_configured:
        return _not_configured()
    if error:
        return _html_page(
            "Figma authorization failed",
            f"<p>Figma returned an error: <code>{escape(error)}</code></p>",
            status_code=400,
        )
    if not code:
        return _html_page(
            "Figma authorization failed",
            "<p>Missing authorization code.</p>",
            status_code=400,
        )
    if not oauth.consume_state(state):
        return _html_page(
            "Figma authorization failed",
            "<p>Unknown or expired state parameter. Start the authorization again.</p>",
            status_code=400,
        )

    try:
        token = await oauth.exchange_code(code)
    except OAuthError as e:
        logger.warning(f"figma_oauth_callback: exchange failed: {e}")
        return _html_page(
            "Figma authorization failed",
            f"<p>{escape(str(e))}</p><p><a href=\"/api/figmaOAuthStart\">Retry authorization</a></p>",
            status_code=502,
        )

    await OAuthTokenRepository(session).save(token)
    logger.info(f"figma_oauth_callback: VALID until {token.expires_at.isoformat()}")
    return _html_page(
        "Figma connected",
        f"<p>Access token: <code>{escape(token.access_token[:20])}...</code></p>"
        f"<p>Expires at {escape(token.expires_at.isoformat())}. You can close this window.</p>",
    )


@router.get("/figmaOAuthStatus")
async def figma_oauth_status(
    oauth: FigmaOAuthClient = Depends(get_oauth_client),
    session: AsyncSession = Depends(get_session),
):
    if not oauth.is_configured:
        return _not_configured()
    token = await OAuthTokenRepository(session).get_latest()
    state = oauth.state_of(token)
    return {
        "configured": True,
        "state": state.value,
        "authorized": state == OAuthState.VALID,
        "expired": state == OAuthState.EXPIRED,
        "expires_at": token.expires_at.isoformat() if token else None,
        "scope": token.scope if token else None,
    }


@router.get("/figmaOAuthDiagnostics")
async def figma_oauth_diagnostics(
    oauth: FigmaOAuthClient = Depends(get_oauth_client),
    session: AsyncSession = Depends(get_session),
):
    token = await OAuthTokenRepository(session).get_latest()
    return {**oauth.diagnostics(), "state": oauth.state_of(token).value}
