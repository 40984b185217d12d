"""Figma OAuth2 authorization-code flow.

States:
    NOT_CONFIGURED -> AUTH_REQUIRED -> CALLBACK_RECEIVED -> TOKEN_EXCHANGED -> VALID | EXPIRED

NOT_CONFIGURED means the client id/secret are missing or still placeholder
values; no network round-trip is attempted in that state. Expiry is a pure
time comparison made before each use. There is no background refresh.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import httpx

from designetica import config
from designetica.logging_config import mask_secret
from designetica.settings import (
    FIGMA_OAUTH_MAX_PENDING_STATES,
    FIGMA_OAUTH_STATE_TTL,
    FIGMA_OAUTH_TIMEOUT,
)

logger = logging.getLogger("designetica.integrations.figma_oauth")

FIGMA_AUTHORIZE_URL = "https://www.figma.com/oauth"
FIGMA_TOKEN_URL = "https://www.figma.com/api/oauth/token"
DEFAULT_SCOPE = "file_read"
CALLBACK_PATH = "/api/figmaOAuthCallback"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_placeholder(value: Optional[str]) -> bool:
    if not value or not value.strip():
        return True
    v = value.strip().lower()
    return v in {"placeholder", "changeme", "xxx"} or v.startswith(("your-", "your_", "<"))


class OAuthState(str, Enum):
    NOT_CONFIGURED = "NOT_CONFIGURED"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    CALLBACK_RECEIVED = "CALLBACK_RECEIVED"
    TOKEN_EXCHANGED = "TOKEN_EXCHANGED"
    VALID = "VALID"
    EXPIRED = "EXPIRED"


class OAuthError(Exception):
    """Raised when the authorization-code exchange fails."""


class OAuthNotConfiguredError(OAuthError):
    """Raised when client credentials are missing or placeholders."""


@dataclass(frozen=True)
class OAuthTokenSet:
    access_token: str
    expires_in: int
    expires_at: datetime
    scope: str = DEFAULT_SCOPE
    refresh_token: Optional[str] = None
    user_id: Optional[str] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any], now: Optional[datetime] = None) -> "OAuthTokenSet":
        now = now or _utcnow()
        expires_in = int(data.get("expires_in") or 0)
        return cls(
            access_token=data["access_token"],
            expires_in=expires_in,
            expires_at=now + timedelta(seconds=expires_in),
            scope=data.get("scope") or DEFAULT_SCOPE,
            refresh_token=data.get("refresh_token"),
            user_id=str(data["user_id"]) if data.get("user_id") is not None else None,
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or _utcnow()) > self.expires_at


class FigmaOAuthClient:
    """Authorization-code flow against Figma's identity endpoints.

    Args:
        client_id / client_secret / redirect_uri: OAuth app settings (env by default).
        timeout: Bound on the token exchange request, in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
        clock: Returns the current UTC datetime.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        timeout: float = FIGMA_OAUTH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = _utcnow,
        state_ttl: float = FIGMA_OAUTH_STATE_TTL,
        max_pending_states: int = FIGMA_OAUTH_MAX_PENDING_STATES,
    ):
        self.client_id = config.FIGMA_CLIENT_ID if client_id is None else client_id
        self.client_secret = config.FIGMA_CLIENT_SECRET if client_secret is None else client_secret
        self.redirect_uri = redirect_uri or config.FIGMA_REDIRECT_URI
        self.timeout = timeout
        self._transport = transport
        self._clock = clock
        self._state_ttl = timedelta(seconds=state_ttl)
        self._max_pending_states = max(1, max_pending_states)
        # state -> issue time, in issue order
        self._pending_states: Dict[str, datetime] = {}

    @property
    def is_configured(self) -> bool:
        return not (is_placeholder(self.client_id) or is_placeholder(self.client_secret))

    def state_of(self, token: Optional[OAuthTokenSet]) -> OAuthState:
        """Current flow state given the stored token (if any)."""
        if not self.is_configured:
            return OAuthState.NOT_CONFIGURED
        if token is None:
            return OAuthState.AUTH_REQUIRED
        if token.is_expired(self._clock()):
            return OAuthState.EXPIRED
        return OAuthState.VALID

    def _require_configured(self) -> None:
        if not self.is_configured:
            raise OAuthNotConfiguredError(
                "Figma OAuth is not configured (FIGMA_CLIENT_ID / FIGMA_CLIENT_SECRET). "
                "Use a personal access token via FIGMA_ACCESS_TOKEN instead."
            )

    @property
    def pending_states(self) -> int:
        return len(self._pending_states)

    def _prune_states(self, now: datetime) -> None:
        cutoff = now - self._state_ttl
        expired = [s for s, issued in self._pending_states.items() if issued <= cutoff]
        for s in expired:
            del self._pending_states[s]

    def new_state(self) -> str:
        now = self._clock()
        self._prune_states(now)
        while len(self._pending_states) >= self._max_pending_states:
            del self._pending_states[next(iter(self._pending_states))]
        state = secrets.token_urlsafe(16)
        self._pending_states[state] = now
        return state

    def consume_state(self, state: Optional[str]) -> bool:
        """Accept an unexpired callback state exactly once."""
        self._prune_states(self._clock())
        if not state or state not in self._pending_states:
            return False
        del self._pending_states[state]
        return True

    def authorization_url(self, state: str) -> str:
        self._require_configured()
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": DEFAULT_SCOPE,
            "state": state,
            "response_type": "code",
        }
        return f"{FIGMA_AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> OAuthTokenSet:
        """POST the authorization code to the token endpoint.

        Raises:
            OAuthNotConfiguredError: credentials missing.
            OAuthError: timeout, HTTP error, or a response without a token.
        """
        self._require_configured()
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "code": code,
            "grant_type": "authorization_code",
        }
        logger.info(f"exchange_code: CALLBACK_RECEIVED, client={mask_secret(self.client_id)}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(FIGMA_TOKEN_URL, data=form)
        except httpx.TimeoutException as e:
            raise OAuthError(
                f"Figma token exchange timed out after {self.timeout:g}s; restart the authorization flow"
            ) from e
        except httpx.HTTPError as e:
            raise OAuthError(f"Figma token exchange failed: {e}") from e

        if resp.status_code != 200:
            raise OAuthError(f"Figma token exchange returned {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as e:
            raise OAuthError("Figma token endpoint returned invalid JSON") from e
        if not isinstance(data, dict) or not data.get("access_token"):
            raise OAuthError("Figma token endpoint response did not include an access_token")

        token = OAuthTokenSet.from_response(data, self._clock())
        logger.info(
            f"exchange_code: TOKEN_EXCHANGED, token={mask_secret(token.access_token)}, "
            f"expires_at={token.expires_at.isoformat()}"
        )
        return token

    def diagnostics(self) -> Dict[str, Any]:
        return {
            "configured": self.is_configured,
            "clientId": mask_secret(self.client_id),
            "clientSecret": mask_secret(self.client_secret),
            "redirectUri": self.redirect_uri,
            "callbackMatches": self.redirect_uri.rstrip("/").endswith(CALLBACK_PATH),
            "authorizeUrl": FIGMA_AUTHORIZE_URL,
            "tokenUrl": FIGMA_TOKEN_URL,
            "scope": DEFAULT_SCOPE,
        }
