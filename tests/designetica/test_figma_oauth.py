"""Tests for designetica.integrations.figma_oauth."""

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from designetica.integrations.figma_oauth import (
    FIGMA_TOKEN_URL,
    FigmaOAuthClient,
    OAuthError,
    OAuthNotConfiguredError,
    OAuthState,
    OAuthTokenSet,
    is_placeholder,
)

from tests.conftest import TEST_REDIRECT_URI

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_client(handler=None, **kwargs) -> FigmaOAuthClient:
    transport = httpx.MockTransport(handler) if handler else None
    params = {
        "client_id": "test-client-id-123",
        "client_secret": "test-client-secret-456",
        "redirect_uri": TEST_REDIRECT_URI,
        "transport": transport,
        "clock": lambda: NOW,
    }
    params.update(kwargs)
    return FigmaOAuthClient(**params)


def token(expires_at: datetime) -> OAuthTokenSet:
    return OAuthTokenSet(access_token="tok", expires_in=3600, expires_at=expires_at)


class TestConfiguration:

    @pytest.mark.parametrize("value,expected", [
        (None, True),
        ("", True),
        ("   ", True),
        ("your-client-id", True),
        ("<client secret>", True),
        ("placeholder", True),
        ("abc123", False),
    ])
    def test_is_placeholder(self, value, expected):
        assert is_placeholder(value) is expected

    def test_not_configured_state(self):
        client = make_client(client_id="your-client-id")
        assert client.is_configured is False
        assert client.state_of(None) == OAuthState.NOT_CONFIGURED

    def test_authorization_url_requires_config(self):
        with pytest.raises(OAuthNotConfiguredError):
            make_client(client_secret="").authorization_url("s")

    @pytest.mark.asyncio
    async def test_exchange_not_attempted_without_config(self):
        calls = []
        client = make_client(lambda r: calls.append(r), client_id="")
        with pytest.raises(OAuthNotConfiguredError):
            await client.exchange_code("code")
        assert calls == []


class TestStates:

    def test_auth_required_without_token(self):
        assert make_client().state_of(None) == OAuthState.AUTH_REQUIRED

    def test_valid_and_expired(self):
        client = make_client()
        assert client.state_of(token(NOW + timedelta(seconds=1))) == OAuthState.VALID
        assert client.state_of(token(NOW - timedelta(seconds=1))) == OAuthState.EXPIRED

    def test_state_accepted_once(self):
        client = make_client()
        state = client.new_state()
        assert client.consume_state(state) is True
        assert client.consume_state(state) is False
        assert client.consume_state("forged") is False
        assert client.consume_state(None) is False

    def test_state_expires(self):
        now = [NOW]
        client = make_client(clock=lambda: now[0], state_ttl=600)
        stale = client.new_state()
        now[0] = NOW + timedelta(seconds=600)
        assert client.consume_state(stale) is False
        assert client.pending_states == 0

    def test_expired_states_pruned_on_issue(self):
        now = [NOW]
        client = make_client(clock=lambda: now[0], state_ttl=600)
        for _ in range(5):
            client.new_state()
        now[0] = NOW + timedelta(minutes=11)
        fresh = client.new_state()
        assert client.pending_states == 1
        assert client.consume_state(fresh) is True

    def test_pending_states_capped(self):
        client = make_client(max_pending_states=3)
        first = client.new_state()
        for _ in range(10_000):
            client.new_state()
        assert client.pending_states == 3
        assert client.consume_state(first) is False


class TestAuthorizationUrl:

    def test_query_parameters(self):
        url = make_client().authorization_url("state-xyz")
        parsed = urlparse(url)
        query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://www.figma.com/oauth"
        assert query == {
            "client_id": "test-client-id-123",
            "redirect_uri": TEST_REDIRECT_URI,
            "scope": "file_read",
            "state": "state-xyz",
            "response_type": "code",
        }


class TestExchangeCode:

    @pytest.mark.asyncio
    async def test_success(self, oauth_client, token_requests):
        oauth_client._clock = lambda: NOW
        result = await oauth_client.exchange_code("auth-code-1")

        assert result.access_token == "figd_oauth_access_token_0123456789abcdef"
        assert result.expires_at == NOW + timedelta(seconds=7776000)
        assert result.user_id == "42"
        assert result.scope == "file_read"

        request = token_requests[0]
        assert str(request.url) == FIGMA_TOKEN_URL
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        assert form["code"] == "auth-code-1"
        assert form["grant_type"] == "authorization_code"
        assert form["client_secret"] == "test-client-secret-456"

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = make_client(lambda r: httpx.Response(400, text="invalid_grant"))
        with pytest.raises(OAuthError, match="returned 400"):
            await client.exchange_code("bad")

    @pytest.mark.asyncio
    async def test_missing_access_token(self):
        client = make_client(lambda r: httpx.Response(200, json={"error": "nope"}))
        with pytest.raises(OAuthError, match="access_token"):
            await client.exchange_code("code")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = make_client(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(OAuthError, match="invalid JSON"):
            await client.exchange_code("code")

    @pytest.mark.asyncio
    async def test_timeout_is_bounded_and_reported(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = make_client(handler, timeout=15)
        with pytest.raises(OAuthError, match="timed out after 15s"):
            await client.exchange_code("code")


class TestDiagnostics:

    def test_secrets_masked(self):
        diag = make_client().diagnostics()
        assert diag["configured"] is True
        assert diag["clientId"] == "test-c***"
        assert diag["clientSecret"] == "test-c***"
        assert "456" not in str(diag)
        assert diag["callbackMatches"] is True

    def test_callback_mismatch(self):
        diag = make_client(redirect_uri="http://localhost:3000/callback").diagnostics()
        assert diag["callbackMatches"] is False
