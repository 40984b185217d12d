"""Root conftest for API and repository tests.

Provides:
- In-memory SQLite database (replaces production engine)
- A WireframePipeline backed by a mocked Azure OpenAI client
- A FigmaOAuthClient with test credentials and a mock token endpoint
- FastAPI AsyncClient wired to all of the above
"""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

import app.database as db_module
from app.database import Base

# Import all ORM models so they register with Base.metadata
import app.models.db  # noqa: F401

from designetica.generation.invoker import AIInvoker, ModelConfig
from designetica.generation.pipeline import WireframePipeline
from designetica.integrations.figma_oauth import FigmaOAuthClient


# ---------------------------------------------------------------------------
# Shared sample data
# ---------------------------------------------------------------------------

SAMPLE_AI_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Contact form</title>
  <style>body { font-family: 'Segoe UI', sans-serif; } .card { padding: 24px; }</style>
</head>
<body>
  <header><nav><a href="#">Home</a><a href="#">Docs</a></nav></header>
  <main>
    <section class="card">
      <h1>Contact us</h1>
      <p>Fill in the contact form below and our team will get back to you shortly.</p>
      <form>
        <label for="name">Name</label><input id="name" type="text">
        <label for="email">Email</label><input id="email" type="email">
        <label for="msg">Message</label><textarea id="msg"></textarea>
        <button type="submit">Send message</button>
      </form>
    </section>
  </main>
  <footer><p>Copyright notice for this contact form wireframe.</p></footer>
</body>
</html>"""

TEST_REDIRECT_URI = "http://localhost:7071/api/figmaOAuthCallback"


def make_completion(content):
    """Build an object shaped like an openai ChatCompletion."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(total_tokens=321),
    )


# ---------------------------------------------------------------------------
# In-memory async SQLite engine (StaticPool shares one connection)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory SQLite engine for one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with factory() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Collaborator mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def ai_client():
    """Mock AsyncAzureOpenAI client returning SAMPLE_AI_HTML."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=make_completion(SAMPLE_AI_HTML))
    client.close = AsyncMock()
    return client


@pytest.fixture
def pipeline(ai_client) -> WireframePipeline:
    invoker = AIInvoker(
        model_config=ModelConfig(
            endpoint="https://test.openai.azure.com",
            api_key="test-key",
            deployment="gpt-4o",
            api_version="2024-02-15-preview",
        ),
        client=ai_client,
    )
    return WireframePipeline(invoker)


@pytest.fixture
def token_requests():
    """Captured requests made to the mock Figma token endpoint."""
    return []


@pytest.fixture
def oauth_client(token_requests) -> FigmaOAuthClient:
    def handler(request: httpx.Request) -> httpx.Response:
        token_requests.append(request)
        return httpx.Response(200, content=json.dumps({
            "access_token": "figd_oauth_access_token_0123456789abcdef",
            "expires_in": 7776000,
            "refresh_token": "figd_refresh",
            "user_id": 42,
        }))

    return FigmaOAuthClient(
        client_id="test-client-id-123",
        client_secret="test-client-secret-456",
        redirect_uri=TEST_REDIRECT_URI,
        transport=httpx.MockTransport(handler),
    )


# ---------------------------------------------------------------------------
# FastAPI test client: patches DB engine + dependencies
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(
    test_engine: AsyncEngine,
    pipeline: WireframePipeline,
    oauth_client: FigmaOAuthClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI routes.

    Replaces the production DB engine/session_factory in app.database
    with the test in-memory engine and overrides the pipeline and OAuth
    client dependencies. Tests may add further overrides on
    ``app.dependency_overrides``; they are cleared afterwards.
    """
    from app.dependencies import get_oauth_client, get_wireframe_pipeline
    from app.main import app

    original_engine = db_module.engine
    original_factory = db_module.async_session_factory
    db_module.engine = test_engine
    db_module.async_session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    app.dependency_overrides[get_wireframe_pipeline] = lambda: pipeline
    app.dependency_overrides[get_oauth_client] = lambda: oauth_client

    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
        db_module.engine = original_engine
        db_module.async_session_factory = original_factory


# ---------------------------------------------------------------------------
# Figma REST API fake
# ---------------------------------------------------------------------------

SAMPLE_FILE_KEY = "6kGd851qaAX4TiL44vpIrO"

SAMPLE_BUTTON_NODE = {
    "id": "1:234",
    "name": "Primary Button",
    "type": "COMPONENT",
    "absoluteBoundingBox": {"x": 0, "y": 0, "width": 120, "height": 40},
    "fills": [{"type": "SOLID", "color": {"r": 0, "g": 0.47, "b": 0.831, "a": 1}}],
    "cornerRadius": 6,
    "paddingTop": 12, "paddingRight": 24, "paddingBottom": 12, "paddingLeft": 24,
    "children": [
        {
            "id": "1:235",
            "name": "Label",
            "type": "TEXT",
            "characters": "Get started",
            "fills": [{"type": "SOLID", "color": {"r": 1, "g": 1, "b": 1, "a": 1}}],
            "style": {"fontFamily": "Segoe UI", "fontSize": 16, "fontWeight": 600},
        },
    ],
}

SAMPLE_FILE = {
    "name": "Design System",
    "document": {
        "id": "0:0",
        "type": "DOCUMENT",
        "children": [
            {
                "id": "0:1",
                "name": "Page 1",
                "type": "CANVAS",
                "children": [
                    {
                        "id": "10:1",
                        "name": "Home",
                        "type": "FRAME",
                        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 1440, "height": 900},
                        "children": [SAMPLE_BUTTON_NODE],
                    },
                    {
                        "id": "10:2",
                        "name": "Checkout",
                        "type": "FRAME",
                        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 1440, "height": 1200},
                    },
                ],
            },
        ],
    },
    "components": {
        "1:234": {"key": "abc", "name": "Primary Button", "description": "Main call to action"},
    },
}


class FakeFigmaApi:
    """httpx handler serving canned Figma REST responses.

    ``routes`` maps a request path to a JSON body or an ``httpx.Response``.
    Unknown paths return 404. Every request is recorded.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.routes.get(request.url.path)
        if result is None:
            return httpx.Response(404, json={"status": 404, "err": "Not found"})
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json=result)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def paths(self):
        return [r.url.path for r in self.requests]


def default_figma_routes():
    return {
        f"/v1/files/{SAMPLE_FILE_KEY}": SAMPLE_FILE,
        f"/v1/files/{SAMPLE_FILE_KEY}/components": {
            "meta": {"components": [{
                "node_id": "1:234",
                "name": "Primary Button",
                "description": "Main call to action",
            }]},
        },
        f"/v1/files/{SAMPLE_FILE_KEY}/nodes": {
            "nodes": {"1:234": {"document": SAMPLE_BUTTON_NODE}},
        },
        f"/v1/images/{SAMPLE_FILE_KEY}": {
            "err": None,
            "images": {
                "1:234": "https://figma-render.test/1-234.svg",
                "10:1": "https://figma-render.test/10-1.png",
                "10:2": None,
            },
        },
        "/v1/me": {"id": "42", "email": "designer@example.com"},
    }


@pytest.fixture
def figma_api() -> FakeFigmaApi:
    return FakeFigmaApi(default_figma_routes())
