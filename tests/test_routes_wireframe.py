"""Tests for the wireframe generation route (app/routes/wireframe.py).

Covers:
- POST /api/generate-wireframe (AI path, fallback path, validation,
  not-configured, emergency template on unexpected errors)
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from designetica.generation.invoker import AIInvocationError, AIInvoker, ModelConfig
from designetica.generation.pipeline import WireframePipeline

from tests.conftest import make_completion

URL = "/api/generate-wireframe"


class TestGenerateWireframe:

    @pytest.mark.asyncio
    async def test_ai_wireframe(self, client: AsyncClient):
        resp = await client.post(URL, json={
            "description": "Create a contact form",
            "colorScheme": "success",
            "fastMode": True,
        })
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["success"] is True
        assert data["source"] == "azure-openai"
        assert data["aiGenerated"] is True
        assert data["fallback"] is False
        assert data["colorScheme"] == "success"
        assert data["theme"] == "microsoft"
        assert data["html"].startswith("<!DOCTYPE html>")
        assert data["correlationId"] == data["metadata"]["correlationId"]
        assert data["metadata"]["variant"] == "standard"

    @pytest.mark.asyncio
    async def test_fast_mode_forwarded(self, client: AsyncClient, ai_client):
        await client.post(URL, json={"description": "Create a contact form", "fastMode": True})
        assert ai_client.chat.completions.create.await_args.kwargs["max_tokens"] == 2500

    @pytest.mark.asyncio
    async def test_insufficient_output_falls_back(self, client: AsyncClient, ai_client):
        ai_client.chat.completions.create.return_value = make_completion("<p>short</p>")

        resp = await client.post(URL, json={"description": "Analytics dashboard"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["source"] == "fallback"
        assert data["fallback"] is True
        assert data["aiGenerated"] is False
        assert "Analytics dashboard" in data["html"]
        assert data["error"]

    @pytest.mark.asyncio
    async def test_ai_error_falls_back(self, client: AsyncClient, ai_client):
        ai_client.chat.completions.create.side_effect = AIInvocationError("HTTP 500")
        resp = await client.post(URL, json={"description": "Create a contact form"})
        assert resp.status_code == 200
        assert resp.json()["source"] == "fallback"

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_emergency_template(self, client: AsyncClient, pipeline):
        pipeline.generate = AsyncMock(side_effect=RuntimeError("kaboom"))

        resp = await client.post(URL, json={"description": "Create a contact form"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["source"] == "error-fallback"
        assert data["fallback"] is True
        assert "Create a contact form" in data["html"]
        assert data["error"] == "kaboom"


class TestValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload,message", [
        ({}, "must be a string"),
        ({"description": 123}, "must be a string"),
        ({"description": "  "}, "at least 3"),
        ({"description": "x" * 1001}, "at most 1000"),
        ({"description": "12345"}, "only numbers"),
        ({"description": "Contact form", "variant": "turbo"}, "Unknown variant"),
    ])
    async def test_bad_request(self, client: AsyncClient, ai_client, payload, message):
        resp = await client.post(URL, json=payload)

        assert resp.status_code == 400
        data = resp.json()
        assert data["success"] is False
        assert message in data["error"]
        assert data["correlationId"]
        ai_client.chat.completions.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_configured(self, client: AsyncClient):
        from app.dependencies import get_wireframe_pipeline
        from app.main import app

        unconfigured = WireframePipeline(
            AIInvoker(ModelConfig(endpoint="", api_key="", deployment="d", api_version="v"))
        )
        app.dependency_overrides[get_wireframe_pipeline] = lambda: unconfigured

        resp = await client.post(URL, json={"description": "Create a contact form"})

        assert resp.status_code == 503
        assert "not configured" in resp.json()["error"]
