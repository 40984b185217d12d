"""Tests for designetica.client.backend_detector."""

import json

import httpx
import pytest

from designetica.client.backend_detector import (
    BackendDetector,
    PortCache,
    is_ai_backend,
)
from designetica.client.http import ApiClient

PORTS = (5001, 7072, 7071, 7073, 3001, 8000)

AI_RESPONSE = {"success": True, "aiGenerated": True, "source": "azure-openai", "html": "<html></html>"}


class FakeClock:
    def __init__(self, now: float = 10_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_handler(live_ports, ai_ports=None, calls=None):
    """Mock transport: health answers on live_ports, AI probe passes on ai_ports."""
    ai_ports = live_ports if ai_ports is None else ai_ports

    def handler(request: httpx.Request) -> httpx.Response:
        port = request.url.port
        if calls is not None:
            calls.append((port, request.url.path))
        if port not in live_ports:
            raise httpx.ConnectError("refused", request=request)
        if request.url.path == "/api/health":
            return httpx.Response(200, json={"status": "OK"})
        if port in ai_ports:
            return httpx.Response(200, json=AI_RESPONSE)
        return httpx.Response(200, json={"success": True, "aiGenerated": False, "source": "fallback"})

    return handler


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def port_cache(tmp_path, clock):
    return PortCache(str(tmp_path / "port.json"), clock=clock)


def _detector(handler, port_cache, **kwargs):
    return BackendDetector(
        ApiClient(transport=httpx.MockTransport(handler)),
        production=kwargs.pop("production", False),
        static_base_url=kwargs.pop("static_base_url", "https://api.example.com"),
        port_cache=port_cache,
        candidate_ports=PORTS,
        **kwargs,
    )


class TestIsAiBackend:

    def test_openai_source(self):
        assert is_ai_backend({"aiGenerated": True, "source": "azure-openai"})

    def test_fallback_source_rejected(self):
        assert not is_ai_backend({"aiGenerated": True, "source": "fallback"})

    def test_not_ai_generated(self):
        assert not is_ai_backend({"aiGenerated": False, "source": "openai"})

    def test_non_dict(self):
        assert not is_ai_backend(["openai"])


class TestDetectWorkingBackend:

    @pytest.mark.asyncio
    async def test_production_short_circuits(self, port_cache):
        calls = []
        detector = _detector(make_handler(set(), calls=calls), port_cache, production=True)
        assert await detector.detect_working_backend() == "https://api.example.com"
        assert calls == []

    @pytest.mark.asyncio
    async def test_probes_in_order_and_stops_at_first_working(self, port_cache):
        calls = []
        detector = _detector(make_handler({7071, 8000}, calls=calls), port_cache)
        assert await detector.detect_working_backend() == "http://localhost:7071"
        probed_ports = [p for p, _ in calls]
        assert probed_ports == [5001, 7072, 7071, 7071]
        assert 8000 not in probed_ports

    @pytest.mark.asyncio
    async def test_requires_ai_capability(self, port_cache):
        detector = _detector(make_handler({5001, 7072}, ai_ports={7072}), port_cache)
        assert await detector.detect_working_backend() == "http://localhost:7072"

    @pytest.mark.asyncio
    async def test_writes_port_cache(self, port_cache, tmp_path, clock):
        detector = _detector(make_handler({7072}), port_cache)
        await detector.detect_working_backend()
        stored = json.loads((tmp_path / "port.json").read_text())
        assert stored == {"port": 7072, "discoveredAtMs": int(clock.now * 1000)}

    @pytest.mark.asyncio
    async def test_fresh_cached_port_skips_probing(self, port_cache):
        port_cache.write(3001)
        calls = []
        detector = _detector(make_handler(set(), calls=calls), port_cache)
        assert await detector.detect_working_backend() == "http://localhost:3001"
        assert calls == []

    @pytest.mark.asyncio
    async def test_stale_cached_port_is_reprobed(self, port_cache, clock):
        port_cache.write(3001)
        clock.now += 10.0
        detector = _detector(make_handler({5001}), port_cache)
        assert await detector.detect_working_backend() == "http://localhost:5001"

    @pytest.mark.asyncio
    async def test_nothing_answers_returns_primary(self, port_cache, tmp_path):
        detector = _detector(make_handler(set()), port_cache)
        assert await detector.detect_working_backend() == "http://localhost:5001"
        assert not (tmp_path / "port.json").exists()

    @pytest.mark.asyncio
    async def test_refresh_drops_cached_port(self, port_cache):
        port_cache.write(3001)
        detector = _detector(make_handler({7073}), port_cache)
        assert await detector.refresh() == "http://localhost:7073"


class TestPortCache:

    def test_corrupt_file_reads_as_missing(self, tmp_path, clock):
        path = tmp_path / "port.json"
        path.write_text("{not json")
        assert PortCache(str(path), clock=clock).read(10) is None

    def test_clear_missing_file_is_noop(self, port_cache):
        port_cache.clear()
        port_cache.clear()
