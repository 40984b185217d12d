"""Locate a live generation backend during local development.

Production deployments use the configured static base URL. In development,
a short list of candidate ports is probed in order; the first port whose
health endpoint answers and whose generation endpoint reports a real AI
backend wins. The winning port is cached in a small JSON file with a short
time-to-live so repeated lookups skip the probe.
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from designetica import config
from designetica.settings import (
    BACKEND_AI_PROBE_TIMEOUT,
    BACKEND_AUXILIARY_PORTS,
    BACKEND_DEV_HOST,
    BACKEND_FALLBACK_PORT,
    BACKEND_HEALTH_PROBE_TIMEOUT,
    BACKEND_PORT_CACHE_TTL,
    BACKEND_PRIMARY_PORT,
)

from .http import ApiClient, ApiError

logger = logging.getLogger("designetica.client.backend")

AI_PROBE_PAYLOAD = {"description": "AI capability test"}


@dataclass(frozen=True)
class BackendEndpointCacheEntry:
    port: int
    discovered_at_ms: int


def default_candidate_ports() -> tuple[int, ...]:
    return (BACKEND_PRIMARY_PORT, BACKEND_FALLBACK_PORT, *BACKEND_AUXILIARY_PORTS)


def is_ai_backend(body: object) -> bool:
    """True when a generation response proves a real AI backend answered."""
    if not isinstance(body, dict) or body.get("aiGenerated") is not True:
        return False
    source = str(body.get("source") or "").lower()
    return "openai" in source or source == "ai"


class PortCache:
    """JSON-file store for the last discovered backend port."""

    def __init__(self, path: str, clock: Callable[[], float] = time.time):
        self._path = path
        self._clock = clock

    def read(self, ttl_seconds: float) -> Optional[BackendEndpointCacheEntry]:
        try:
            with open(self._path, encoding="utf-8") as f:
                raw = json.load(f)
            entry = BackendEndpointCacheEntry(
                port=int(raw["port"]),
                discovered_at_ms=int(raw["discoveredAtMs"]),
            )
        except (OSError, ValueError, KeyError, TypeError):
            return None

        age_ms = int(self._clock() * 1000) - entry.discovered_at_ms
        if age_ms < 0 or age_ms >= ttl_seconds * 1000:
            return None
        return entry

    def write(self, port: int) -> BackendEndpointCacheEntry:
        entry = BackendEndpointCacheEntry(
            port=port, discovered_at_ms=int(self._clock() * 1000)
        )
        directory = os.path.dirname(self._path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump({"port": entry.port, "discoveredAtMs": entry.discovered_at_ms}, f)
        return entry

    def clear(self) -> None:
        try:
            os.remove(self._path)
        except FileNotFoundError:
            pass


class BackendDetector:
    """Resolve the base URL of the generation backend.

    Args:
        http: Client used for probes.
        production: Skip probing and return ``static_base_url``.
        static_base_url: Production base URL.
        port_cache: Where the discovered port is remembered.
        candidate_ports: Ports probed in order; the first is the optimistic
            default when nothing answers.
    """

    def __init__(
        self,
        http: ApiClient,
        production: bool = config.IS_PRODUCTION,
        static_base_url: str = config.API_BASE_URL,
        port_cache: Optional[PortCache] = None,
        candidate_ports: Optional[Sequence[int]] = None,
        host: str = BACKEND_DEV_HOST,
        cache_ttl: float = BACKEND_PORT_CACHE_TTL,
        health_timeout: float = BACKEND_HEALTH_PROBE_TIMEOUT,
        ai_timeout: float = BACKEND_AI_PROBE_TIMEOUT,
    ):
        self._http = http
        self._production = production
        self._static_base_url = static_base_url.rstrip("/")
        self._port_cache = port_cache or PortCache(config.PORT_CACHE_FILE)
        self._ports = tuple(candidate_ports or default_candidate_ports())
        if not self._ports:
            raise ValueError("candidate_ports must not be empty")
        self._host = host
        self._cache_ttl = cache_ttl
        self._health_timeout = health_timeout
        self._ai_timeout = ai_timeout

    @property
    def production(self) -> bool:
        return self._production

    def url_for(self, port: int) -> str:
        return f"http://{self._host}:{port}"

    async def probe(self, port: int) -> bool:
        """Check health and AI capability of one candidate port."""
        base = self.url_for(port)
        try:
            await self._http.get_json(f"{base}/api/health", timeout=self._health_timeout)
        except ApiError as e:
            logger.debug(f"probe: port {port} health check failed: {e}")
            return False

        try:
            body = await self._http.post_json(
                f"{base}/api/generate-wireframe",
                AI_PROBE_PAYLOAD,
                timeout=self._ai_timeout,
            )
        except ApiError as e:
            logger.info(f"probe: port {port} is up but AI probe failed: {e}")
            return False

        if not is_ai_backend(body):
            logger.info(f"probe: port {port} answered without AI capability")
            return False
        return True

    async def detect_working_backend(self) -> str:
        """Return the base URL of a working backend. Never raises for probe failures."""
        if self._production:
            return self._static_base_url

        cached = self._port_cache.read(self._cache_ttl)
        if cached is not None:
            return self.url_for(cached.port)

        for port in self._ports:
            if await self.probe(port):
                try:
                    self._port_cache.write(port)
                except OSError as e:
                    logger.warning(f"detect_working_backend: cannot persist port {port}: {e}")
                logger.info(f"detect_working_backend: using port {port}")
                return self.url_for(port)

        logger.warning(
            f"detect_working_backend: no candidate answered, defaulting to port {self._ports[0]}"
        )
        return self.url_for(self._ports[0])

    async def refresh(self) -> str:
        """Drop the cached port and probe again."""
        if not self._production:
            self._port_cache.clear()
        return await self.detect_working_backend()
