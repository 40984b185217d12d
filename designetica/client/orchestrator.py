"""Generation Orchestrator: the single entry point the UI calls.

Flow for ``generate_wireframe``:
    cancel previous call -> cache lookup -> POST /api/generate-wireframe
    -> retry with exponential backoff + jitter -> local fallback chain
    (enhanced template, then emergency template) -> cache write

Calls are single-flight per orchestrator: starting a new generation cancels
the one in flight. The superseded caller receives ``GenerationCancelled``,
which means "operation cancelled", not a failure.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from designetica.generation.fallback import emergency_template, generate_fallback
from designetica.settings import (
    DEFAULT_COLOR_SCHEME,
    DEFAULT_THEME,
    GENERATION_BACKOFF_BASE_MS,
    GENERATION_BACKOFF_CAP_MS,
    GENERATION_BACKOFF_JITTER_MS,
    GENERATION_MAX_RETRIES,
    GENERATION_TIMEOUT,
)

from .backend_detector import BackendDetector
from .cache import WireframeCache, make_cache_key
from .http import ApiClient, ApiError
from .placeholders import post_process_client_html

logger = logging.getLogger("designetica.client.orchestrator")

GENERATE_PATH = "/api/generate-wireframe"


class ResultSource(str, Enum):
    AI = "ai"
    FALLBACK = "fallback"
    CACHE = "cache"
    ERROR_FALLBACK = "error-fallback"


class GenerationCancelled(Exception):
    """Raised to a caller whose generation was superseded or cancelled."""


@dataclass(frozen=True)
class GenerationRequest:
    description: str
    theme: str = DEFAULT_THEME
    color_scheme: str = DEFAULT_COLOR_SCHEME
    fast_mode: bool = False
    skip_cache: bool = False

    @property
    def cache_key(self) -> str:
        return make_cache_key(self.description, self.theme, self.color_scheme, self.fast_mode)

    def to_payload(self) -> dict:
        return {
            "description": self.description,
            "theme": self.theme,
            "colorScheme": self.color_scheme,
            "fastMode": self.fast_mode,
        }


@dataclass(frozen=True)
class GenerationResult:
    html: str
    source: ResultSource
    fallback: bool
    processing_time_ms: int
    error: Optional[str] = None


class WireframeOrchestrator:
    """Resilient wireframe generation with cache, retry and fallback.

    Args:
        http: HTTP client wrapper.
        detector: Resolves the backend base URL. Without one, ``http``'s own
            base URL is used.
        cache: Injected wireframe cache (a fresh one per orchestrator by default).
        timeout: Per-attempt request timeout in seconds.
        max_retries: Retries after the first attempt.
        sleep / rand / clock: Injectable for deterministic tests.
    """

    def __init__(
        self,
        http: ApiClient,
        detector: Optional[BackendDetector] = None,
        cache: Optional[WireframeCache] = None,
        timeout: float = GENERATION_TIMEOUT,
        max_retries: int = GENERATION_MAX_RETRIES,
        backoff_base_ms: int = GENERATION_BACKOFF_BASE_MS,
        backoff_jitter_ms: int = GENERATION_BACKOFF_JITTER_MS,
        backoff_cap_ms: int = GENERATION_BACKOFF_CAP_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
        clock: Callable[[], float] = time.monotonic,
        fallback_generator: Callable[[str, str, str], str] = generate_fallback,
    ):
        self._http = http
        self._detector = detector
        self._cache = cache if cache is not None else WireframeCache()
        self._timeout = timeout
        self._max_retries = max(0, max_retries)
        self._backoff_base_ms = backoff_base_ms
        self._backoff_jitter_ms = backoff_jitter_ms
        self._backoff_cap_ms = backoff_cap_ms
        self._sleep = sleep
        self._rand = rand
        self._clock = clock
        self._fallback_generator = fallback_generator

        self._current: Optional[asyncio.Task] = None
        self._superseded: set[asyncio.Task] = set()

    @property
    def cache(self) -> WireframeCache:
        return self._cache

    @property
    def busy(self) -> bool:
        return self._current is not None and not self._current.done()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def generate_wireframe(
        self,
        description: str,
        theme: str = DEFAULT_THEME,
        color_scheme: str = DEFAULT_COLOR_SCHEME,
        skip_cache: bool = False,
        fast_mode: bool = False,
    ) -> GenerationResult:
        """Generate a wireframe. Never raises except ``GenerationCancelled``."""
        request = GenerationRequest(
            description=description,
            theme=theme,
            color_scheme=color_scheme,
            fast_mode=fast_mode,
            skip_cache=skip_cache,
        )

        self.cancel_generation()
        task = asyncio.ensure_future(self._run(request))
        self._current = task
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._superseded:
                raise GenerationCancelled(
                    f"Generation cancelled: {description[:50]!r}"
                ) from None
            raise
        finally:
            self._superseded.discard(task)
            if self._current is task:
                self._current = None

    def cancel_generation(self) -> bool:
        """Cancel the in-flight generation, if any. Returns True if one was cancelled."""
        task = self._current
        if task is None or task.done():
            return False
        self._superseded.add(task)
        task.cancel()
        logger.info("cancel_generation: previous generation cancelled")
        return True

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("clear_cache: wireframe cache cleared")

    def backoff_delay_ms(self, retry: int) -> int:
        """Delay before retry number ``retry`` (1-based)."""
        delay = self._backoff_base_ms * (2 ** retry) + self._rand() * self._backoff_jitter_ms
        return int(min(delay, self._backoff_cap_ms))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _elapsed_ms(self, started: float) -> int:
        return int((self._clock() - started) * 1000)

    async def _resolve_base_url(self, refresh: bool = False) -> str:
        if self._detector is None:
            return ""
        if refresh and not self._detector.production:
            return await self._detector.refresh()
        return await self._detector.detect_working_backend()

    async def _run(self, request: GenerationRequest) -> GenerationResult:
        started = self._clock()
        key = request.cache_key

        if not request.skip_cache:
            entry = self._cache.get(key)
            if entry is not None:
                logger.info(f"generate_wireframe: cache hit ({len(entry.html)} chars)")
                return GenerationResult(
                    html=entry.html,
                    source=ResultSource.CACHE,
                    fallback=False,
                    processing_time_ms=entry.processing_time_ms,
                )

        payload = request.to_payload()
        attempts = self._max_retries + 1
        last_error: Optional[Exception] = None
        base_url = await self._resolve_base_url()

        for attempt in range(attempts):
            if attempt > 0:
                delay_ms = self.backoff_delay_ms(attempt)
                logger.warning(
                    "generate_wireframe: retry %d/%d in %dms (%s)",
                    attempt, self._max_retries, delay_ms, last_error,
                )
                await self._sleep(delay_ms / 1000)
                base_url = await self._resolve_base_url(refresh=True)

            try:
                body = await self._http.post_json(
                    f"{base_url}{GENERATE_PATH}", payload, timeout=self._timeout
                )
            except ApiError as e:
                last_error = e
                continue

            html = body.get("html") if isinstance(body, dict) else None
            if not isinstance(html, str) or not html.strip():
                last_error = ApiError("Response did not include html")
                continue

            cleaned = post_process_client_html(html)
            elapsed = self._elapsed_ms(started)

            if body.get("fallback"):
                logger.info("generate_wireframe: backend served a fallback wireframe")
                return GenerationResult(
                    html=cleaned,
                    source=ResultSource.FALLBACK,
                    fallback=True,
                    processing_time_ms=elapsed,
                    error=body.get("error"),
                )

            if self._current is asyncio.current_task():
                self._cache.set(key, cleaned, elapsed)
            logger.info(
                f"generate_wireframe: AI wireframe in {elapsed}ms after {attempt + 1} attempt(s)"
            )
            return GenerationResult(
                html=cleaned,
                source=ResultSource.AI,
                fallback=False,
                processing_time_ms=elapsed,
            )

        logger.warning(
            f"generate_wireframe: {attempts} attempts failed, using local fallback ({last_error})"
        )
        return self._fallback(request, started, last_error)

    def _fallback(
        self,
        request: GenerationRequest,
        started: float,
        error: Optional[Exception],
    ) -> GenerationResult:
        message = str(error) if error else None
        try:
            html = self._fallback_generator(
                request.description, request.theme, request.color_scheme
            )
            return GenerationResult(
                html=html,
                source=ResultSource.FALLBACK,
                fallback=True,
                processing_time_ms=self._elapsed_ms(started),
                error=message,
            )
        except Exception as e:
            logger.error(f"generate_wireframe: fallback template failed: {e}")
            return GenerationResult(
                html=emergency_template(request.description, str(e)),
                source=ResultSource.ERROR_FALLBACK,
                fallback=True,
                processing_time_ms=self._elapsed_ms(started),
                error=str(e),
            )
