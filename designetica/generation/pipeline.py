"""Parameterized wireframe pipeline: prompt -> AI -> post-process.

All generator variants (standard, minimal, clean, pure-ai) run through this
one pipeline; a ``GeneratorConfig`` decides the prompt style and which
post-processing passes are enabled. AI failures and insufficient output
degrade to the deterministic fallback template.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Optional

from designetica.settings import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    MIN_AI_HTML_LENGTH,
)

from .content_filter import ContentFilter
from .fallback import generate_fallback
from .invoker import AI_SOURCE, AIInvocationError, AIInvoker
from .postprocess import PostProcessContext, ensure_doctype, post_process, strip_wrappers
from .prompt import GeneratorConfig, build_prompt, get_variant

logger = logging.getLogger("designetica.generation.pipeline")

FALLBACK_SOURCE = "fallback"

FAST_MODE_MAX_TOKENS = 2500


def validate_description(description: object) -> Optional[str]:
    """Return an error message for an unusable description, else None."""
    if not isinstance(description, str):
        return "Description must be a string"
    text = description.strip()
    if len(text) < DESCRIPTION_MIN_LENGTH:
        return f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters"
    if len(description) > DESCRIPTION_MAX_LENGTH:
        return f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"
    if text.replace(".", "").replace(",", "").replace(" ", "").isdigit():
        return "Description cannot be only numbers; describe the UI you want"
    return None


def is_sufficient_html(html: str, min_length: int = MIN_AI_HTML_LENGTH) -> bool:
    lowered = html.lower()
    return "<!doctype html" in lowered and "</html>" in lowered and len(html) >= min_length


@dataclass(frozen=True)
class PipelineResult:
    html: str
    source: str
    ai_generated: bool
    fallback: bool
    correlation_id: str
    processing_time_ms: int
    variant: str
    error: Optional[str] = None


class WireframePipeline:
    """Server-side generation for one request at a time.

    Args:
        invoker: AI invoker (shared across requests).
        content_filter: Filter applied when a variant enables branding filtering.
    """

    def __init__(
        self,
        invoker: AIInvoker,
        content_filter: Optional[ContentFilter] = None,
        min_html_length: int = MIN_AI_HTML_LENGTH,
    ):
        self.invoker = invoker
        self.content_filter = content_filter or ContentFilter()
        self.min_html_length = min_html_length

    @property
    def is_configured(self) -> bool:
        return self.invoker.is_configured

    def _context(
        self, description: str, color_scheme: str, cfg: GeneratorConfig
    ) -> PostProcessContext:
        inject = cfg.component_injection_enabled
        return PostProcessContext(
            description=description,
            color_scheme=color_scheme,
            inject_navigation=inject,
            inject_hero=inject,
            inject_footer=inject,
            substitute_buttons=inject,
            content_filter=self.content_filter if cfg.branding_filter_enabled else None,
        )

    async def generate(
        self,
        description: str,
        theme: str = "microsoft",
        color_scheme: str = "primary",
        fast_mode: bool = False,
        variant: str = "standard",
        correlation_id: Optional[str] = None,
    ) -> PipelineResult:
        """Generate one wireframe.

        Raises:
            AINotConfiguredError: Azure OpenAI credentials are missing.
            ValueError: unknown ``variant``.
        """
        cfg = get_variant(variant)
        correlation_id = correlation_id or str(uuid.uuid4())
        started = time.monotonic()

        prompt = build_prompt(description, color_scheme, cfg.prompt_style, fast_mode, theme=theme)
        error: Optional[str] = None
        try:
            raw = await self.invoker.invoke(
                prompt, max_tokens=FAST_MODE_MAX_TOKENS if fast_mode else None
            )
            # Judged before component injection pads the document
            candidate = ensure_doctype(strip_wrappers(raw))
            if is_sufficient_html(candidate, self.min_html_length):
                html = post_process(raw, self._context(description, color_scheme, cfg))
                elapsed = int((time.monotonic() - started) * 1000)
                logger.info(
                    f"[{correlation_id}] generate: variant={variant}, "
                    f"chars={len(html)}, {elapsed}ms"
                )
                return PipelineResult(
                    html=html,
                    source=AI_SOURCE,
                    ai_generated=True,
                    fallback=False,
                    correlation_id=correlation_id,
                    processing_time_ms=elapsed,
                    variant=variant,
                )
            error = f"AI output insufficient ({len(candidate)} chars)"
        except AIInvocationError as e:
            error = str(e)

        logger.warning(f"[{correlation_id}] generate: serving fallback ({error})")
        html = generate_fallback(description, theme, color_scheme)
        return PipelineResult(
            html=html,
            source=FALLBACK_SOURCE,
            ai_generated=False,
            fallback=True,
            correlation_id=correlation_id,
            processing_time_ms=int((time.monotonic() - started) * 1000),
            variant=variant,
            error=error,
        )
