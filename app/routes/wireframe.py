"""Wireframe generation endpoint.

POST /api/generate-wireframe runs the server-side pipeline (prompt -> AI ->
post-process) and degrades to a template wireframe when the AI output is
unusable. Unexpected errors still return a renderable emergency wireframe.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from app.dependencies import get_wireframe_pipeline
from designetica.generation.fallback import emergency_template
from designetica.generation.invoker import AINotConfiguredError
from designetica.generation.pipeline import WireframePipeline, validate_description
from designetica.generation.prompt import VARIANTS
from designetica.settings import DEFAULT_COLOR_SCHEME, DEFAULT_THEME

logger = logging.getLogger("designetica.routes.wireframe")

router = APIRouter(prefix="/api", tags=["wireframe"])

ERROR_FALLBACK_SOURCE = "error-fallback"


# --- Schemas ---


class GenerateWireframeRequest(BaseModel):
    """Request for POST /api/generate-wireframe."""

    model_config = ConfigDict(populate_by_name=True)

    # Validated by hand so bad input gets {success: false, error} instead of a 422
    description: Any = None
    theme: str = DEFAULT_THEME
    color_scheme: str = Field(DEFAULT_COLOR_SCHEME, alias="colorScheme")
    fast_mode: bool = Field(False, alias="fastMode")
    variant: str = "standard"


class WireframeMetadata(BaseModel):
    correlationId: str
    processingTimeMs: int
    variant: Optional[str] = None


class GenerateWireframeResponse(BaseModel):
    success: bool = True
    html: str
    source: str
    aiGenerated: bool
    fallback: bool
    theme: str
    colorScheme: str
    correlationId: str
    metadata: WireframeMetadata
    error: Optional[str] = None


def _error(status: int, message: str, correlation_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"success": False, "error": message, "correlationId": correlation_id},
    )


# --- Routes ---


@router.post("/generate-wireframe", response_model=GenerateWireframeResponse)
async def generate_wireframe(
    req: GenerateWireframeRequest,
    pipeline: WireframePipeline = Depends(get_wireframe_pipeline),
):
    """Generate an HTML wireframe from a natural-language description."""
    correlation_id = str(uuid.uuid4())

    problem = validate_description(req.description)
    if problem:
        return _error(400, problem, correlation_id)
    if req.variant not in VARIANTS:
        return _error(400, f"Unknown variant {req.variant!r}", correlation_id)
    if not pipeline.is_configured:
        return _error(
            503,
            "AI generation is not configured. Set AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_KEY.",
            correlation_id,
        )

    try:
        result = await pipeline.generate(
            req.description,
            theme=req.theme,
            color_scheme=req.color_scheme,
            fast_mode=req.fast_mode,
            variant=req.variant,
            correlation_id=correlation_id,
        )
    except AINotConfiguredError as e:
        return _error(503, str(e), correlation_id)
    except Exception as e:
        logger.exception(f"[{correlation_id}] generate_wireframe: unexpected failure")
        return GenerateWireframeResponse(
            html=emergency_template(req.description, e),
            source=ERROR_FALLBACK_SOURCE,
            aiGenerated=False,
            fallback=True,
            theme=req.theme,
            colorScheme=req.color_scheme,
            correlationId=correlation_id,
            metadata=WireframeMetadata(correlationId=correlation_id, processingTimeMs=0),
            error=str(e),
        )

    return GenerateWireframeResponse(
        html=result.html,
        source=result.source,
        aiGenerated=result.ai_generated,
        fallback=result.fallback,
        theme=req.theme,
        colorScheme=req.color_scheme,
        correlationId=result.correlation_id,
        metadata=WireframeMetadata(
            correlationId=result.correlation_id,
            processingTimeMs=result.processing_time_ms,
            variant=result.variant,
        ),
        error=result.error,
    )
