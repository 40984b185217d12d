"""FastAPI Application Entry Point.

Configures the app, lifespan, CORS, and includes all route modules.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from designetica import __version__, config
from designetica.generation.pipeline import WireframePipeline
from designetica.integrations.figma_oauth import FigmaOAuthClient
from designetica.logging_config import get_api_logger

from .database import close_db, init_db
from .dependencies import get_oauth_client, get_wireframe_pipeline

# Import ORM models so they register with Base.metadata
from .models import db as _orm_models  # noqa: F401

get_api_logger()
logger = logging.getLogger("designetica.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage database lifecycle and report optional integrations."""
    await init_db()

    if not get_wireframe_pipeline().is_configured:
        logger.warning(
            "AZURE_OPENAI_ENDPOINT / AZURE_OPENAI_KEY not set: /api/generate-wireframe "
            "will answer 503 until Azure OpenAI is configured."
        )
    if not get_oauth_client().is_configured and not config.FIGMA_ACCESS_TOKEN:
        logger.warning(
            "Neither Figma OAuth nor FIGMA_ACCESS_TOKEN is configured: Figma import "
            "endpoints will be unavailable."
        )

    yield
    await get_wireframe_pipeline().invoker.close()
    await close_db()


app = FastAPI(title="Designetica API", version=__version__, lifespan=lifespan)

# CORS configuration: configurable via CORS_ORIGINS env var (comma-separated)
_default_origins = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173"
CORS_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ORIGINS", _default_origins).split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
from .routes.wireframe import router as wireframe_router  # noqa: E402
from .routes.figma import router as figma_router  # noqa: E402
from .routes.figma_oauth import router as figma_oauth_router  # noqa: E402

app.include_router(wireframe_router)
app.include_router(figma_router)
app.include_router(figma_oauth_router)


@app.get("/api/health")
async def health_check(
    pipeline: WireframePipeline = Depends(get_wireframe_pipeline),
    oauth: FigmaOAuthClient = Depends(get_oauth_client),
):
    """Health check endpoint used by the backend detector and the monitor."""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "environment": config.ENVIRONMENT,
        "services": {
            "hasOpenAI": pipeline.is_configured,
            "hasFigmaOAuth": oauth.is_configured,
        },
    }


def run() -> None:
    """Serve the API with uvicorn (API_HOST / API_PORT)."""
    import uvicorn

    uvicorn.run("app.main:app", host=config.API_HOST, port=config.API_PORT)
