"""Shared FastAPI dependencies.

Long-lived collaborators (the generation pipeline, the OAuth client) are
built once per process; tests replace them with ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.oauth_token import OAuthTokenRepository
from designetica import config
from designetica.generation.invoker import AIInvoker
from designetica.generation.pipeline import WireframePipeline
from designetica.integrations.figma_oauth import FigmaOAuthClient


@lru_cache(maxsize=1)
def get_wireframe_pipeline() -> WireframePipeline:
    return WireframePipeline(AIInvoker())


@lru_cache(maxsize=1)
def get_oauth_client() -> FigmaOAuthClient:
    return FigmaOAuthClient()


async def resolve_figma_token(
    explicit: Optional[str],
    session: AsyncSession,
) -> Tuple[Optional[str], bool]:
    """Pick the Figma token for a request.

    Order: explicit token, stored unexpired OAuth token, FIGMA_ACCESS_TOKEN.

    Returns:
        (token, is_oauth): token is None when nothing is available
    """
    if explicit:
        return explicit, False
    stored = await OAuthTokenRepository(session).get_latest()
    if stored is not None and not stored.is_expired():
        return stored.access_token, True
    if config.FIGMA_ACCESS_TOKEN:
        return config.FIGMA_ACCESS_TOKEN, False
    return None, False

