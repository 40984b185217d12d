"""Repository layer for stored Figma OAuth tokens."""

from __future__ import annotations

from datetime import timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.db import OAuthTokenModel
from designetica.integrations.figma_oauth import OAuthTokenSet


def _to_token_set(row: OAuthTokenModel) -> OAuthTokenSet:
    expires_at = row.expires_at
    # SQLite drops tzinfo on round-trip
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return OAuthTokenSet(
        access_token=row.access_token,
        expires_in=row.expires_in,
        expires_at=expires_at,
        scope=row.scope,
        refresh_token=row.refresh_token,
        user_id=row.user_id,
    )


class OAuthTokenRepository:
    """Data access layer for the active Figma OAuth token."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, token: OAuthTokenSet) -> OAuthTokenModel:
        """Store a new token set, replacing any previous one."""
        await self.session.execute(delete(OAuthTokenModel))
        row = OAuthTokenModel(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            scope=token.scope,
            expires_in=token.expires_in,
            expires_at=token.expires_at,
            user_id=token.user_id,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_latest(self) -> Optional[OAuthTokenSet]:
        result = await self.session.execute(
            select(OAuthTokenModel).order_by(OAuthTokenModel.created_at.desc()).limit(1)
        )
        row = result.scalar_one_or_none()
        return _to_token_set(row) if row is not None else None

    async def clear(self) -> None:
        await self.session.execute(delete(OAuthTokenModel))
        await self.session.flush()
