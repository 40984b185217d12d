"""SQLAlchemy ORM models for the Designetica service.

Tables:
- figma_components: Component registry populated by Figma node imports
- figma_oauth_tokens: Access tokens obtained through the Figma OAuth flow
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _gen_uuid() -> str:
    return str(uuid.uuid4())


# ─── Component Registry ──────────────────────────────────────────────


class ComponentModel(Base):
    """Imported Figma component (HTML/CSS plus import metadata).

    The primary key is the Figma node id, so re-importing a node replaces
    the previous record instead of duplicating it.
    """

    __tablename__ = "figma_components"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    html: Mapped[str] = mapped_column(Text, nullable=False, default="")
    css: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    file_key: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    component_metadata: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON, nullable=True,
        comment="kind, category, figmaUrl, imageUrl, designTokens ...",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    __table_args__ = (
        Index("ix_figma_components_category", "category"),
        Index("ix_figma_components_file_key", "file_key"),
    )


# ─── OAuth Tokens ────────────────────────────────────────────────────


class OAuthTokenModel(Base):
    """Figma OAuth token set. The newest row is the active token."""

    __tablename__ = "figma_oauth_tokens"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_gen_uuid)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    scope: Mapped[str] = mapped_column(String(128), nullable=False, default="file_read")
    expires_in: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )

    __table_args__ = (
        Index("ix_figma_oauth_tokens_created_at", "created_at"),
    )
