"""Repository layer for the Figma component registry.

Writes are upserts keyed by component id (the Figma node id). Each upsert is
a single INSERT ... ON CONFLICT statement, so concurrent imports of the same
node cannot lose updates through a read-modify-write race.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.db import ComponentModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ComponentRepository:
    """Data access layer for imported components."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def upsert(
        self,
        component_id: str,
        name: str,
        html: str,
        css: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ComponentModel:
        """Insert a component or replace the existing record with the same id.

        Args:
            component_id: Figma node id (e.g., "1:234")
            name: Component display name
            html: Generated HTML markup
            css: Generated CSS rules
            metadata: Import metadata (kind, category, figmaUrl, designTokens...)

        Returns:
            The stored ComponentModel
        """
        metadata = metadata or {}
        now = _utcnow()
        values = {
            "id": component_id,
            "name": name,
            "html": html,
            "css": css,
            "category": metadata.get("category"),
            "file_key": metadata.get("fileKey"),
            "component_metadata": metadata,
            "created_at": now,
            "updated_at": now,
        }
        stmt = sqlite_insert(ComponentModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[ComponentModel.id],
            set_={
                "name": stmt.excluded.name,
                "html": stmt.excluded.html,
                "css": stmt.excluded.css,
                "category": stmt.excluded.category,
                "file_key": stmt.excluded.file_key,
                "component_metadata": stmt.excluded.component_metadata,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.session.execute(stmt)
        await self.session.flush()

        result = await self.session.execute(
            select(ComponentModel)
            .where(ComponentModel.id == component_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def get(self, component_id: str) -> Optional[ComponentModel]:
        """Get a component by id."""
        stmt = select(ComponentModel).where(ComponentModel.id == component_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        category: Optional[str] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> Tuple[List[ComponentModel], int]:
        """List components, newest first.

        Returns:
            Tuple of (components, total_count)
        """
        query = select(ComponentModel)
        count_query = select(func.count()).select_from(ComponentModel)
        if category:
            query = query.where(ComponentModel.category == category)
            count_query = count_query.where(ComponentModel.category == category)

        total = (await self.session.execute(count_query)).scalar() or 0
        query = (
            query.order_by(ComponentModel.updated_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def delete(self, component_id: str) -> bool:
        component = await self.get(component_id)
        if component is None:
            return False
        await self.session.delete(component)
        await self.session.flush()
        return True
