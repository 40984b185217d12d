"""Tests for ComponentRepository (app/repositories/component.py).

Covers upsert-by-id, lookup, filtering, pagination and delete.
Uses in-memory SQLite via conftest fixtures.
"""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.component import ComponentRepository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _upsert(
    session: AsyncSession,
    component_id: str = "1:234",
    name: str = "Primary Button",
    category: str = "Actions",
    **metadata,
):
    repo = ComponentRepository(session)
    return await repo.upsert(
        component_id=component_id,
        name=name,
        html=f'<button class="figma-button">{name}</button>',
        css=".figma-button { cursor: pointer; }",
        metadata={"category": category, "fileKey": "FILE123", **metadata},
    )


# ---------------------------------------------------------------------------
# Upsert
# ---------------------------------------------------------------------------


class TestUpsert:

    @pytest.mark.asyncio
    async def test_insert(self, test_session: AsyncSession):
        component = await _upsert(test_session, kind="button")

        assert component.id == "1:234"
        assert component.name == "Primary Button"
        assert component.category == "Actions"
        assert component.file_key == "FILE123"
        assert component.component_metadata["kind"] == "button"
        assert component.created_at is not None

    @pytest.mark.asyncio
    async def test_same_id_replaces_record(self, test_session: AsyncSession):
        first = await _upsert(test_session, name="Old Button")
        created_at = first.created_at

        second = await _upsert(test_session, name="New Button", category="Navigation")

        repo = ComponentRepository(test_session)
        items, total = await repo.list()
        assert total == 1
        assert second.name == "New Button"
        assert second.category == "Navigation"
        assert second.html == '<button class="figma-button">New Button</button>'
        assert second.created_at == created_at

    @pytest.mark.asyncio
    async def test_upsert_returns_current_row_from_identity_map(self, test_session: AsyncSession):
        first = await _upsert(test_session, name="Old Button")

        second = await _upsert(test_session, name="New Button")

        assert second is first
        assert first.name == "New Button"
        assert (await ComponentRepository(test_session).get("1:234")).name == "New Button"

    @pytest.mark.asyncio
    async def test_metadata_optional(self, test_session: AsyncSession):
        repo = ComponentRepository(test_session)
        component = await repo.upsert("9:9", "Bare", "<div></div>", "")
        assert component.category is None
        assert component.component_metadata == {}


# ---------------------------------------------------------------------------
# Read / list / delete
# ---------------------------------------------------------------------------


class TestQueries:

    @pytest.mark.asyncio
    async def test_get_missing(self, test_session: AsyncSession):
        assert await ComponentRepository(test_session).get("nope") is None

    @pytest.mark.asyncio
    async def test_list_filter_by_category(self, test_session: AsyncSession):
        await _upsert(test_session, "1:1", "Button A", "Actions")
        await _upsert(test_session, "1:2", "Card A", "Cards")
        await _upsert(test_session, "1:3", "Button B", "Actions")

        items, total = await ComponentRepository(test_session).list(category="Actions")

        assert total == 2
        assert {c.id for c in items} == {"1:1", "1:3"}

    @pytest.mark.asyncio
    async def test_list_pagination(self, test_session: AsyncSession):
        for i in range(5):
            await _upsert(test_session, f"2:{i}", f"Item {i}")

        repo = ComponentRepository(test_session)
        page1, total = await repo.list(page=1, page_size=2)
        page3, _ = await repo.list(page=3, page_size=2)

        assert total == 5
        assert len(page1) == 2
        assert len(page3) == 1

    @pytest.mark.asyncio
    async def test_delete(self, test_session: AsyncSession):
        await _upsert(test_session)
        repo = ComponentRepository(test_session)

        assert await repo.delete("1:234") is True
        assert await repo.get("1:234") is None
        assert await repo.delete("1:234") is False
