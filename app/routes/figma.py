"""Figma import endpoints and the component registry.

- POST /api/figma/components     list a file's frames/components (+ wireframe page)
- POST /api/figma/import-node    import one node as HTML/CSS and store it
- GET  /api/figma/registry       list stored components
- GET  /api/figma/registry/{id}  fetch one stored component
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.dependencies import resolve_figma_token
from app.models.db import ComponentModel
from app.repositories.component import ComponentRepository
from designetica.integrations.figma_client import FigmaClient
from designetica.integrations.figma_importer import FigmaImporter, FigmaImportError
from designetica.integrations.figma_urls import parse_figma_url

logger = logging.getLogger("designetica.routes.figma")

router = APIRouter(prefix="/api/figma", tags=["figma"])

_STATUS_BY_CODE = {
    FigmaImportError.INVALID_URL: 400,
    FigmaImportError.MISSING_TOKEN: 401,
    FigmaImportError.NODE_NOT_FOUND: 404,
    FigmaImportError.FIGMA_API_ERROR: 502,
}


# --- Schemas ---


class FigmaComponentsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_url: Optional[str] = Field(None, alias="fileUrl")
    file_key: Optional[str] = Field(None, alias="fileKey")
    generate_wireframe: bool = Field(True, alias="generateWireframe")
    token: Optional[str] = Field(None, description="Optional Figma token override")


class ImportNodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    figma_url: str = Field(..., alias="figmaUrl")
    include_image: bool = Field(True, alias="includeImage")
    token: Optional[str] = None


class ComponentResponse(BaseModel):
    id: str
    name: str
    html: str
    css: str
    category: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    updatedAt: Optional[str] = None


class RegistryListResponse(BaseModel):
    items: List[ComponentResponse]
    total: int
    page: int
    pageSize: int


def _component_to_response(c: ComponentModel) -> ComponentResponse:
    return ComponentResponse(
        id=c.id,
        name=c.name,
        html=c.html,
        css=c.css,
        category=c.category,
        metadata=c.component_metadata or {},
        updatedAt=c.updated_at.isoformat() if c.updated_at else None,
    )


def _import_error(e: FigmaImportError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_CODE.get(e.code, 502),
        detail=e.to_dict(),
    )


async def _client_for(explicit: Optional[str], session: AsyncSession) -> FigmaClient:
    token, is_oauth = await resolve_figma_token(explicit, session)
    if not token:
        raise HTTPException(
            status_code=401,
            detail={
                "code": FigmaImportError.MISSING_TOKEN,
                "message": "No Figma token available. Complete the OAuth flow or set FIGMA_ACCESS_TOKEN.",
            },
        )
    return FigmaClient(token=token, oauth=is_oauth)


# --- Routes ---


@router.post("/components")
async def figma_components(
    req: FigmaComponentsRequest,
    session: AsyncSession = Depends(get_session),
):
    """List frames and components of a Figma file."""
    file_key = req.file_key
    if not file_key and req.file_url:
        info = parse_figma_url(req.file_url)
        file_key = info.file_key if info else None
    if not file_key:
        raise HTTPException(status_code=400, detail="fileUrl or fileKey is required")

    client = await _client_for(req.token, session)
    try:
        result = await FigmaImporter(client).import_file(file_key, req.generate_wireframe)
    except FigmaImportError as e:
        raise _import_error(e) from e
    finally:
        await client.close()

    return {
        "success": True,
        "file": {"key": result.file_key, "name": result.file_name},
        "frames": result.frames,
        "components": result.components,
        "wireframeHtml": result.wireframe_html,
    }


@router.post("/import-node", response_model=ComponentResponse, status_code=201)
async def import_node(
    req: ImportNodeRequest,
    session: AsyncSession = Depends(get_session),
):
    """Import one Figma node and store it in the registry (replacing by id)."""
    if parse_figma_url(req.figma_url) is None:
        raise _import_error(
            FigmaImportError(FigmaImportError.INVALID_URL, "Invalid Figma URL format")
        )

    client = await _client_for(req.token, session)
    try:
        record = await FigmaImporter(client).import_node(req.figma_url, req.include_image)
    except FigmaImportError as e:
        raise _import_error(e) from e
    finally:
        await client.close()

    stored = await ComponentRepository(session).upsert(
        component_id=record.id,
        name=record.name,
        html=record.html,
        css=record.css,
        metadata=record.metadata,
    )
    logger.info(f"import_node: stored component {stored.id} ({stored.name!r})")
    return _component_to_response(stored)


@router.get("/registry", response_model=RegistryListResponse)
async def list_registry(
    category: Optional[str] = None,
    page: int = 1,
    page_size: int = 50,
    session: AsyncSession = Depends(get_session),
):
    page = max(1, page)
    page_size = max(1, min(page_size, 200))
    items, total = await ComponentRepository(session).list(category, page, page_size)
    return RegistryListResponse(
        items=[_component_to_response(c) for c in items],
        total=total,
        page=page,
        pageSize=page_size,
    )


@router.get("/registry/{component_id:path}", response_model=ComponentResponse)
async def get_registry_component(
    component_id: str,
    session: AsyncSession = Depends(get_session),
):
    component = await ComponentRepository(session).get(component_id)
    if component is None:
        raise HTTPException(status_code=404, detail=f"Component {component_id} not found")
    return _component_to_response(component)
