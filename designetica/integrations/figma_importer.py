"""Import Figma nodes and files as HTML/CSS components.

``import_node`` resolves a share URL to a single component record:
metadata from the file's published components, the node tree from the
nodes endpoint, and optionally an SVG rendering for reference.
``import_file`` lists a file's frames and components and builds a
wireframe page from frame renderings.

All failures surface as ``FigmaImportError`` with a machine-readable code.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .component_classifier import categorize
from .figma_client import FigmaClient, FigmaClientError
from .figma_converter import classify_token, frames_to_wireframe_html, token_to_css, token_to_html
from .figma_tokens import extract_design_tokens
from .figma_urls import parse_figma_url

logger = logging.getLogger("designetica.integrations.figma_importer")

FRAME_TYPES = frozenset({"FRAME", "COMPONENT", "COMPONENT_SET"})
MAX_FRAMES = 50


class FigmaImportError(Exception):
    """Structured import failure."""

    INVALID_URL = "INVALID_URL"
    MISSING_TOKEN = "MISSING_TOKEN"
    NODE_NOT_FOUND = "NODE_NOT_FOUND"
    FIGMA_API_ERROR = "FIGMA_API_ERROR"

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


@dataclass
class ComponentRecord:
    id: str
    name: str
    html: str
    css: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FigmaFileImport:
    file_key: str
    file_name: str
    frames: List[Dict[str, Any]]
    components: List[Dict[str, Any]]
    wireframe_html: Optional[str] = None


def find_frames(node: Dict[str, Any], limit: int = MAX_FRAMES) -> List[Dict[str, Any]]:
    """Collect the outermost FRAME/COMPONENT nodes below ``node``."""
    frames: List[Dict[str, Any]] = []

    def _walk(current: Dict[str, Any], page: str) -> None:
        if len(frames) >= limit:
            return
        if current.get("type") in FRAME_TYPES:
            bounds = current.get("absoluteBoundingBox") or {}
            frames.append({
                "id": current.get("id"),
                "name": current.get("name"),
                "type": current.get("type"),
                "page": page,
                "width": bounds.get("width"),
                "height": bounds.get("height"),
            })
            return
        for child in current.get("children") or []:
            _walk(child, page)

    for page in node.get("children") or []:
        _walk(page, page.get("name") or "")
    return frames


class FigmaImporter:
    """Import helpers bound to one ``FigmaClient``."""

    def __init__(self, client: FigmaClient):
        self.client = client

    async def _component_metadata(self, file_key: str, node_id: str) -> Optional[Dict[str, Any]]:
        try:
            components = await self.client.get_file_components(file_key)
        except FigmaClientError as e:
            if e.status_code == 404:
                raise FigmaImportError(FigmaImportError.NODE_NOT_FOUND, str(e)) from e
            logger.warning(f"import_node: component metadata unavailable: {e}")
            return None
        return next((c for c in components if c.get("node_id") == node_id), None)

    async def _node_document(
        self, file_key: str, node_id: str, meta: Optional[Dict[str, Any]]
    ) -> Dict[str, Any]:
        try:
            data = await self.client.get_file_nodes(file_key, [node_id])
        except FigmaClientError as e:
            # Restricted scopes reject the nodes endpoint; published metadata still describes the node
            if meta is not None and e.status_code in (401, 403):
                logger.warning(f"import_node: node tree unavailable, using metadata only: {e}")
                return {"id": node_id, "name": meta.get("name") or node_id, "type": "COMPONENT"}
            raise FigmaImportError(FigmaImportError.FIGMA_API_ERROR, str(e)) from e

        entry = (data.get("nodes") or {}).get(node_id) or {}
        document = entry.get("document")
        if not document:
            raise FigmaImportError(
                FigmaImportError.NODE_NOT_FOUND,
                f"Node {node_id} not found in file {file_key}",
            )
        return document

    async def import_node(self, figma_url: str, include_image: bool = True) -> ComponentRecord:
        info = parse_figma_url(figma_url)
        if info is None:
            raise FigmaImportError(FigmaImportError.INVALID_URL, "Invalid Figma URL format")
        if not info.node_id:
            raise FigmaImportError(
                FigmaImportError.INVALID_URL, "Figma URL must include a node-id parameter"
            )

        meta = await self._component_metadata(info.file_key, info.node_id)
        document = await self._node_document(info.file_key, info.node_id, meta)

        image_url = None
        if include_image:
            try:
                images = await self.client.get_node_images(
                    info.file_key, [info.node_id], fmt="svg", scale=2
                )
                image_url = images.get(info.node_id)
            except FigmaClientError as e:
                logger.warning(f"import_node: could not fetch component image: {e}")

        tokens = extract_design_tokens(document)
        kind = classify_token(tokens)
        logger.info(
            f"import_node: file={info.file_key}, node={info.node_id}, "
            f"name={tokens.name!r}, kind={kind.value}"
        )
        return ComponentRecord(
            id=info.node_id,
            name=tokens.name,
            html=token_to_html(tokens),
            css=token_to_css(tokens),
            metadata={
                "description": (meta or {}).get("description") or "Component from Figma",
                "kind": kind.value,
                "category": categorize(tokens.name, kind),
                "figmaUrl": figma_url,
                "fileKey": info.file_key,
                "nodeId": info.node_id,
                "imageUrl": image_url,
                "designTokens": tokens.to_dict(),
            },
        )

    async def import_file(self, file_key: str, generate_wireframe: bool = True) -> FigmaFileImport:
        try:
            data = await self.client.get_file(file_key)
        except FigmaClientError as e:
            code = (
                FigmaImportError.NODE_NOT_FOUND if e.status_code == 404
                else FigmaImportError.FIGMA_API_ERROR
            )
            raise FigmaImportError(code, str(e)) from e

        frames = find_frames(data.get("document") or {})
        components = [
            {
                "key": key,
                "name": comp.get("name"),
                "description": comp.get("description", ""),
            }
            for key, comp in (data.get("components") or {}).items()
        ]

        wireframe_html = None
        if generate_wireframe:
            image_urls: Dict[str, Optional[str]] = {}
            ids = [f["id"] for f in frames if f.get("id")]
            if ids:
                try:
                    image_urls = await self.client.get_node_images(file_key, ids, fmt="png", scale=1)
                except FigmaClientError as e:
                    logger.warning(f"import_file: frame images unavailable: {e}")
            wireframe_html = frames_to_wireframe_html(data.get("name") or file_key, frames, image_urls)

        logger.info(
            f"import_file: file={file_key}, frames={len(frames)}, components={len(components)}"
        )
        return FigmaFileImport(
            file_key=file_key,
            file_name=data.get("name") or "",
            frames=frames,
            components=components,
            wireframe_html=wireframe_html,
        )
