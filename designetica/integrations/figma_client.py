"""Figma REST API client.

Fetches files, node trees, published components and rendered images using
either a Personal Access Token (``X-FIGMA-TOKEN``) or an OAuth2 access token
(``Authorization: Bearer``).

Environment:
    FIGMA_ACCESS_TOKEN: Figma Personal Access Token (used when no token is passed)

Usage:
    client = FigmaClient()
    nodes = await client.get_file_nodes("6kGd851qaAX4TiL44vpIrO", ["16650:538"])
    images = await client.get_node_images("6kGd851qaAX4TiL44vpIrO", ["16650:539"], fmt="svg")
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from designetica import config
from designetica.settings import FIGMA_HTTP_TIMEOUT

logger = logging.getLogger("designetica.integrations.figma")

FIGMA_API_BASE = "https://api.figma.com"


class FigmaClientError(Exception):
    """Raised when a Figma API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FigmaClient:
    """Async Figma REST API client.

    Args:
        token: Figma PAT or OAuth access token. Falls back to FIGMA_ACCESS_TOKEN.
        oauth: Send the token as an OAuth bearer token instead of a PAT.
        timeout: HTTP request timeout in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        token: Optional[str] = None,
        oauth: bool = False,
        timeout: float = FIGMA_HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._token = token or config.FIGMA_ACCESS_TOKEN
        if not self._token:
            raise FigmaClientError(
                "Figma token not configured. Set FIGMA_ACCESS_TOKEN, complete the "
                "OAuth flow, or pass token= to FigmaClient()."
            )
        self._oauth = oauth
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout
        self._transport = transport

    def _auth_headers(self) -> Dict[str, str]:
        if self._oauth:
            return {"Authorization": f"Bearer {self._token}"}
        return {"X-FIGMA-TOKEN": self._token}

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=FIGMA_API_BASE,
                headers=self._auth_headers(),
                timeout=self._timeout,
                transport=self._transport,
                limits=httpx.Limits(max_connections=5, max_keepalive_connections=3),
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "FigmaClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def _get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """Make a GET request to the Figma API."""
        client = await self._get_client()
        try:
            resp = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise FigmaClientError(f"Figma API timeout: {path}") from e
        except httpx.ConnectError as e:
            raise FigmaClientError(f"Figma API connection error: {path}") from e

        if resp.status_code in (401, 403):
            raise FigmaClientError(
                f"Figma API returned {resp.status_code}. Check that the token is valid "
                "and has file read scope.",
                status_code=resp.status_code,
            )
        if resp.status_code == 404:
            raise FigmaClientError(f"Figma resource not found: {path}", status_code=404)
        if resp.status_code == 429:
            raise FigmaClientError("Figma API rate limit exceeded. Retry later.", status_code=429)
        if resp.status_code != 200:
            raise FigmaClientError(
                f"Figma API error {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise FigmaClientError(f"Figma API returned invalid JSON: {path}") from e

    # ------------------------------------------------------------------
    # Core API methods
    # ------------------------------------------------------------------

    async def get_me(self) -> Dict[str, Any]:
        """GET /v1/me: identity of the token owner (used to test tokens)."""
        return await self._get("/v1/me")

    async def get_file(self, file_key: str, depth: Optional[int] = None) -> Dict[str, Any]:
        """Fetch a whole Figma file (optionally depth-limited)."""
        params = {"depth": str(depth)} if depth else None
        data = await self._get(f"/v1/files/{file_key}", params=params)
        logger.info(f"get_file: file={file_key}, name={data.get('name')!r}")
        return data

    async def get_file_nodes(
        self,
        file_key: str,
        node_ids: List[str],
    ) -> Dict[str, Any]:
        """Fetch specific nodes from a Figma file.

        GET /v1/files/:key/nodes?ids=...
        """
        ids_param = ",".join(node_ids)
        data = await self._get(f"/v1/files/{file_key}/nodes", params={"ids": ids_param})
        logger.info(
            f"get_file_nodes: file={file_key}, requested={len(node_ids)}, "
            f"returned={len(data.get('nodes') or {})}"
        )
        return data

    async def get_file_components(self, file_key: str) -> List[Dict[str, Any]]:
        """Published component metadata for a file.

        GET /v1/files/:key/components
        """
        data = await self._get(f"/v1/files/{file_key}/components")
        components = (data.get("meta") or {}).get("components") or []
        logger.info(f"get_file_components: file={file_key}, components={len(components)}")
        return components

    async def get_node_images(
        self,
        file_key: str,
        node_ids: List[str],
        fmt: str = "png",
        scale: int = 2,
    ) -> Dict[str, Optional[str]]:
        """Render nodes via Figma's image export API.

        GET /v1/images/:key?ids=...&format=png&scale=2
        """
        params: Dict[str, str] = {
            "ids": ",".join(node_ids),
            "format": fmt,
            "scale": str(scale),
        }
        data = await self._get(f"/v1/images/{file_key}", params=params)

        if data.get("err"):
            raise FigmaClientError(f"Figma image render error: {data['err']}")

        images = data.get("images") or {}
        logger.info(
            f"get_node_images: file={file_key}, requested={len(node_ids)}, "
            f"rendered={sum(1 for v in images.values() if v)}"
        )
        return images
