"""HTTP client wrapper used by the orchestrator and backend detector.

Wraps httpx.AsyncClient with a per-call timeout, JSON coercion, and a single
exception type for every failure mode (HTTP status, network, timeout,
malformed body), so callers only need to decide whether to retry.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("designetica.client.http")


class ApiError(Exception):
    """Raised when an API call fails for any reason.

    Attributes:
        status_code: HTTP status, or None for network/timeout/decode failures.
        body: Decoded JSON body when the server returned one.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ApiTimeoutError(ApiError):
    """Raised when a request exceeds its timeout."""


class ApiClient:
    """Async JSON API client.

    Args:
        base_url: Prefix for relative paths. Absolute URLs bypass it.
        timeout: Default request timeout in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        url: str,
        payload: Any = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ApiTimeoutError: the request exceeded ``timeout``.
            ApiError: connection failure, non-2xx status, or a body that is
                not valid JSON.
        """
        client = await self._get_client()
        try:
            resp = await client.request(
                method,
                url,
                json=payload,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except httpx.TimeoutException as e:
            raise ApiTimeoutError(f"Request timed out: {method} {url}") from e
        except httpx.HTTPError as e:
            raise ApiError(f"Network error: {method} {url}: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not resp.is_success:
            detail = ""
            if isinstance(body, dict):
                detail = str(body.get("error") or body.get("detail") or "")
            raise ApiError(
                f"HTTP {resp.status_code}: {detail or resp.text[:200]}",
                status_code=resp.status_code,
                body=body,
            )

        if body is None:
            raise ApiError(
                f"Malformed JSON response from {method} {url}",
                status_code=resp.status_code,
            )
        return body

    async def get_json(self, url: str, timeout: Optional[float] = None) -> Any:
        return await self.request("GET", url, timeout=timeout)

    async def post_json(
        self, url: str, payload: Any, timeout: Optional[float] = None
    ) -> Any:
        return await self.request("POST", url, payload=payload, timeout=timeout)
