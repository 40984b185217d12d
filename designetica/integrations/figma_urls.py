"""Parse Figma share URLs into (file key, node id)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote

_FILE_KEY_RE = re.compile(r"figma\.com/(design|file|proto)/([a-zA-Z0-9]+)")
_NODE_ID_RE = re.compile(r"[?&]node-id=([^&#]+)")


@dataclass(frozen=True)
class FigmaUrlInfo:
    file_key: str
    node_id: Optional[str]
    kind: str


def normalize_node_id(raw: str) -> str:
    """``1-234`` (URL form) -> ``1:234`` (API form)."""
    return unquote(raw).replace("-", ":")


def parse_figma_url(url: object) -> Optional[FigmaUrlInfo]:
    """Extract the file key and node id from a design/file/proto URL.

    Returns None for anything that is not a recognizable Figma URL.
    """
    if not isinstance(url, str) or not url:
        return None
    m = _FILE_KEY_RE.search(url)
    if not m:
        return None
    node = _NODE_ID_RE.search(url)
    node_id = normalize_node_id(node.group(1)) if node else None
    return FigmaUrlInfo(file_key=m.group(2), node_id=node_id or None, kind=m.group(1))
