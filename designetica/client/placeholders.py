"""Client-side HTML cleanup applied to wireframes received from the backend."""

from __future__ import annotations

import re
from urllib.parse import quote

PLACEHOLDER_HOST = "placehold.co"
DEFAULT_IMAGE_SIZE = (300, 200)

SAMPLE_HEADING = "<h2>Sample Heading</h2>"
SAMPLE_PARAGRAPH = (
    "<p>This is sample content that demonstrates how text will appear "
    "in this section of the layout.</p>"
)

ICON_GLYPHS = {
    "search": "&#128269;",
    "home": "&#8962;",
    "user": "&#128100;",
    "menu": "&#9776;",
    "close": "&#10005;",
    "check": "&#10003;",
    "star": "&#9733;",
    "mail": "&#9993;",
    "settings": "&#9881;",
    "arrow-right": "&#8594;",
}
DEFAULT_ICON_GLYPH = "&#9679;"

_DOCTYPE_SPAN_RE = re.compile(r"<!DOCTYPE html>.*</html>", re.IGNORECASE | re.DOTALL)
_FENCE_OPEN_RE = re.compile(r"^\s*```(?:html)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```\s*$")
_IMG_RE = re.compile(r"<img\b([^>]*?)\s*/?>", re.IGNORECASE)
_ATTR_RE_TEMPLATE = r"""(?<![\w-]){name}\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))"""
_PLACEHOLDER_ELEMENT_RE = re.compile(
    r"<(?P<tag>div|span|p)\b[^>]*class=[\"'][^\"']*"
    r"\btext-placeholder-(?P<kind>heading|line)\b[^\"']*[\"'][^>]*>.*?</(?P=tag)>",
    re.IGNORECASE | re.DOTALL,
)
_ICON_TOKEN_RE = re.compile(r"\[icon:([a-z0-9-]+)\]", re.IGNORECASE)


def ensure_html_string(content: object) -> str:
    """Coerce a backend payload into a bare HTML document string."""
    if content is None:
        return ""
    text = content if isinstance(content, str) else str(content)

    match = _DOCTYPE_SPAN_RE.search(text)
    if match:
        return match.group(0)

    text = _FENCE_OPEN_RE.sub("", text)
    text = _FENCE_CLOSE_RE.sub("", text)
    return text.strip().strip("\"'").strip()


def _attr(attrs: str, name: str) -> str | None:
    m = re.search(_ATTR_RE_TEMPLATE.format(name=name), attrs, re.IGNORECASE)
    if not m:
        return None
    return next(g for g in m.groups() if g is not None)


def placeholder_image_url(width: int, height: int, text: str) -> str:
    return f"https://{PLACEHOLDER_HOST}/{width}x{height}/f3f2f1/323130?text={quote(text or 'Image')}"


def _repair_img(match: re.Match) -> str:
    attrs = match.group(1)
    src = _attr(attrs, "src")

    if src and "via.placeholder.com" in src:
        fixed = src.replace("via.placeholder.com", PLACEHOLDER_HOST)
        return match.group(0).replace(src, fixed, 1)

    if src and (src.startswith("data:") or src.startswith(("http://", "https://"))):
        return match.group(0)

    width = _attr(attrs, "width") or ""
    height = _attr(attrs, "height") or ""
    w = int(width) if width.isdigit() else DEFAULT_IMAGE_SIZE[0]
    h = int(height) if height.isdigit() else DEFAULT_IMAGE_SIZE[1]
    url = placeholder_image_url(w, h, _attr(attrs, "alt") or "Image")

    if src is None:
        return f'<img src="{url}"{attrs}>'
    cleaned = re.sub(
        _ATTR_RE_TEMPLATE.format(name="src"), f'src="{url}"', attrs, count=1, flags=re.IGNORECASE
    )
    return f"<img{cleaned}>"


def repair_image_placeholders(html: str) -> str:
    """Replace broken, relative or missing image sources with placehold.co URLs."""
    return _IMG_RE.sub(_repair_img, html)


def substitute_icon_placeholders(html: str) -> str:
    """Swap text/icon placeholder markup for renderable sample content."""

    def _element(m: re.Match) -> str:
        return SAMPLE_HEADING if m.group("kind").lower() == "heading" else SAMPLE_PARAGRAPH

    def _icon(m: re.Match) -> str:
        name = m.group(1).lower()
        glyph = ICON_GLYPHS.get(name, DEFAULT_ICON_GLYPH)
        return f'<span class="icon icon-{name}" aria-hidden="true">{glyph}</span>'

    html = _PLACEHOLDER_ELEMENT_RE.sub(_element, html)
    return _ICON_TOKEN_RE.sub(_icon, html)


def post_process_client_html(content: object) -> str:
    html = ensure_html_string(content)
    html = repair_image_placeholders(html)
    return substitute_icon_placeholders(html)
