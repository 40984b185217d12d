"""HTML post-processing for AI output.

Cleans the raw completion text into a bare HTML document and applies the
optional design-system passes (branding filter, header/hero/footer
injection, button substitution). ``post_process`` never raises: if a pass
fails, the raw input is returned unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from . import components
from .content_filter import ContentFilter

logger = logging.getLogger("designetica.generation.postprocess")

DOCTYPE = "<!DOCTYPE html>"

_FENCE_OPEN_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?\s*```\s*$")
_DOCTYPE_RE = re.compile(r"<!DOCTYPE\s+html[^>]*>", re.IGNORECASE)
_HTML_OPEN_RE = re.compile(r"<html\b", re.IGNORECASE)
_HTML_CLOSE_RE = re.compile(r"</html\s*>", re.IGNORECASE)
_HTML_LIKE_RE = re.compile(r"<(?:html|head|body|div|section|main|header|!DOCTYPE)\b", re.IGNORECASE)
_BODY_OPEN_RE = re.compile(r"<body\b[^>]*>", re.IGNORECASE)
_BODY_CLOSE_RE = re.compile(r"</body\s*>", re.IGNORECASE)
_HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)
_HEADER_CLOSE_RE = re.compile(r"</header\s*>", re.IGNORECASE)
_BUTTON_RE = re.compile(r"<button\b([^>]*)>", re.IGNORECASE)
_CLASS_ATTR_RE = re.compile(r"""\bclass\s*=\s*(["'])(.*?)\1""", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class PostProcessContext:
    description: str = ""
    color_scheme: str = "primary"
    inject_navigation: bool = False
    inject_hero: bool = False
    inject_footer: bool = False
    substitute_buttons: bool = False
    content_filter: Optional[ContentFilter] = None


def strip_wrappers(raw: str) -> str:
    """Remove markdown fences and stray quotes around the HTML."""
    text = raw.strip()
    text = _FENCE_OPEN_RE.sub("", text, count=1)
    text = _FENCE_CLOSE_RE.sub("", text, count=1)
    return text.strip().strip("\"'`").strip()


def ensure_doctype(html: str) -> str:
    """Make HTML-like content start with a DOCTYPE and end at ``</html>``."""
    if not _HTML_LIKE_RE.search(html):
        return html

    start = _DOCTYPE_RE.search(html) or _HTML_OPEN_RE.search(html)
    if start is not None:
        html = html[start.start():]
    closes = list(_HTML_CLOSE_RE.finditer(html))
    if closes:
        html = html[:closes[-1].end()]

    if not _DOCTYPE_RE.match(html):
        html = f"{DOCTYPE}\n{html}"
    return html


def _insert_after_body_open(html: str, snippet: str) -> str:
    m = _BODY_OPEN_RE.search(html)
    if m is None:
        return html + "\n" + snippet
    return html[:m.end()] + "\n" + snippet + html[m.end():]


def inject_navigation(html: str, ctx: PostProcessContext) -> str:
    if components.SITE_NAV_MARKER in html or re.search(r"<(header|nav)\b", html, re.IGNORECASE):
        return html
    return _insert_after_body_open(html, components.site_header(ctx.color_scheme))


def inject_hero(html: str, ctx: PostProcessContext) -> str:
    if not components.wants_hero(ctx.description):
        return html
    if components.HERO_MARKER in html or re.search(r"""class=["'][^"']*\bhero\b""", html, re.IGNORECASE):
        return html
    snippet = components.hero_section(ctx.description, ctx.color_scheme)
    m = _HEADER_CLOSE_RE.search(html)
    if m is not None:
        return html[:m.end()] + "\n" + snippet + html[m.end():]
    return _insert_after_body_open(html, snippet)


def inject_footer(html: str, ctx: PostProcessContext) -> str:
    if re.search(r"<footer\b", html, re.IGNORECASE):
        return html
    snippet = components.site_footer()
    m = _BODY_CLOSE_RE.search(html)
    if m is None:
        return html + "\n" + snippet
    return html[:m.start()] + snippet + "\n" + html[m.start():]


def substitute_buttons(html: str, ctx: PostProcessContext) -> str:
    """Give plain ``<button>`` elements the design-system ``btn`` classes."""

    def _upgrade(m: re.Match) -> str:
        attrs = m.group(1)
        cls = _CLASS_ATTR_RE.search(attrs)
        if cls is None:
            return f'<button class="btn btn-primary"{attrs}>'
        classes = cls.group(2).split()
        if "btn" in classes:
            return m.group(0)
        new_attr = f'class={cls.group(1)}{" ".join(["btn", *classes])}{cls.group(1)}'
        return f"<button{attrs[:cls.start()]}{new_attr}{attrs[cls.end():]}>"

    html, count = _BUTTON_RE.subn(_upgrade, html)
    if count and 'data-ds-component="button-styles"' not in html:
        head_close = _HEAD_CLOSE_RE.search(html)
        if head_close is not None:
            styles = components.button_styles(ctx.color_scheme)
            html = html[:head_close.start()] + styles + "\n" + html[head_close.start():]
    return html


def post_process(raw_html: str, context: Optional[PostProcessContext] = None) -> str:
    """Clean AI output. Returns ``raw_html`` unchanged if any pass fails."""
    ctx = context or PostProcessContext()
    try:
        html = ensure_doctype(strip_wrappers(raw_html))
        if ctx.content_filter is not None:
            html = ctx.content_filter.filter_html(html)
        if ctx.inject_navigation:
            html = inject_navigation(html, ctx)
        if ctx.inject_hero:
            html = inject_hero(html, ctx)
        if ctx.inject_footer:
            html = inject_footer(html, ctx)
        if ctx.substitute_buttons:
            html = substitute_buttons(html, ctx)
        return html
    except Exception as e:
        logger.warning(f"post_process: returning raw input after failure: {e}")
        return raw_html
