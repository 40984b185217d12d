"""Design tokens -> HTML/CSS, and Figma frames -> wireframe page.

Each token is rendered by a small dispatch on its ``ComponentKind``. Class
names are ``figma-<kind>-<node id>`` so the generated CSS targets exactly the
imported node.
"""

from __future__ import annotations

import re
from html import escape
from typing import Any, Callable, Dict, List, Optional

from .component_classifier import ComponentKind, classify_component
from .figma_tokens import DesignToken


def _safe_id(node_id: str) -> str:
    return re.sub(r"[^a-zA-Z0-9_-]", "-", node_id) or "node"


def css_class(token: DesignToken, kind: Optional[ComponentKind] = None) -> str:
    kind = kind or classify_token(token)
    return f"figma-{kind.value}-{_safe_id(token.id)}"


def classify_token(token: DesignToken) -> ComponentKind:
    return classify_component(token.name, token.type, token.has_image_fill)


def collect_text(token: DesignToken) -> str:
    """Concatenate the text content of a token subtree."""
    return " ".join(t.text.strip() for t in token.walk() if t.text.strip())


def text_tag(token: DesignToken) -> str:
    typo = token.typography
    if typo is None:
        return "p"
    if typo.font_size > 24 or typo.font_weight > 600:
        return "h3"
    if typo.font_size > 18:
        return "h4"
    return "p"


# --- HTML rendering ---


def _children_html(token: DesignToken) -> str:
    return "\n".join(token_to_html(child) for child in token.children)


def _render_button(token: DesignToken, cls: str) -> str:
    label = escape(collect_text(token) or token.name)
    return f'<button class="{cls}" type="button">{label}</button>'


def _render_card(token: DesignToken, cls: str) -> str:
    return f'<div class="{cls}">\n{_children_html(token)}\n</div>'


def _render_input(token: DesignToken, cls: str) -> str:
    placeholder = escape(collect_text(token) or token.name, quote=True)
    return f'<input class="{cls}" type="text" placeholder="{placeholder}">'


def _render_text(token: DesignToken, cls: str) -> str:
    tag = text_tag(token)
    return f'<{tag} class="{cls}">{escape(token.text or token.name)}</{tag}>'


def _render_hero(token: DesignToken, cls: str) -> str:
    return f'<section class="{cls}">\n{_children_html(token)}\n</section>'


def _render_image(token: DesignToken, cls: str) -> str:
    w = int(token.width or 300)
    h = int(token.height or 200)
    alt = escape(token.name, quote=True)
    return f'<img class="{cls}" src="https://placehold.co/{w}x{h}" alt="{alt}" width="{w}" height="{h}">'


def _render_generic(token: DesignToken, cls: str) -> str:
    return f'<div class="{cls}">\n{_children_html(token)}\n</div>'


RENDERERS: Dict[ComponentKind, Callable[[DesignToken, str], str]] = {
    ComponentKind.BUTTON: _render_button,
    ComponentKind.CARD: _render_card,
    ComponentKind.INPUT: _render_input,
    ComponentKind.TEXT: _render_text,
    ComponentKind.HERO: _render_hero,
    ComponentKind.IMAGE: _render_image,
    ComponentKind.GENERIC: _render_generic,
}


def token_to_html(token: DesignToken) -> str:
    kind = classify_token(token)
    return RENDERERS[kind](token, css_class(token, kind))


# --- CSS rendering ---


def token_css_rules(token: DesignToken) -> Dict[str, str]:
    rules: Dict[str, str] = {}
    kind = classify_token(token)
    if token.width and kind not in (ComponentKind.TEXT, ComponentKind.GENERIC):
        rules["width"] = f"{token.width:g}px"
    if token.height and kind in (ComponentKind.BUTTON, ComponentKind.INPUT, ComponentKind.IMAGE):
        rules["height"] = f"{token.height:g}px"
    if token.fills and kind != ComponentKind.TEXT:
        rules["background"] = token.fills[0].to_css()
    if token.strokes:
        rules["border"] = f"{token.stroke_weight:g}px solid {token.strokes[0].to_css()}"
    elif kind == ComponentKind.BUTTON:
        rules["border"] = "none"
    if token.corner_radius:
        rules["border-radius"] = f"{token.corner_radius:g}px"
    if token.padding is not None:
        rules["padding"] = token.padding.to_css()
    if token.typography is not None:
        t = token.typography
        rules["font-family"] = f"'{t.font_family}', sans-serif" if t.font_family != "inherit" else "inherit"
        rules["font-size"] = f"{t.font_size:g}px"
        rules["font-weight"] = str(t.font_weight)
        rules["line-height"] = t.line_height
        rules["text-align"] = t.text_align
        rules["color"] = t.color
    if kind == ComponentKind.BUTTON:
        rules["cursor"] = "pointer"
    return rules


def token_to_css(token: DesignToken) -> str:
    """CSS for every node of the token tree, one rule block per node."""
    blocks: List[str] = []
    for node in token.walk():
        rules = token_css_rules(node)
        if not rules:
            continue
        body = "\n".join(f"  {prop}: {value};" for prop, value in rules.items())
        blocks.append(f".{css_class(node)} {{\n{body}\n}}")
    return "\n\n".join(blocks)


# --- Frames -> wireframe page ---


def frames_to_wireframe_html(
    file_name: str,
    frames: List[Dict[str, Any]],
    image_urls: Optional[Dict[str, Optional[str]]] = None,
) -> str:
    """Build a browsable HTML page listing frames with their rendered images."""
    image_urls = image_urls or {}
    sections = []
    for frame in frames:
        name = escape(frame.get("name") or "Frame")
        w = int(frame.get("width") or 400)
        h = int(frame.get("height") or 300)
        url = image_urls.get(frame.get("id", ""))
        if url:
            visual = f'<img src="{escape(url, quote=True)}" alt="{name}" style="max-width:100%;height:auto;">'
        else:
            visual = (
                f'<div class="frame-placeholder" style="width:{min(w, 800)}px;'
                f'height:{min(h, 600)}px;background:#f3f2f1;border:2px dashed #c8c6c4;'
                f'display:flex;align-items:center;justify-content:center;">{name}</div>'
            )
        sections.append(
            f'<section class="figma-frame" data-node-id="{escape(str(frame.get("id", "")), quote=True)}">\n'
            f"  <h2>{name}</h2>\n  {visual}\n</section>"
        )

    title = escape(file_name or "Figma file")
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>
    body {{ font-family: 'Segoe UI', sans-serif; margin: 0; padding: 24px; background: #ffffff; }}
    .figma-frame {{ margin-bottom: 32px; }}
  </style>
</head>
<body>
  <h1>{title}</h1>
  {"".join(sections) or "<p>No frames found.</p>"}
</body>
</html>"""
