"""Classify Figma nodes into component kinds.

Rules are evaluated in a fixed precedence order and the first match wins:

    hero > button > card > input > image > text > generic

Name keywords are matched on whole words of the node name (split on
non-alphanumerics and camelCase), so ``"Hero Banner"``, ``"primary-btn"`` and
``"ProductCard"`` classify as expected while ``"Button Group"`` inside a
hero still resolves to hero. Figma node types are used for image and text.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, FrozenSet, List, Set, Tuple


# --- Component kinds ---

class ComponentKind(str, Enum):
    HERO = "hero"
    BUTTON = "button"
    CARD = "card"
    INPUT = "input"
    IMAGE = "image"
    TEXT = "text"
    GENERIC = "generic"


# --- Constants ---

HERO_KEYWORDS: FrozenSet[str] = frozenset({"hero", "banner", "jumbotron", "masthead"})
BUTTON_KEYWORDS: FrozenSet[str] = frozenset({"button", "btn", "cta"})
CARD_KEYWORDS: FrozenSet[str] = frozenset({"card", "tile"})
INPUT_KEYWORDS: FrozenSet[str] = frozenset({"input", "field", "textbox", "textfield", "search"})
IMAGE_KEYWORDS: FrozenSet[str] = frozenset({"image", "img", "photo", "picture", "illustration"})

IMAGE_NODE_TYPES: FrozenSet[str] = frozenset({"RECTANGLE", "ELLIPSE", "VECTOR"})

# (kind, name keywords, figma node types)
PRECEDENCE: Tuple[Tuple[ComponentKind, FrozenSet[str], FrozenSet[str]], ...] = (
    (ComponentKind.HERO, HERO_KEYWORDS, frozenset()),
    (ComponentKind.BUTTON, BUTTON_KEYWORDS, frozenset()),
    (ComponentKind.CARD, CARD_KEYWORDS, frozenset()),
    (ComponentKind.INPUT, INPUT_KEYWORDS, frozenset()),
    (ComponentKind.IMAGE, IMAGE_KEYWORDS, frozenset()),
    (ComponentKind.TEXT, frozenset(), frozenset({"TEXT"})),
)

CATEGORY_BY_KIND: Dict[ComponentKind, str] = {
    ComponentKind.HERO: "Layout",
    ComponentKind.BUTTON: "Actions",
    ComponentKind.CARD: "Cards",
    ComponentKind.INPUT: "Forms",
    ComponentKind.IMAGE: "Media",
    ComponentKind.TEXT: "Typography",
    ComponentKind.GENERIC: "Layout",
}

NAVIGATION_KEYWORDS: FrozenSet[str] = frozenset({"nav", "navigation", "menu", "header", "tab", "tabs", "breadcrumb"})

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def name_words(name: str) -> Set[str]:
    """Lowercased words of a node name (``"PrimaryBtn/Large"`` -> {primary, btn, large})."""
    spaced = _CAMEL_RE.sub(" ", name or "")
    return {w for w in _SPLIT_RE.split(spaced.lower()) if w}


def classify_component(name: str, node_type: str = "", has_image_fill: bool = False) -> ComponentKind:
    """Return the component kind for a node name and Figma type."""
    words = name_words(name)
    for kind, keywords, node_types in PRECEDENCE:
        if keywords & words or node_type in node_types:
            return kind
    if has_image_fill and node_type in IMAGE_NODE_TYPES:
        return ComponentKind.IMAGE
    return ComponentKind.GENERIC


def categorize(name: str, kind: ComponentKind) -> str:
    """Library category (Actions, Cards, Navigation, Forms, Typography, Media, Layout)."""
    if NAVIGATION_KEYWORDS & name_words(name):
        return "Navigation"
    return CATEGORY_BY_KIND[kind]


def explain_precedence() -> List[str]:
    return [kind.value for kind, _, _ in PRECEDENCE] + [ComponentKind.GENERIC.value]
