"""Design-token extraction from Figma node trees."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


# --- Token types ---


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: float = 1.0

    def to_css(self) -> str:
        if self.a >= 1:
            return f"#{self.r:02x}{self.g:02x}{self.b:02x}"
        return f"rgba({self.r}, {self.g}, {self.b}, {round(self.a, 3)})"


@dataclass(frozen=True)
class Padding:
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0

    def to_css(self) -> str:
        return f"{self.top:g}px {self.right:g}px {self.bottom:g}px {self.left:g}px"


@dataclass(frozen=True)
class Typography:
    font_family: str = "inherit"
    font_size: float = 16
    font_weight: int = 400
    line_height: str = "normal"
    text_align: str = "left"
    color: str = "#000000"


@dataclass
class DesignToken:
    """Recursive token tree mirroring one Figma node."""

    id: str
    name: str
    type: str
    width: Optional[float] = None
    height: Optional[float] = None
    fills: List[Color] = field(default_factory=list)
    strokes: List[Color] = field(default_factory=list)
    stroke_weight: float = 0
    corner_radius: float = 0
    padding: Optional[Padding] = None
    typography: Optional[Typography] = None
    text: str = ""
    has_image_fill: bool = False
    children: List["DesignToken"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()


# --- Extraction ---


def figma_color(color: Dict[str, Any], opacity: Optional[float] = None) -> Color:
    """Convert Figma's 0..1 float RGBA into an 8-bit ``Color``."""
    alpha = color.get("a", 1.0)
    if opacity is not None:
        alpha = alpha * opacity
    return Color(
        r=round(color.get("r", 0) * 255),
        g=round(color.get("g", 0) * 255),
        b=round(color.get("b", 0) * 255),
        a=alpha,
    )


def _solid_paints(paints: Any) -> List[Color]:
    colors = []
    for paint in paints or []:
        if paint.get("type") != "SOLID" or paint.get("visible") is False:
            continue
        if "color" in paint:
            colors.append(figma_color(paint["color"], paint.get("opacity")))
    return colors


def _has_image_paint(paints: Any) -> bool:
    return any(
        paint.get("type") == "IMAGE" and paint.get("visible") is not False
        for paint in paints or []
    )


def _extract_typography(style: Dict[str, Any], fills: List[Color]) -> Typography:
    line_height = "normal"
    if style.get("lineHeightPercent"):
        line_height = f"{style['lineHeightPercent']:g}%"
    return Typography(
        font_family=style.get("fontFamily") or "inherit",
        font_size=style.get("fontSize") or 16,
        font_weight=int(style.get("fontWeight") or 400),
        line_height=line_height,
        text_align=(style.get("textAlignHorizontal") or "left").lower(),
        color=fills[0].to_css() if fills else "#000000",
    )


def extract_design_tokens(node: Dict[str, Any]) -> DesignToken:
    """Walk a Figma node dict and build its ``DesignToken`` tree."""
    bounds = node.get("absoluteBoundingBox") or {}
    fills = _solid_paints(node.get("fills"))
    strokes = _solid_paints(node.get("strokes"))

    padding = None
    if any(k in node for k in ("paddingTop", "paddingRight", "paddingBottom", "paddingLeft")):
        padding = Padding(
            top=node.get("paddingTop") or 0,
            right=node.get("paddingRight") or 0,
            bottom=node.get("paddingBottom") or 0,
            left=node.get("paddingLeft") or 0,
        )

    typography = None
    if node.get("type") == "TEXT":
        typography = _extract_typography(node.get("style") or {}, fills)

    return DesignToken(
        id=str(node.get("id", "")),
        name=node.get("name") or "",
        type=node.get("type") or "UNKNOWN",
        width=bounds.get("width"),
        height=bounds.get("height"),
        fills=fills,
        strokes=strokes,
        stroke_weight=(node.get("strokeWeight") or 1) if strokes else 0,
        corner_radius=node.get("cornerRadius") or 0,
        padding=padding,
        typography=typography,
        text=node.get("characters") or "",
        has_image_fill=_has_image_paint(node.get("fills")),
        children=[
            extract_design_tokens(child)
            for child in node.get("children") or []
            if child.get("visible", True)
        ],
    )
