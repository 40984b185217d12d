"""Prompt construction for wireframe generation.

A prompt has two parts: the non-negotiable formatting and branding
constraints (always present) and the content instructions derived from the
user's description and color scheme. ``PromptStyle`` selects how much of the
design-system guidance goes into the user prompt.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class PromptStyle(str, Enum):
    STANDARD = "standard"
    MINIMAL = "minimal"
    CLEAN = "clean"
    PURE_AI = "pure-ai"


@dataclass(frozen=True)
class GeneratorConfig:
    """One generator variant, expressed as configuration."""

    prompt_style: PromptStyle = PromptStyle.STANDARD
    branding_filter_enabled: bool = False
    component_injection_enabled: bool = True


VARIANTS: Dict[str, GeneratorConfig] = {
    "standard": GeneratorConfig(PromptStyle.STANDARD, False, True),
    "minimal": GeneratorConfig(PromptStyle.MINIMAL, False, False),
    "clean": GeneratorConfig(PromptStyle.CLEAN, True, False),
    "pure-ai": GeneratorConfig(PromptStyle.PURE_AI, False, False),
}


def get_variant(name: str) -> GeneratorConfig:
    try:
        return VARIANTS[name]
    except KeyError:
        raise ValueError(
            f"Unknown generator variant {name!r}. Expected one of: {', '.join(VARIANTS)}"
        ) from None


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str

    def to_messages(self) -> list[dict]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


# --- Color schemes ---

COLOR_SCHEMES: Dict[str, Dict[str, str]] = {
    "primary": {"primary": "#0078d4", "accent": "#E8E6DF", "text": "#171717"},
    "secondary": {"primary": "#8b5dae", "accent": "#F2EEF6", "text": "#171717"},
    "success": {"primary": "#107c10", "accent": "#EEF6EE", "text": "#171717"},
    "neutral": {"primary": "#323130", "accent": "#F3F2F1", "text": "#171717"},
}


def resolve_colors(color_scheme: str) -> Dict[str, str]:
    return COLOR_SCHEMES.get(color_scheme, COLOR_SCHEMES["primary"])


# --- Prompt text ---

SYSTEM_MESSAGE = (
    "You are a world-class Senior Frontend Architect and UI/UX designer. "
    "You produce complete, semantic, accessible and responsive HTML wireframes "
    "with inline CSS. You respond with HTML only."
)

OUTPUT_CONSTRAINTS = """\
OUTPUT FORMAT (NON-NEGOTIABLE):
- Generate ONLY the complete HTML code, starting with <!DOCTYPE html> and ending with </html>.
- No explanations, no markdown formatting, no code fences.
- Do not include <script> tags or external stylesheets.
- Use the Segoe UI font family throughout."""

BRANDING_CONSTRAINTS = """\
BRANDING:
- Do not reference any real company, product or website names.
- Use neutral, generic copy for headings and body text."""

BUTTON_GUIDANCE = """\
BUTTON STYLING:
- Primary buttons: background: {primary}; color: white; padding: 12px 24px; border: none; border-radius: 6px; font-size: 16px; font-weight: 600; cursor: pointer;
- Secondary buttons: background: transparent; color: #161616; border: 2px solid #161616; padding: 12px 24px; border-radius: 6px; font-size: 16px; font-weight: 600; cursor: pointer;
- All buttons need visible hover and focus states."""

DESIGN_GUIDANCE = """\
DESIGN SYSTEM:
- Primary color {primary}; text color {text}; page background #f3f2f1.
- Hero sections, banners, cards and footers use the accent background {accent} (never a solid blue background).
- Include a site header with navigation and a footer with a copyright line.
- Use proper semantic structure (header, nav, main, section, footer) and accessible form controls."""


def build_prompt(
    description: str,
    color_scheme: str = "primary",
    style: PromptStyle = PromptStyle.STANDARD,
    fast_mode: bool = False,
    theme: str = "microsoft",
) -> Prompt:
    """Build the system + user prompt for one generation request."""
    colors = resolve_colors(color_scheme)
    sections = [
        f'Create a complete, responsive HTML wireframe for: "{description.strip()}"',
        f"Use the {theme.strip() or 'microsoft'} theme with the {color_scheme} color scheme.",
    ]

    if style in (PromptStyle.STANDARD, PromptStyle.CLEAN):
        sections.append(DESIGN_GUIDANCE.format(**colors))
        sections.append(BUTTON_GUIDANCE.format(**colors))
    elif style == PromptStyle.MINIMAL:
        sections.append(
            f"Keep the layout minimal: few sections, generous whitespace, "
            f"primary color {colors['primary']}."
        )
    else:
        sections.append(
            "Interpret the description freely and choose the most fitting layout, "
            f"using {colors['primary']} as the primary color."
        )

    if style == PromptStyle.CLEAN:
        sections.append(BRANDING_CONSTRAINTS)
    if fast_mode:
        sections.append("Prefer a compact page: at most four content sections.")

    sections.append(OUTPUT_CONSTRAINTS)
    return Prompt(system=SYSTEM_MESSAGE, user="\n\n".join(sections))
