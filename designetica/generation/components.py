"""Design-system HTML snippets injected into generated wireframes."""

from __future__ import annotations

from html import escape

from .prompt import resolve_colors

HERO_KEYWORDS = (
    "landing",
    "hero",
    "banner",
    "homepage",
    "home page",
    "welcome",
    "marketing",
)

SITE_NAV_MARKER = 'data-ds-component="site-header"'
FOOTER_MARKER = 'data-ds-component="site-footer"'
HERO_MARKER = 'data-ds-component="hero"'


def wants_hero(description: str) -> bool:
    text = description.lower()
    return any(k in text for k in HERO_KEYWORDS)


def site_header(color_scheme: str = "primary") -> str:
    colors = resolve_colors(color_scheme)
    return f"""<header class="site-header" {SITE_NAV_MARKER} style="display:flex;align-items:center;justify-content:space-between;padding:12px 24px;background:#ffffff;border-bottom:1px solid #e1dfdd;font-family:'Segoe UI',sans-serif;">
  <a href="#" class="site-header-logo" style="font-weight:600;color:{colors['text']};text-decoration:none;">Learning Platform</a>
  <nav aria-label="Primary">
    <a href="#" style="margin:0 12px;color:{colors['text']};text-decoration:none;">Browse</a>
    <a href="#" style="margin:0 12px;color:{colors['text']};text-decoration:none;">Docs</a>
    <a href="#" style="margin:0 12px;color:{colors['text']};text-decoration:none;">Community</a>
  </nav>
  <button class="btn btn-primary" style="background:{colors['primary']};color:#ffffff;border:none;border-radius:6px;padding:8px 16px;font-weight:600;">Sign in</button>
</header>"""


def site_footer() -> str:
    return f"""<footer class="site-footer" {FOOTER_MARKER} style="padding:24px;background:#E8E6DF;color:#171717;font-family:'Segoe UI',sans-serif;text-align:center;">
  <p>&copy; Designetica wireframe. All rights reserved.</p>
</footer>"""


def hero_section(description: str, color_scheme: str = "primary") -> str:
    colors = resolve_colors(color_scheme)
    title = escape(description.strip()[:80])
    return f"""<section class="hero" {HERO_MARKER} style="padding:48px 24px;background:{colors['accent']};font-family:'Segoe UI',sans-serif;">
  <h1 style="margin:0 0 12px;font-size:40px;color:{colors['text']};">{title}</h1>
  <p style="margin:0 0 24px;font-size:18px;color:#323130;">Start building with a layout tailored to your description.</p>
  <button class="btn btn-primary" style="background:{colors['primary']};color:#ffffff;border:none;border-radius:6px;padding:12px 24px;font-size:16px;font-weight:600;">Get started</button>
</section>"""


def button_styles(color_scheme: str = "primary") -> str:
    colors = resolve_colors(color_scheme)
    return f"""<style data-ds-component="button-styles">
.btn {{ padding: 12px 24px; border-radius: 6px; font-size: 16px; font-weight: 600; cursor: pointer; font-family: 'Segoe UI', sans-serif; }}
.btn-primary {{ background: {colors['primary']}; color: #ffffff; border: none; }}
.btn-secondary {{ background: transparent; color: #161616; border: 2px solid #161616; }}
.btn:hover, .btn:focus {{ filter: brightness(0.92); outline: 2px solid {colors['primary']}; outline-offset: 2px; }}
</style>"""
