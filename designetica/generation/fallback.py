"""Deterministic fallback wireframes.

``generate_fallback`` is a pure function of (description, theme,
color_scheme): no clock, no randomness, no I/O. The layout is picked by
keyword from the description. ``emergency_template`` is the last resort
and must never raise.
"""

from __future__ import annotations

from html import escape
from typing import Callable, Dict, Tuple

from .prompt import resolve_colors

# Ordered: the first layout whose keywords match wins.
LAYOUT_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("dashboard", ("dashboard", "analytics", "metrics", "admin", "report", "kpi")),
    ("form", ("form", "contact", "signup", "sign up", "register", "login", "survey", "checkout")),
    ("landing", ("landing", "homepage", "home page", "marketing", "hero", "product page")),
    ("content", ("article", "blog", "docs", "documentation", "tutorial", "guide", "course", "learn")),
)

FALLBACK_NOTICE = (
    "AI generation is temporarily unavailable. "
    "This is a template wireframe based on your description."
)


def choose_layout(description: str) -> str:
    text = description.lower()
    for layout, keywords in LAYOUT_KEYWORDS:
        if any(k in text for k in keywords):
            return layout
    return "generic"


# --- Layout bodies ---


def _landing(desc: str, c: Dict[str, str]) -> str:
    return f"""<section class="hero" style="background:{c['accent']};padding:48px 24px;">
      <h1>{desc}</h1>
      <p>A focused landing page built around your description.</p>
      <button class="btn btn-primary">Get started</button>
      <button class="btn btn-secondary">Learn more</button>
    </section>
    <section class="cards">
      <div class="card"><h3>Feature one</h3><p>Short supporting copy for the first feature.</p></div>
      <div class="card"><h3>Feature two</h3><p>Short supporting copy for the second feature.</p></div>
      <div class="card"><h3>Feature three</h3><p>Short supporting copy for the third feature.</p></div>
    </section>"""


def _dashboard(desc: str, c: Dict[str, str]) -> str:
    return f"""<h1>{desc}</h1>
    <section class="cards">
      <div class="card"><h3>Total users</h3><p class="metric">12,480</p></div>
      <div class="card"><h3>Active sessions</h3><p class="metric">1,204</p></div>
      <div class="card"><h3>Conversion</h3><p class="metric">3.2%</p></div>
    </section>
    <section class="card">
      <h2>Recent activity</h2>
      <table>
        <thead><tr><th>Item</th><th>Status</th><th>Updated</th></tr></thead>
        <tbody>
          <tr><td>Report A</td><td>Complete</td><td>Today</td></tr>
          <tr><td>Report B</td><td>In progress</td><td>Yesterday</td></tr>
        </tbody>
      </table>
    </section>"""


def _form(desc: str, c: Dict[str, str]) -> str:
    return f"""<h1>{desc}</h1>
    <form class="card" action="#" method="post">
      <label for="name">Name</label>
      <input id="name" name="name" type="text" placeholder="Your name">
      <label for="email">Email</label>
      <input id="email" name="email" type="email" placeholder="you@example.com">
      <label for="message">Message</label>
      <textarea id="message" name="message" rows="4"></textarea>
      <button class="btn btn-primary" type="submit">Submit</button>
    </form>"""


def _content(desc: str, c: Dict[str, str]) -> str:
    return f"""<article class="card">
      <h1>{desc}</h1>
      <p>This article introduces the essential concepts, best practices, and implementation details.</p>
      <h2>Overview</h2>
      <p>Use this section to summarize what the reader will learn.</p>
      <h2>Next steps</h2>
      <ul><li>Review the prerequisites</li><li>Follow the guided steps</li><li>Check your understanding</li></ul>
    </article>"""


def _generic(desc: str, c: Dict[str, str]) -> str:
    return f"""<h1>{desc}</h1>
    <section class="cards">
      <div class="card"><h3>Section one</h3><p>Custom wireframe generated from your description.</p></div>
      <div class="card"><h3>Section two</h3><p>This layout provides a solid foundation for your project.</p></div>
    </section>
    <button class="btn btn-primary">Primary action</button>"""


LAYOUTS: Dict[str, Callable[[str, Dict[str, str]], str]] = {
    "landing": _landing,
    "dashboard": _dashboard,
    "form": _form,
    "content": _content,
    "generic": _generic,
}


def generate_fallback(description: str, theme: str = "microsoft", color_scheme: str = "primary") -> str:
    """Build a complete HTML document for ``description`` without any AI call."""
    colors = resolve_colors(color_scheme)
    layout = choose_layout(description)
    desc = escape(description.strip())
    body = LAYOUTS[layout](desc, colors)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{desc}</title>
  <style>
    body {{ margin: 0; font-family: 'Segoe UI', sans-serif; background: #f3f2f1; color: {colors['text']}; }}
    main {{ max-width: 1100px; margin: 0 auto; padding: 24px; }}
    .fallback-notice {{ background: #fff4ce; border-left: 4px solid #986f0b; padding: 12px 24px; }}
    .cards {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(240px, 1fr)); gap: 16px; margin: 24px 0; }}
    .card {{ background: #ffffff; border-radius: 8px; padding: 24px; box-shadow: 0 1px 3px rgba(0,0,0,0.12); }}
    .btn {{ padding: 12px 24px; border-radius: 6px; font-size: 16px; font-weight: 600; cursor: pointer; }}
    .btn-primary {{ background: {colors['primary']}; color: #ffffff; border: none; }}
    .btn-secondary {{ background: transparent; color: #161616; border: 2px solid #161616; }}
    label, input, textarea {{ display: block; width: 100%; margin-bottom: 12px; }}
  </style>
</head>
<body data-theme="{escape(theme)}" data-color-scheme="{escape(color_scheme)}" data-layout="{layout}">
  <div class="fallback-notice" role="status">{FALLBACK_NOTICE}</div>
  <main>
    {body}
  </main>
  <footer style="padding:24px;background:{colors['accent']};text-align:center;">
    <p>Template wireframe</p>
  </footer>
</body>
</html>"""


_EMERGENCY_HTML = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>Wireframe</title></head>
<body style="font-family:'Segoe UI',sans-serif;padding:24px;">
  <div class="fallback-notice" role="alert" style="background:#fde7e9;padding:12px;">{notice}</div>
  <h1>{description}</h1>
  <p>Placeholder layout. Try generating again in a moment.</p>
</body>
</html>"""


def emergency_template(description: object = "", error: object = None) -> str:
    """Hard-coded last-resort wireframe. Never raises."""
    try:
        notice = "Wireframe generation failed"
        if error:
            notice = f"{notice}: {escape(str(error)[:200])}"
        return _EMERGENCY_HTML.format(notice=notice, description=escape(str(description)))
    except Exception:
        return _EMERGENCY_HTML.format(notice="Wireframe generation failed", description="Wireframe")
