"""Tests for designetica.generation.postprocess."""

from unittest.mock import MagicMock

from designetica.generation import components
from designetica.generation.postprocess import (
    PostProcessContext,
    ensure_doctype,
    inject_footer,
    inject_hero,
    inject_navigation,
    post_process,
    strip_wrappers,
    substitute_buttons,
)

BARE = "<!DOCTYPE html>\n<html><head><title>t</title></head><body><main>x</main></body></html>"


class TestCleanup:

    def test_strip_fences(self):
        assert strip_wrappers("```html\n<html></html>\n```") == "<html></html>"

    def test_strip_quotes(self):
        assert strip_wrappers('"<div>hi</div>"') == "<div>hi</div>"

    def test_cuts_surrounding_prose(self):
        raw = "Here is your wireframe:\n<html><body>x</body></html>\nHope this helps!"
        html = ensure_doctype(raw)
        assert html.startswith("<!DOCTYPE html>\n<html>")
        assert html.endswith("</html>")

    def test_existing_doctype_kept(self):
        assert ensure_doctype(BARE) == BARE

    def test_non_html_unchanged(self):
        assert ensure_doctype("plain text") == "plain text"


class TestInjection:

    def test_navigation_added_after_body(self):
        html = inject_navigation(BARE, PostProcessContext())
        assert components.SITE_NAV_MARKER in html
        assert html.index("<body>") < html.index(components.SITE_NAV_MARKER) < html.index("<main>")

    def test_navigation_not_duplicated(self):
        html = BARE.replace("<main>", "<nav>menu</nav><main>")
        assert inject_navigation(html, PostProcessContext()) == html

    def test_hero_after_header(self):
        html = BARE.replace("<body>", "<body><header>h</header>")
        out = inject_hero(html, PostProcessContext(description="Marketing landing page"))
        assert out.index("</header>") < out.index(components.HERO_MARKER) < out.index("<main>")
        assert "Marketing landing page" in out

    def test_hero_only_for_hero_descriptions(self):
        assert inject_hero(BARE, PostProcessContext(description="Contact form")) == BARE

    def test_hero_description_escaped(self):
        out = inject_hero(BARE, PostProcessContext(description="<b>landing</b>"))
        assert "&lt;b&gt;landing&lt;/b&gt;" in out

    def test_footer_before_body_close(self):
        out = inject_footer(BARE, PostProcessContext())
        assert out.index(components.FOOTER_MARKER) < out.index("</body>")
        html = BARE.replace("</main>", "</main><footer>f</footer>")
        assert inject_footer(html, PostProcessContext()) == html


class TestButtons:

    def test_plain_button_gets_primary_classes(self):
        html = BARE.replace("x", '<button type="submit">Go</button>')
        out = substitute_buttons(html, PostProcessContext())
        assert '<button class="btn btn-primary" type="submit">' in out
        assert 'data-ds-component="button-styles"' in out
        assert out.index("button-styles") < out.index("</head>")

    def test_existing_class_prefixed(self):
        html = BARE.replace("x", "<button class='outline'>Go</button>")
        assert "<button class='btn outline'>" in substitute_buttons(html, PostProcessContext())

    def test_btn_class_left_alone(self):
        html = BARE.replace("x", '<button class="btn btn-secondary">Go</button>')
        out = substitute_buttons(html, PostProcessContext())
        assert '<button class="btn btn-secondary">' in out

    def test_no_buttons_no_styles(self):
        assert substitute_buttons(BARE, PostProcessContext()) == BARE


class TestPostProcess:

    def test_full_pass(self):
        raw = "```html\n" + BARE.replace("x", "<button>Go</button>") + "\n```"
        ctx = PostProcessContext(
            description="Landing page",
            inject_navigation=True,
            inject_hero=True,
            inject_footer=True,
            substitute_buttons=True,
        )
        out = post_process(raw, ctx)
        assert out.startswith("<!DOCTYPE html>")
        for marker in (components.SITE_NAV_MARKER, components.HERO_MARKER, components.FOOTER_MARKER):
            assert marker in out

    def test_failure_returns_raw_input(self):
        broken = MagicMock()
        broken.filter_html.side_effect = RuntimeError("bad regex")
        raw = "```html\n<html></html>\n```"
        assert post_process(raw, PostProcessContext(content_filter=broken)) == raw
