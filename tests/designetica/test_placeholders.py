"""Tests for designetica.client.placeholders."""

from designetica.client.placeholders import (
    SAMPLE_HEADING,
    ensure_html_string,
    post_process_client_html,
    repair_image_placeholders,
    substitute_icon_placeholders,
)


class TestEnsureHtmlString:

    def test_extracts_document_from_surrounding_text(self):
        raw = 'Here you go:\n<!DOCTYPE html><html><body>x</body></html>\nEnjoy!'
        assert ensure_html_string(raw) == "<!DOCTYPE html><html><body>x</body></html>"

    def test_strips_fences_and_quotes(self):
        assert ensure_html_string('```html\n"<div>hi</div>"\n```') == "<div>hi</div>"

    def test_none_becomes_empty(self):
        assert ensure_html_string(None) == ""


class TestRepairImages:

    def test_via_placeholder_rewritten(self):
        html = '<img src="https://via.placeholder.com/300x200" alt="x">'
        assert "https://placehold.co/300x200" in repair_image_placeholders(html)
        assert "via.placeholder.com" not in repair_image_placeholders(html)

    def test_relative_src_replaced_with_sized_placeholder(self):
        html = '<img src="images/hero.png" width="640" height="320" alt="Hero image">'
        out = repair_image_placeholders(html)
        assert "https://placehold.co/640x320/" in out
        assert "text=Hero%20image" in out
        assert "images/hero.png" not in out

    def test_missing_src_gets_default_size(self):
        out = repair_image_placeholders('<img alt="Logo">')
        assert 'src="https://placehold.co/300x200/' in out

    def test_absolute_and_data_urls_kept(self):
        html = '<img src="https://cdn.example.com/a.png"><img src="data:image/png;base64,AAA">'
        assert repair_image_placeholders(html) == html

    def test_lazy_load_data_src_untouched(self):
        html = '<img data-src="lazy.png" src="https://cdn.example.com/a.png" alt="x">'
        assert repair_image_placeholders(html) == html

    def test_only_src_replaced_next_to_data_src(self):
        html = '<img data-src="lazy.png" src="hero.png" alt="Hero">'
        out = repair_image_placeholders(html)
        assert 'data-src="lazy.png"' in out
        assert 'src="https://placehold.co/300x200/' in out
        assert "hero.png" not in out

    def test_data_src_alone_counts_as_missing_src(self):
        out = repair_image_placeholders('<img data-src="lazy.png" alt="Lazy">')
        assert out.startswith('<img src="https://placehold.co/300x200/')
        assert 'data-src="lazy.png"' in out


class TestIconPlaceholders:

    def test_heading_placeholder(self):
        html = '<div class="text-placeholder-heading"></div>'
        assert substitute_icon_placeholders(html) == SAMPLE_HEADING

    def test_line_placeholder(self):
        out = substitute_icon_placeholders('<div class="bar text-placeholder-line">..</div>')
        assert out.startswith("<p>") and "sample content" in out

    def test_icon_token(self):
        out = substitute_icon_placeholders("Find [icon:search] here")
        assert '<span class="icon icon-search" aria-hidden="true">' in out

    def test_unknown_icon_uses_default_glyph(self):
        assert "icon-rocket" in substitute_icon_placeholders("[icon:rocket]")


def test_full_client_pass():
    raw = '```html\n<!DOCTYPE html><html><body><img src="a.png">[icon:home]</body></html>\n```'
    out = post_process_client_html(raw)
    assert out.startswith("<!DOCTYPE html>")
    assert "placehold.co" in out
    assert "icon-home" in out
