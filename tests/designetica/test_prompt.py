"""Tests for designetica.generation.prompt."""

import pytest

from designetica.generation.prompt import (
    BRANDING_CONSTRAINTS,
    COLOR_SCHEMES,
    OUTPUT_CONSTRAINTS,
    SYSTEM_MESSAGE,
    PromptStyle,
    build_prompt,
    get_variant,
    resolve_colors,
)


class TestBuildPrompt:

    def test_messages_shape(self):
        prompt = build_prompt("Create a contact form")
        messages = prompt.to_messages()
        assert [m["role"] for m in messages] == ["system", "user"]
        assert messages[0]["content"] == SYSTEM_MESSAGE

    def test_description_is_trimmed_and_quoted(self):
        prompt = build_prompt("   Create a contact form  ")
        assert '"Create a contact form"' in prompt.user

    @pytest.mark.parametrize("style", list(PromptStyle))
    def test_output_constraints_always_present(self, style):
        prompt = build_prompt("Landing page", style=style)
        assert OUTPUT_CONSTRAINTS in prompt.user
        assert "<!DOCTYPE html>" in prompt.user

    def test_color_scheme_drives_palette(self):
        prompt = build_prompt("Landing page", color_scheme="success")
        assert COLOR_SCHEMES["success"]["primary"] in prompt.user
        assert COLOR_SCHEMES["primary"]["primary"] not in prompt.user

    def test_branding_only_for_clean_style(self):
        assert BRANDING_CONSTRAINTS in build_prompt("x page", style=PromptStyle.CLEAN).user
        assert BRANDING_CONSTRAINTS not in build_prompt("x page").user

    def test_minimal_style_skips_design_guidance(self):
        prompt = build_prompt("Landing page", style=PromptStyle.MINIMAL)
        assert "DESIGN SYSTEM" not in prompt.user
        assert "minimal" in prompt.user

    def test_fast_mode_requests_compact_page(self):
        assert "compact" in build_prompt("Landing page", fast_mode=True).user
        assert "compact" not in build_prompt("Landing page").user

    def test_theme_named_in_prompt(self):
        assert "Use the dark theme" in build_prompt("Landing page", theme="dark").user
        assert "Use the microsoft theme" in build_prompt("Landing page").user

    def test_theme_changes_prompt(self):
        assert build_prompt("Landing page", theme="dark").user != build_prompt("Landing page").user


class TestVariants:

    def test_known_variants(self):
        assert get_variant("standard").component_injection_enabled is True
        assert get_variant("clean").branding_filter_enabled is True
        assert get_variant("pure-ai").prompt_style == PromptStyle.PURE_AI

    def test_unknown_variant(self):
        with pytest.raises(ValueError, match="Unknown generator variant"):
            get_variant("experimental")

    def test_unknown_color_scheme_defaults_to_primary(self):
        assert resolve_colors("mauve") == COLOR_SCHEMES["primary"]
