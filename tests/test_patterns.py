"""
Tests for pattern sets and pattern file loading.
"""

import json

import pytest

from policywatch.patterns import (
    DEFAULT_PATTERNS,
    PATTERN_CACHE_SIZE,
    PatternRule,
    PatternSet,
    _compile,
    load_pattern_set,
    strip_breadcrumbs,
)


class TestPatternSet:

    def test_structural_rules_include_boilerplate_then_navigation(self):
        rules = DEFAULT_PATTERNS.structural
        assert rules[:len(DEFAULT_PATTERNS.boilerplate)] == DEFAULT_PATTERNS.boilerplate
        assert rules[len(DEFAULT_PATTERNS.boilerplate):] == DEFAULT_PATTERNS.navigation

    def test_extend_appends(self):
        extra = PatternRule(r"partner portal", name="portal")
        extended = DEFAULT_PATTERNS.extend(boilerplate=[extra], name="partner")
        assert extended.name == "partner"
        assert extended.boilerplate[-1] == extra
        assert DEFAULT_PATTERNS.boilerplate[-1] != extra

    def test_rule_is_case_insensitive(self):
        rule = PatternRule(r"contact us")
        assert rule.apply("Please CONTACT US today") == "Please  today"

    def test_compiled_rules_are_cached(self):
        rule = PatternRule(r"partner portal")
        assert rule.compiled() is PatternRule(r"partner portal", name="other").compiled()
        assert _compile.cache_info().maxsize == PATTERN_CACHE_SIZE


class TestStripBreadcrumbs:

    def test_whole_line_breadcrumb(self):
        assert strip_breadcrumbs("Home > Help > Ads\nBody").strip() == "Body"

    def test_indented_breadcrumb_between_lines(self):
        text = "Intro line here.\n  Help › Policies  \nBody"
        assert strip_breadcrumbs(text).split() == ["Intro", "line", "here.", "Body"]

    @pytest.mark.parametrize("text", [
        "Accounts with age > 18 verified are allowed to show alcohol ads.\nBody",
        "Rules apply.\nPrice > 10 USD requires a license\nBody",
        "Home > Help > Ads Ads must not promote gambling services.",
        "Home > Help",
    ])
    def test_prose_with_separator_is_kept(self, text):
        assert strip_breadcrumbs(text) == text


class TestLoadPatternSet:

    def test_load_extends_defaults(self, tmp_path):
        path = tmp_path / "site.json"
        path.write_text(json.dumps({
            "name": "site",
            "boilerplate": ["Seller Hub menu", {"pattern": "Rev\\. \\d+", "name": "revision"}],
            "navigation": ["Footer links"],
        }))
        patterns = load_pattern_set(path)
        assert patterns.name == "site"
        assert patterns.boilerplate[:len(DEFAULT_PATTERNS.boilerplate)] == DEFAULT_PATTERNS.boilerplate
        assert patterns.boilerplate[-1].name == "revision"
        assert patterns.navigation[-1].pattern == "Footer links"

    def test_load_without_defaults(self, tmp_path):
        path = tmp_path / "bare.json"
        path.write_text(json.dumps({"extends_defaults": False, "boilerplate": ["menu"]}))
        patterns = load_pattern_set(path)
        assert patterns.name == "bare"
        assert len(patterns.boilerplate) == 1
        assert patterns.navigation == ()

    def test_invalid_regex_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"boilerplate": ["(unclosed"]}))
        with pytest.raises(ValueError, match="not a valid regex"):
            load_pattern_set(path)

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            load_pattern_set(path)

    def test_bundled_merchant_center_file(self):
        from pathlib import Path
        path = Path(__file__).parent.parent / "config" / "patterns" / "merchant_center.json"
        patterns = load_pattern_set(path)
        assert patterns.name == "merchant-center-help"
        assert any(r.name == "policies-nav" for r in patterns.boilerplate)
