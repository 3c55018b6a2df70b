"""
Unit Tests for Request Parsing
==============================

HTML extraction by content type, validation and query option parsing.
"""

import json

import pytest

from html2webp.api.request_parsing import (
    BadInputError,
    extract_html,
    parse_int,
    parse_render_options,
    validate_html,
)


class TestExtractHtml:
    """Test content-type dependent HTML extraction."""

    def test_json_body_html_field(self):
        body = json.dumps({"html": "<p>hi</p>"}).encode()
        assert extract_html("application/json", body) == "<p>hi</p>"

    def test_json_content_type_with_charset(self):
        body = json.dumps({"html": "<p>hi</p>"}).encode()
        assert extract_html("Application/JSON; charset=utf-8", body) == "<p>hi</p>"

    def test_json_body_without_html_field(self):
        assert extract_html("application/json", b'{"markup": "<p>"}') is None

    def test_json_body_non_string_html(self):
        assert extract_html("application/json", b'{"html": 42}') == 42

    def test_invalid_json_body(self):
        assert extract_html("application/json", b"<p>not json</p>") is None

    def test_json_array_body(self):
        assert extract_html("application/json", b'["<p>hi</p>"]') is None

    @pytest.mark.parametrize("content_type", ["text/html", "text/plain; charset=utf-8"])
    def test_raw_html_body_verbatim(self, content_type):
        body = b'  <div class="x">caf\xc3\xa9</div>\n'
        assert extract_html(content_type, body) == '  <div class="x">café</div>\n'

    def test_text_body_that_looks_like_json_is_kept_verbatim(self):
        body = b'{"html": "<p>hi</p>"}'
        assert extract_html("text/plain", body) == '{"html": "<p>hi</p>"}'

    def test_missing_content_type_json_object(self):
        body = json.dumps({"html": "<b>x</b>"}).encode()
        assert extract_html(None, body) == "<b>x</b>"

    def test_unknown_content_type_raw_body(self):
        assert extract_html("application/octet-stream", b"<h1>raw</h1>") == "<h1>raw</h1>"

    def test_unknown_content_type_structured_body_without_html(self):
        assert extract_html("", b'{"title": "no html"}') is None


class TestValidateHtml:
    """Test HTML validation."""

    def test_valid_html(self):
        assert validate_html("<p>hi</p>") == "<p>hi</p>"

    @pytest.mark.parametrize("value", [None, "", "   \n\t", 42, {"html": "<p>"}, ["<p>"]])
    def test_rejected_values(self, value):
        with pytest.raises(BadInputError, match="Missing or empty HTML content"):
            validate_html(value)


class TestParseInt:
    """Test leading-integer parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("800", 800),
            (" 42", 42),
            ("12px", 12),
            ("7.9", 7),
            ("-5", -5),
            ("+3", 3),
            ("abc", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse_int(self, value, expected):
        assert parse_int(value) == expected


class TestParseRenderOptions:
    """Test query option parsing, defaults and clamping."""

    def test_defaults(self, test_settings):
        options = parse_render_options({}, test_settings)
        assert options.viewport_width == 800
        assert options.viewport_height == 900
        assert options.device_scale_factor == 2.0
        assert options.quality == 80
        assert options.full_page is True

    def test_explicit_values(self, test_settings):
        options = parse_render_options(
            {"width": "1280", "quality": "55", "fullPage": "false"}, test_settings
        )
        assert options.viewport_width == 1280
        assert options.quality == 55
        assert options.full_page is False

    @pytest.mark.parametrize(
        "raw,expected", [("150", 100), ("-5", 1), ("abc", 80), ("0", 80), ("100", 100), ("1", 1)]
    )
    def test_quality_clamping(self, test_settings, raw, expected):
        assert parse_render_options({"quality": raw}, test_settings).quality == expected

    @pytest.mark.parametrize("raw,expected", [("abc", 800), ("0", 800), ("-20", 1), ("99999", 4096)])
    def test_width_fallback_and_clamping(self, test_settings, raw, expected):
        assert parse_render_options({"width": raw}, test_settings).viewport_width == expected

    @pytest.mark.parametrize("raw", ["true", "False", "0", "no", ""])
    def test_full_page_only_disabled_by_literal_false(self, test_settings, raw):
        assert parse_render_options({"fullPage": raw}, test_settings).full_page is True

    def test_full_page_false(self, test_settings):
        assert parse_render_options({"fullPage": "false"}, test_settings).full_page is False
