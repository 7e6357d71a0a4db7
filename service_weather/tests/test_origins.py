"""
Unit tests for origin matching and CORS headers.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_weather.app.cors.origins import build_cors_headers, is_origin_allowed, parse_allowed_origins


class TestIsOriginAllowed:
    """Test cases for is_origin_allowed."""

    def test_wildcard_subdomain(self):
        assert is_origin_allowed("https://a.renfo.app", ["https://*.renfo.app"]) is True

    def test_wildcard_rejects_other_domain(self):
        assert is_origin_allowed("https://evil.com", ["https://*.renfo.app"]) is False

    @pytest.mark.parametrize("origin", ["https://evil.com", "http://localhost:5173", "", "null"])
    def test_star_allows_anything(self, origin):
        assert is_origin_allowed(origin, ["*"]) is True

    def test_literal_requires_exact_match(self):
        assert is_origin_allowed("https://renfo.app", ["https://renfo.app"]) is True
        assert is_origin_allowed("https://renfo.app.evil.com", ["https://renfo.app"]) is False
        assert is_origin_allowed("http://renfo.app", ["https://renfo.app"]) is False

    def test_dots_are_literal_in_wildcards(self):
        """Only '*' is special; other regex metacharacters match themselves."""
        assert is_origin_allowed("https://a.renfoXapp", ["https://*.renfo.app"]) is False
        assert is_origin_allowed("https://aXrenfo.app", ["https://*.renfo.app"]) is False

    def test_wildcard_is_anchored(self):
        assert is_origin_allowed("https://a.renfo.app.evil.com", ["https://*.renfo.app"]) is False
        assert is_origin_allowed("xhttps://a.renfo.app", ["https://*.renfo.app"]) is False

    def test_wildcard_port(self):
        assert is_origin_allowed("http://localhost:5173", ["http://localhost:*"]) is True

    def test_first_match_wins_in_order(self):
        patterns = ["https://renfo.app", "https://*.renfo.app"]
        assert is_origin_allowed("https://www.renfo.app", patterns) is True
        assert is_origin_allowed("https://renfo.app", patterns) is True

    def test_empty_allow_list(self):
        assert is_origin_allowed("https://renfo.app", []) is False


class TestBuildCorsHeaders:
    """Test cases for build_cors_headers."""

    @pytest.fixture
    def allowed(self):
        return ["https://renfo.app", "https://*.renfo.app"]

    def test_no_allow_list(self):
        assert build_cors_headers({"Origin": "https://evil.com"}, []) == {}

    def test_no_origin_header(self, allowed):
        assert build_cors_headers({}, allowed) == {}

    def test_rejected_origin(self, allowed):
        assert build_cors_headers({"Origin": "https://evil.com"}, allowed) is None

    def test_allowed_origin_is_echoed(self, allowed):
        headers = build_cors_headers({"Origin": "https://www.renfo.app"}, allowed)

        assert headers == {
            "Access-Control-Allow-Origin": "https://www.renfo.app",
            "Access-Control-Allow-Methods": "GET, OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
            "Access-Control-Max-Age": "86400",
            "Vary": "Origin",
        }

    def test_star_pattern_still_echoes_specific_origin(self):
        headers = build_cors_headers({"Origin": "https://anything.example"}, ["*"])
        assert headers["Access-Control-Allow-Origin"] == "https://anything.example"


class TestParseAllowedOrigins:
    """Test cases for parse_allowed_origins."""

    def test_comma_separated(self):
        assert parse_allowed_origins(" https://renfo.app , https://*.renfo.app ,, ") == [
            "https://renfo.app",
            "https://*.renfo.app",
        ]

    def test_single_fallback(self):
        assert parse_allowed_origins("", "https://renfo.app") == ["https://renfo.app"]

    def test_list_wins_over_single(self):
        assert parse_allowed_origins("https://a.test", "https://b.test") == ["https://a.test"]

    def test_blank_list_falls_back(self):
        assert parse_allowed_origins(" , ", "https://b.test") == ["https://b.test"]

    def test_nothing_configured(self):
        assert parse_allowed_origins("", "") == []
