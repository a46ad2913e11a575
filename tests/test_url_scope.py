"""Tests for URL normalization and scope decisions."""

import pytest

from sitesnap.models import ScopeConfig
from sitesnap.url_scope import (
    build_scope,
    clean_link_text,
    is_discoverable,
    is_in_scope,
    is_related_domain,
    normalize_url,
    sanitize_filename,
)


@pytest.fixture
def scope():
    return ScopeConfig(crawl_root_url="https://example.com", crawl_domain="example.com")


class TestNormalizeUrl:
    """Test cases for normalize_url."""

    def test_strips_fragment_query_and_trailing_slash(self):
        assert normalize_url("https://site.test/about/?x=1#y") == "https://site.test/about"

    def test_root_url(self):
        assert normalize_url("https://site.test/") == "https://site.test"

    def test_fragment_before_query_marker(self):
        assert normalize_url("https://site.test/a#frag?not-a-query") == "https://site.test/a"

    def test_plain_url_unchanged(self):
        assert normalize_url("https://site.test/a/b") == "https://site.test/a/b"

    @pytest.mark.parametrize("url", [
        "https://site.test/",
        "https://site.test/docs//",
        "https://site.test/a/?q=1#top",
        "https://site.test/a#b/",
        "https://site.test/path?next=/home/",
        "",
        "/",
    ])
    def test_idempotent(self, url):
        once = normalize_url(url)
        assert normalize_url(once) == once


class TestScopeChecks:
    """Test cases for is_in_scope / is_discoverable."""

    def test_in_scope_prefix(self, scope):
        assert is_in_scope("https://example.com/pricing", scope)
        assert is_in_scope("https://example.com", scope)

    def test_related_subdomain_outside_root_rejected(self, scope):
        assert not is_in_scope("https://shop.example.com/cart", scope)

    def test_root_prefix_is_authoritative(self):
        docs = ScopeConfig(crawl_root_url="https://example.com/docs", crawl_domain="example.com")
        assert is_in_scope("https://example.com/docs/intro", docs)
        assert not is_in_scope("https://example.com/blog", docs)

    def test_plain_prefix_match(self):
        docs = ScopeConfig(crawl_root_url="https://example.com/docs", crawl_domain="example.com")
        assert is_in_scope("https://example.com/docs-old", docs)
        assert is_in_scope("https://example.com:8443/x", build_scope("https://example.com"))

    def test_subdomain_discoverable(self, scope):
        assert is_discoverable("https://shop.example.com/cart", scope)

    def test_exact_host_discoverable(self, scope):
        assert is_discoverable("https://example.com/about?x=1", scope)

    def test_host_case_insensitive(self, scope):
        assert is_discoverable("https://WWW.Example.COM/", scope)

    def test_other_domain_not_discoverable(self, scope):
        assert not is_discoverable("https://other.com/", scope)

    def test_suffix_lookalike_not_discoverable(self, scope):
        assert not is_discoverable("https://notexample.com/", scope)

    @pytest.mark.parametrize("href", [
        "http://[::1",
        "mailto:team@example.com",
        "javascript:void(0)",
        "",
    ])
    def test_malformed_or_hostless_dropped(self, scope, href):
        assert is_discoverable(href, scope) is False

    def test_related_domain(self, scope):
        assert is_related_domain("https://blog.example.com/post", scope)
        assert not is_related_domain("https://other.com/post", scope)


class TestBuildScope:
    """Test cases for build_scope."""

    def test_build_scope_from_site_url(self):
        scope = build_scope("https://site.test/")
        assert scope.crawl_root_url == "https://site.test"
        assert scope.crawl_domain == "site.test"

    def test_mixed_case_host_lowercased(self):
        scope = build_scope("HTTPS://Site.Test/Docs/")
        assert scope.crawl_root_url == "https://site.test/Docs"
        assert scope.crawl_domain == "site.test"
        assert is_in_scope("https://site.test/Docs/intro", scope)

    def test_port_kept_in_root(self):
        scope = build_scope("http://Site.Test:8080/")
        assert scope.crawl_root_url == "http://site.test:8080"
        assert scope.crawl_domain == "site.test"

    def test_build_scope_rejects_hostless_url(self):
        with pytest.raises(ValueError):
            build_scope("not a url")


class TestCleanLinkText:
    """Test cases for clean_link_text."""

    def test_collapses_whitespace(self):
        assert clean_link_text("  About\n\n   Us \t") == "About Us"

    def test_empty_becomes_placeholder(self):
        assert clean_link_text("") == "(no text)"
        assert clean_link_text("   \n ") == "(no text)"
        assert clean_link_text(None) == "(no text)"

    def test_truncates_to_100_characters(self):
        text = "word " * 60
        cleaned = clean_link_text(text)
        assert len(cleaned) <= 100
        assert not cleaned.endswith(" ")


class TestSanitizeFilename:
    """Test cases for sanitize_filename."""

    def test_replaces_unsafe_characters(self):
        assert sanitize_filename("https://site.test/About/Team?x=1") == "site.test_about_team_x_1"

    def test_keeps_dots_dashes_underscores(self):
        assert sanitize_filename("http://site.test/a-b_c.d") == "site.test_a-b_c.d"

    def test_drops_trailing_slash(self):
        assert sanitize_filename("https://site.test/docs/") == "site.test_docs"

    def test_non_ascii_replaced(self):
        assert sanitize_filename("https://site.test/café") == "site.test_caf_"

    def test_truncated(self):
        name = sanitize_filename("https://site.test/" + "a" * 300)
        assert len(name) == 100
