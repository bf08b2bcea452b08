"""
Unit tests for URL validation.

Tests cover:
  - Missing / non-string / blank input
  - Scheme prepending
  - Blocked hosts and private-network prefixes
  - Unsupported schemes
  - Malformed URLs
  - Idempotence
"""

import pytest

from app.domain.models import Invalid, Valid
from app.utils.url_validator import (
    MSG_EMPTY,
    MSG_INVALID_FORMAT,
    MSG_PRIVATE_NETWORK,
    MSG_REQUIRED,
    MSG_UNSUPPORTED_SCHEME,
)


class TestValidateUrl:
    """Tests for UrlValidator.validate()."""

    @pytest.mark.parametrize("value", [None, "", 42, ["https://example.com"]])
    def test_rejects_missing_or_non_string(self, validator, value):
        """Should reject absent and non-string values."""
        assert validator.validate(value) == Invalid(MSG_REQUIRED)

    def test_rejects_whitespace_only(self, validator):
        """Should reject input that is empty after trimming."""
        assert validator.validate("   \t ") == Invalid(MSG_EMPTY)

    def test_prepends_https_when_scheme_missing(self, validator):
        """Should add https:// if no scheme is provided."""
        assert validator.validate("example.com") == Valid("https://example.com")

    def test_trims_surrounding_whitespace(self, validator):
        assert validator.validate("  https://example.com/a  ") == Valid(
            "https://example.com/a"
        )

    def test_keeps_http_scheme(self, validator):
        assert validator.validate("http://example.com") == Valid("http://example.com")

    def test_scheme_prefix_check_is_case_insensitive(self, validator):
        """Should not prepend a second scheme to an upper-case one."""
        assert validator.validate("HTTPS://Example.com") == Valid("HTTPS://Example.com")

    def test_preserves_path_query_and_fragment(self, validator):
        """Should not canonicalise anything beyond the scheme."""
        url = "https://example.com/path/?b=2&a=1#section"
        assert validator.validate(url) == Valid(url)

    @pytest.mark.parametrize(
        "host", ["localhost", "127.0.0.1", "0.0.0.0", "[::1]", "LOCALHOST"]
    )
    @pytest.mark.parametrize("scheme", ["http://", "https://", ""])
    def test_rejects_blocked_hosts(self, validator, scheme, host):
        """Should block local hosts regardless of scheme or path."""
        result = validator.validate(f"{scheme}{host}/some/path")
        assert result == Invalid(MSG_PRIVATE_NETWORK)

    @pytest.mark.parametrize(
        "url",
        [
            "http://192.168.1.1",
            "https://10.0.0.5:8080/admin",
            "172.16.0.1",
            "http://172.31.255.255/",
        ],
    )
    def test_rejects_private_network_prefixes(self, validator, url):
        assert validator.validate(url) == Invalid(MSG_PRIVATE_NETWORK)

    def test_prefix_match_is_literal(self, validator):
        """Prefix matching applies to hostnames too, not only IP literals."""
        assert validator.validate("https://10.example.com") == Invalid(MSG_PRIVATE_NETWORK)

    def test_rejects_userinfo_pointing_at_localhost(self, validator):
        assert validator.validate("https://user@localhost/") == Invalid(MSG_PRIVATE_NETWORK)

    @pytest.mark.parametrize(
        "url", ["ftp://example.com", "file://example.com/etc/passwd", "ws://example.com"]
    )
    def test_rejects_unsupported_schemes(self, validator, url):
        assert validator.validate(url) == Invalid(MSG_UNSUPPORTED_SCHEME)

    @pytest.mark.parametrize(
        "url",
        [
            "https://",
            "https://exa mple.com",
            "https://example.com:notaport",
            "javascript:alert(1)",
            "https://[::1",
        ],
    )
    def test_rejects_malformed_urls(self, validator, url):
        assert validator.validate(url) == Invalid(MSG_INVALID_FORMAT)

    @pytest.mark.parametrize(
        "url", ["https://münchen.de", "https://例え.jp/", "bücher.example/path"]
    )
    def test_accepts_internationalised_domains(self, validator, url):
        """Should accept IDNs and return them as typed."""
        result = validator.validate(url)

        assert isinstance(result, Valid)
        assert result.normalized_url.endswith(url)

    def test_rejects_invalid_internationalised_domains(self, validator):
        """An empty label cannot be IDNA-encoded."""
        assert validator.validate("https://münchen..de") == Invalid(MSG_INVALID_FORMAT)

    def test_logs_parse_failures(self, validator):
        validator.validate("https://exa mple.com")
        validator._logger.warning.assert_called_once()

    @pytest.mark.parametrize(
        "url", ["https://example.com", "http://example.com/a?b=c", "github.com"]
    )
    def test_validation_is_idempotent(self, validator, url):
        """Validating the normalised URL again yields the same string."""
        first = validator.validate(url)
        assert isinstance(first, Valid)
        assert validator.validate(first.normalized_url) == first

    def test_is_blocked_host(self, validator):
        assert validator.is_blocked_host("LocalHost")
        assert validator.is_blocked_host("192.168.0.10")
        assert not validator.is_blocked_host("example.com")
