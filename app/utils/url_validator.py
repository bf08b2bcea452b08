"""
URL validation utilities.

Vets a user-supplied URL before any network access happens:
  - example.com            →  https://example.com   (scheme prepended)
  - münchen.de             →  https://münchen.de    (IDN kept as typed)
  - http://localhost/x     →  rejected (blocked host)
  - https://192.168.1.1    →  rejected (private network prefix)
  - ftp://example.com      →  rejected (unsupported scheme)

The host check is an exact-match / prefix blacklist on the literal
hostname. It does not resolve DNS, so a public name that resolves to
a private address (including DNS rebinding) is not caught here, and
neither are IPv6 ULA ranges or decimal/octal IPv4 encodings.
"""

import ipaddress
import logging
import re
from typing import Iterable, Optional
from urllib.parse import urlsplit

from app.core.config import settings
from app.core.logging import get_logger
from app.domain.models import Invalid, Valid, ValidationResult

ALLOWED_SCHEMES = ("http", "https")

MSG_REQUIRED = "URL parameter is required and must be a string"
MSG_EMPTY = "URL cannot be empty"
MSG_INVALID_FORMAT = (
    "Invalid URL format. Please provide a valid URL with protocol (http:// or https://)"
)
MSG_PRIVATE_NETWORK = "Access to private/local networks is not allowed"
MSG_UNSUPPORTED_SCHEME = "Only HTTP and HTTPS protocols are supported"

# Any explicit "scheme://" prefix, e.g. ftp://, file://
_EXPLICIT_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")

# Characters permitted in a registered (non-IP-literal) hostname
_HOSTNAME_CHARS = re.compile(r"^[a-z0-9._~%!$&'()*+,;=\-]+$")


class UrlValidator:
    """Normalises and vets user-supplied URLs."""

    def __init__(
        self,
        blocked_hosts: Iterable[str] = (),
        blocked_prefixes: Iterable[str] = (),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._blocked_hosts = frozenset(host.lower() for host in blocked_hosts)
        self._blocked_prefixes = tuple(prefix.lower() for prefix in blocked_prefixes)
        self._logger = logger or get_logger(__name__)

    @classmethod
    def from_settings(cls, logger: Optional[logging.Logger] = None) -> "UrlValidator":
        return cls(
            blocked_hosts=settings.blocked_hosts,
            blocked_prefixes=settings.blocked_host_prefixes,
            logger=logger,
        )

    def validate(self, value: object) -> ValidationResult:
        """
        Validate and normalise a raw URL value.

        Args:
            value: Whatever the client sent; may be None or a non-string.

        Returns:
            Valid with the normalised URL, or Invalid with a
            human-readable reason.
        """
        if not value or not isinstance(value, str):
            return Invalid(MSG_REQUIRED)

        candidate = value.strip()
        if not candidate:
            return Invalid(MSG_EMPTY)

        # Add protocol if missing; explicit foreign schemes are kept so
        # they fail the scheme check below
        if not candidate.lower().startswith(("http://", "https://")) and \
           not _EXPLICIT_SCHEME.match(candidate):
            candidate = f"https://{candidate}"

        try:
            scheme, hostname = self._parse(candidate)
        except ValueError as exc:
            self._logger.warning(
                "URL validation failed url=%s error=%s", candidate, exc
            )
            return Invalid(MSG_INVALID_FORMAT)

        if self.is_blocked_host(hostname):
            return Invalid(MSG_PRIVATE_NETWORK)

        if scheme not in ALLOWED_SCHEMES:
            return Invalid(MSG_UNSUPPORTED_SCHEME)

        return Valid(candidate)

    def is_blocked_host(self, hostname: str) -> bool:
        """Return True if the hostname is local or in a private-network range."""
        hostname = hostname.lower()
        return hostname in self._blocked_hosts or hostname.startswith(self._blocked_prefixes)

    @staticmethod
    def _parse(candidate: str) -> tuple[str, str]:
        """
        Split a candidate URL into (scheme, hostname).

        Raises:
            ValueError: If the URL cannot be parsed or has no usable host.
        """
        parts = urlsplit(candidate)
        hostname = parts.hostname or ""
        # Accessing .port validates it (non-numeric or out of range → ValueError)
        _ = parts.port

        if not hostname:
            raise ValueError("missing hostname")

        if ":" in hostname:
            # IPv6 literal; urlsplit already stripped the brackets
            ipaddress.ip_address(hostname)
        elif not _HOSTNAME_CHARS.match(_to_ascii(hostname)):
            raise ValueError(f"invalid hostname {hostname!r}")

        return parts.scheme.lower(), hostname


def _to_ascii(hostname: str) -> str:
    """Punycode an internationalised hostname (UnicodeError is a ValueError)."""
    if hostname.isascii():
        return hostname
    return hostname.encode("idna").decode("ascii")
