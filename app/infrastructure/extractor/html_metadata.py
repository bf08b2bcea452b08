"""
HTML metadata extraction.

Turns raw page bytes into link-preview Metadata using BeautifulSoup.
Each field is looked up through a short fallback chain (Open Graph,
Twitter card, plain HTML); a field that cannot be found is None.
An empty document yields all-None fields; only a document that cannot
be parsed at all raises ExtractionError.
"""

import logging
from typing import Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from app.core.exceptions import ExtractionError
from app.core.logging import get_logger
from app.domain.models import Metadata

# Leading bytes inspected when sniffing for binary content
_SNIFF_BYTES = 1024

TITLE_META = ("og:title", "twitter:title")
DESCRIPTION_META = ("og:description", "twitter:description", "description")
IMAGE_META = (
    "og:image",
    "og:image:url",
    "og:image:secure_url",
    "twitter:image",
    "twitter:image:src",
)
URL_META = ("og:url",)


def _clean(value: Optional[str]) -> Optional[str]:
    """Collapse whitespace; empty strings become None."""
    if value is None:
        return None
    value = " ".join(value.split())
    return value or None


def _absolute_http_url(value: Optional[str], base_url: str) -> Optional[str]:
    """Resolve a possibly relative URL; only http(s) results are kept."""
    value = _clean(value)
    if not value:
        return None
    try:
        resolved = urljoin(base_url, value)
        scheme = urlsplit(resolved).scheme
    except ValueError:
        # e.g. an unterminated IPv6 literal such as "http://[broken"
        return None
    if scheme not in ("http", "https"):
        return None
    return resolved


def _find_meta(soup: BeautifulSoup, *names: str) -> Optional[str]:
    for name in names:
        tag = soup.find("meta", attrs={"property": name}) or soup.find(
            "meta", attrs={"name": name}
        )
        if tag:
            content = _clean(tag.get("content"))
            if content:
                return content
    return None


def _find_link(soup: BeautifulSoup, rel: str) -> Optional[str]:
    for tag in soup.find_all("link", href=True):
        rels = tag.get("rel") or []
        if isinstance(rels, str):
            rels = rels.split()
        if rel in (r.lower() for r in rels):
            return tag["href"]
    return None


class MetadataExtractor:
    """Extracts title, description, canonical URL and preview image."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or get_logger(__name__)

    def extract(self, html: bytes, final_url: str) -> Metadata:
        """
        Extract link-preview metadata from a fetched document.

        Args:
            html: Raw response body.
            final_url: URL the document was served from, after redirects.
                Relative image and canonical URLs are resolved against it.

        Returns:
            Metadata with every undeterminable field set to None.

        Raises:
            ExtractionError: If the body is binary or unparseable.
        """
        if not html or not html.strip():
            self._logger.debug("Empty document url=%s", final_url)
            return Metadata()

        if b"\x00" in html[:_SNIFF_BYTES]:
            raise ExtractionError(final_url, "Response body is not an HTML document")

        try:
            soup = BeautifulSoup(html, "html.parser")
        except Exception as exc:
            self._logger.warning("HTML parsing failed url=%s: %s", final_url, exc)
            raise ExtractionError(final_url, f"Unparseable document: {exc}") from exc

        metadata = Metadata(
            title=self._title(soup),
            description=_find_meta(soup, *DESCRIPTION_META),
            url=self._canonical_url(soup, final_url),
            image=self._image(soup, final_url),
        )
        self._logger.debug(
            "Extracted url=%s has_title=%s has_description=%s has_image=%s",
            final_url,
            metadata.title is not None,
            metadata.description is not None,
            metadata.image is not None,
        )
        return metadata

    @staticmethod
    def _title(soup: BeautifulSoup) -> Optional[str]:
        title = _find_meta(soup, *TITLE_META)
        if title:
            return title
        if soup.title is not None:
            title = _clean(soup.title.get_text())
            if title:
                return title
        heading = soup.find("h1")
        if heading is not None:
            return _clean(heading.get_text(" "))
        return None

    @staticmethod
    def _canonical_url(soup: BeautifulSoup, base_url: str) -> Optional[str]:
        return _absolute_http_url(
            _find_meta(soup, *URL_META) or _find_link(soup, "canonical"),
            base_url,
        )

    @staticmethod
    def _image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
        return _absolute_http_url(
            _find_meta(soup, *IMAGE_META) or _find_link(soup, "image_src"),
            base_url,
        )
