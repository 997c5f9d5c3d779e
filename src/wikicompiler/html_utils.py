"""Shared HTML utilities for article processing."""

from __future__ import annotations

import re

try:
    from bs4 import BeautifulSoup
    from bs4.element import Tag
except ImportError as exc:  # pragma: no cover - runtime dependency check
    raise RuntimeError(
        "BeautifulSoup4 is required for HTML parsing (pip install beautifulsoup4)."
    ) from exc


UNWANTED_TAGS = ("script", "style", "noscript", "link", "meta", "template")

_IMG_RE = re.compile(r"<img\s", re.IGNORECASE)
# Characters outside the XML 1.0 Char production.
_INVALID_XML_CHARS_RE = re.compile(
    r"[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def make_soup(html: str) -> BeautifulSoup:
    """Parse an HTML document or fragment with the lxml tree builder."""
    return BeautifulSoup(html, "lxml")


def strip_unwanted_elements(soup: BeautifulSoup) -> None:
    """Remove elements that never carry document content."""
    for tag in soup.find_all(list(UNWANTED_TAGS)):
        tag.decompose()


def strip_invalid_xml_chars(text: str) -> str:
    """Drop control characters that DOCX and ODT parts cannot carry."""
    return _INVALID_XML_CHARS_RE.sub("", text)


def find_document_root(soup: BeautifulSoup) -> Tag:
    """Find the element whose children are the document content.

    Searches for the root in the following order:
    1. <body> element
    2. The soup itself as fallback
    """
    if soup.body:
        return soup.body
    return soup


def extract_body_html(html: str) -> str:
    """Return the inner HTML of ``<body>``, or the input when there is none.

    Images are marked for lazy loading so previews of long articles stay light.
    """
    soup = make_soup(html)
    if soup.body is None:
        content = html
    else:
        content = soup.body.decode_contents()
    return _IMG_RE.sub('<img loading="lazy" decoding="async" ', content)
