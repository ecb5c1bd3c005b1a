"""HTML -> ``ExtractedMetadata``.

Each field is resolved through an ordered fallback chain: a tuple of
``(css selector, attribute)`` candidates tried in sequence until one yields a
non-blank value.  ``attribute=None`` means the element's text.  The chains
below are the single source of truth for field precedence.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from app.core.errors import ParseError
from app.models.metadata.document import FetchTarget, has_http_scheme
from app.models.metadata.schemas import ExtractedMetadata

logger = logging.getLogger(__name__)

Candidate = tuple[str, Optional[str]]

NAME_CHAIN: tuple[Candidate, ...] = (
    ('meta[property="og:title"]', "content"),
    ('meta[name="twitter:title"]', "content"),
    ("title", None),
)

DESCRIPTION_CHAIN: tuple[Candidate, ...] = (
    ('meta[property="og:description"]', "content"),
    ('meta[name="description"]', "content"),
    ('meta[name="twitter:description"]', "content"),
)

LOGO_CHAIN: tuple[Candidate, ...] = (
    ('meta[property="og:image"]', "content"),
    ('meta[name="twitter:image"]', "content"),
    ('link[rel="icon"]', "href"),
    ('link[rel="shortcut icon"]', "href"),
)

VIDEO_CHAIN: tuple[Candidate, ...] = (
    ('meta[property="og:video"]', "content"),
    ('meta[property="og:video:url"]', "content"),
    ("video source", "src"),
)

IMAGE_SELECTOR = "img[src]"


def parse_document(html: str) -> BeautifulSoup:
    """Parse *html* with the tolerant stdlib-backed parser."""
    try:
        return BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ParseError(f"Could not parse HTML: {exc}") from exc


def _candidate_value(soup: BeautifulSoup, selector: str, attribute: Optional[str]) -> str:
    element = soup.select_one(selector)
    if element is None:
        return ""
    if attribute is None:
        return element.get_text().strip()
    value = element.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


def first_match(soup: BeautifulSoup, chain: tuple[Candidate, ...], default: str = "") -> str:
    """Return the first non-blank candidate value of *chain*, else *default*."""
    for selector, attribute in chain:
        value = _candidate_value(soup, selector, attribute)
        if value:
            return value
    return default


def make_absolute(value: str, base_url: str) -> str:
    """Resolve *value* to an absolute URL against *base_url*.

    ``http(s)://`` values are kept, protocol-relative ``//`` values get
    ``https:``, everything else goes through RFC 3986 resolution.  The result
    is normalized by ``httpx.URL`` (percent-encoding, case of scheme and
    host) so equal resources compare equal.  Returns ``""`` for values that
    cannot form a valid URL.
    """
    if not value:
        return ""
    if has_http_scheme(value):
        resolved = value
    elif value.startswith("//"):
        resolved = f"https:{value}"
    else:
        resolved = urljoin(base_url, value)
    try:
        return str(httpx.URL(resolved))
    except httpx.InvalidURL:
        logger.debug("Dropping unusable URL %r on %s", value, base_url)
        return ""


def collect_images(soup: BeautifulSoup, base_url: str) -> list[str]:
    """Absolute ``<img src>`` URLs in document order, first occurrence wins."""
    images: list[str] = []
    seen: set[str] = set()
    for element in soup.select(IMAGE_SELECTOR):
        src = element.get("src")
        if not isinstance(src, str):
            continue
        url = make_absolute(src.strip(), base_url).strip()
        if url and url not in seen:
            seen.add(url)
            images.append(url)
    return images


def extract_metadata(html: str, target: FetchTarget) -> ExtractedMetadata:
    """Apply every fallback chain to *html* fetched from ``target.fetch_url``.

    Raises:
        ParseError: the body could not be parsed at all.
    """
    soup = parse_document(html)
    base_url = target.fetch_url

    name = first_match(soup, NAME_CHAIN) or target.host_label or target.host or target.raw
    description = first_match(soup, DESCRIPTION_CHAIN)
    default_logo = f"https://{target.host}/favicon.ico"
    logo = make_absolute(first_match(soup, LOGO_CHAIN, default=default_logo), base_url)
    video = first_match(soup, VIDEO_CHAIN)

    metadata = ExtractedMetadata(
        name=name.strip(),
        description=description.strip(),
        logo=(logo or make_absolute(default_logo, base_url)).strip(),
        video=make_absolute(video, base_url).strip(),
        images=collect_images(soup, base_url),
    )
    logger.debug("Extracted metadata for %s: %r", base_url, metadata)
    return metadata
