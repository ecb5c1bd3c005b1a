"""Failure kinds raised by the metadata extraction core.

Every failure is an ``ExtractionError``; the API layer catches only the
base class.
"""

from __future__ import annotations

import traceback
from typing import Optional

from app.core.config import settings


class ExtractionError(Exception):
    """Terminal failure: no ``ExtractedMetadata`` can be produced."""


class FetchError(ExtractionError):
    """The page could not be retrieved (DNS, connect, TLS, timeout, scheme)."""


class HttpStatusError(FetchError):
    """The target answered with a non-2xx status."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP error! status: {status_code}")


class ParseError(ExtractionError):
    """The response body could not be turned into a document tree."""


def format_stack(exc: BaseException) -> Optional[str]:
    """Formatted traceback of *exc* in development, ``None`` otherwise."""
    if not settings.is_development:
        return None
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
