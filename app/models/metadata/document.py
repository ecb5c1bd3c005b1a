from __future__ import annotations

import re
from urllib.parse import urlsplit

from pydantic import BaseModel

_HTTP_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_ANY_SCHEME = re.compile(r"^([a-z][a-z0-9+.\-]*)://", re.IGNORECASE)


def has_http_scheme(value: str) -> bool:
    """Return True when *value* starts with ``http://`` or ``https://``."""
    return bool(_HTTP_SCHEME.match(value))


def explicit_scheme(value: str) -> str | None:
    """Return the ``scheme`` of a ``scheme://...`` string, lower-cased."""
    match = _ANY_SCHEME.match(value)
    return match.group(1).lower() if match else None


class FetchTarget(BaseModel):
    """The caller-supplied host/URL and the absolute URL derived from it.

    Request-scoped; built from the raw ``url`` query value.
    """

    raw: str
    fetch_url: str

    @classmethod
    def from_input(cls, raw: str) -> FetchTarget:
        value = raw.strip()
        fetch_url = value if has_http_scheme(value) else f"https://{value}"
        return cls(raw=raw, fetch_url=fetch_url)

    @property
    def host(self) -> str:
        """Network location of ``fetch_url`` (``example.com``, ``host:8443``)."""
        return urlsplit(self.fetch_url).netloc

    @property
    def host_label(self) -> str:
        """The part of the hostname before its first dot."""
        hostname = urlsplit(self.fetch_url).hostname or self.host
        return hostname.split(".", 1)[0]


class PageDocument(BaseModel):
    """Body of one successful fetch.

    Never returned from the API and never stored; it lives for exactly one
    extraction call.
    """

    url: str
    final_url: str
    status_code: int
    html: str
