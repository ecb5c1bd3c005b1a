"""Async HTTP fetcher.

Responsible solely for retrieving one page body for the extractor.

Each call opens its own ``httpx.AsyncClient`` inside an ``async with`` block,
so nothing is shared between concurrent extractions and a cancelled caller
never leaves a dangling connection behind.  All transport behaviour
(timeout, TLS verification, redirects, headers) comes from the
``FetchOptions`` passed in; there is no module-level client.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from app.core.config import Settings, settings
from app.core.errors import FetchError, HttpStatusError
from app.models.metadata.document import PageDocument

logger = logging.getLogger(__name__)

BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


@dataclass(frozen=True)
class FetchOptions:
    """Transport configuration for a single fetch.

    ``verify_tls`` defaults to ``False``: certificates that are self-signed,
    expired or issued for another name are accepted.  This is a known
    relaxation for a best-effort metadata tool, not an oversight.
    """

    timeout: float = 5.0
    verify_tls: bool = False
    max_redirects: int = 20
    user_agent: str = ""
    headers: dict[str, str] = field(default_factory=lambda: dict(BROWSER_HEADERS))
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def from_settings(cls, config: Settings = settings) -> FetchOptions:
        return cls(
            timeout=config.http_timeout,
            verify_tls=config.http_verify_tls,
            max_redirects=config.http_max_redirects,
            user_agent=config.http_user_agent,
        )

    def request_headers(self) -> dict[str, str]:
        headers = dict(self.headers)
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers


def _build_client(options: FetchOptions) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(options.timeout),
        follow_redirects=True,
        max_redirects=options.max_redirects,
        verify=options.verify_tls,
        headers=options.request_headers(),
        transport=options.transport,
    )


async def fetch_page(url: str, options: FetchOptions) -> PageDocument:
    """Issue exactly one GET for *url* and return its body.

    The whole exchange, body included, must finish within
    ``options.timeout`` seconds.  No retries are attempted.

    Raises:
        HttpStatusError: the final response status is outside 2xx.
        FetchError: any network, TLS, redirect or timeout failure.
    """
    try:
        return await asyncio.wait_for(_do_fetch(url, options), timeout=options.timeout)
    except asyncio.TimeoutError as exc:
        raise FetchError(
            f"Request to '{url}' timed out after {int(options.timeout * 1000)} ms"
        ) from exc


async def _do_fetch(url: str, options: FetchOptions) -> PageDocument:
    async with _build_client(options) as client:
        try:
            response = await client.get(url)
        except httpx.InvalidURL as exc:
            raise FetchError(f"Invalid URL '{url}': {exc}") from exc
        except httpx.TimeoutException as exc:
            raise FetchError(
                f"Request to '{url}' timed out after {int(options.timeout * 1000)} ms"
            ) from exc
        except httpx.TooManyRedirects as exc:
            raise FetchError(f"Too many redirects for '{url}'") from exc
        except httpx.RequestError as exc:
            raise FetchError(f"Request error for '{url}': {exc}") from exc

    if not response.is_success:
        raise HttpStatusError(response.status_code, url)

    return PageDocument(
        url=url,
        final_url=str(response.url),
        status_code=response.status_code,
        html=response.text,
    )
