from __future__ import annotations

import asyncio
import logging

from app.core.errors import FetchError
from app.models.metadata.document import FetchTarget, explicit_scheme
from app.models.metadata.schemas import ExtractedMetadata
from app.services.metadata.extractor import extract_metadata
from app.workers.fetcher import FetchOptions, fetch_page

logger = logging.getLogger(__name__)


class MetadataService:
    """Business logic for turning a host/URL into form pre-fill metadata."""

    def __init__(self, options: FetchOptions) -> None:
        self._options = options

    async def extract(self, raw_url: str) -> ExtractedMetadata:
        """Fetch *raw_url* once and extract its metadata.

        ``raw_url`` must be non-empty; rejecting empty input is the
        caller's job.  Nothing is cached or persisted.

        Raises:
            ExtractionError: on fetch, status or parse failure.
        """
        scheme = explicit_scheme(raw_url.strip())
        if scheme is not None and scheme not in ("http", "https"):
            raise FetchError(f"Unsupported URL scheme '{scheme}' in '{raw_url}'")

        target = FetchTarget.from_input(raw_url)
        logger.info("Fetching metadata for: %s", target.fetch_url)
        page = await fetch_page(target.fetch_url, self._options)
        # Parsing is CPU-bound; keep it off the event loop.
        metadata = await asyncio.to_thread(extract_metadata, page.html, target)
        logger.info(
            "Extracted metadata for %s: name=%r, %d image(s)",
            target.fetch_url,
            metadata.name,
            len(metadata.images),
        )
        return metadata
