from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import ExtractionError, format_stack
from app.models.common import ErrorResponse
from app.models.metadata.schemas import ExtractedMetadata
from app.services.metadata.service import MetadataService
from app.workers.fetcher import FetchOptions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/metadata", tags=["metadata"])


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


def _get_service() -> MetadataService:
    """FastAPI dependency that builds a ``MetadataService`` for each request."""
    return MetadataService(FetchOptions.from_settings(settings))


# ---------------------------------------------------------------------------
# GET /api/metadata
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=ExtractedMetadata,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Extract form pre-fill metadata from a page",
)
async def get_metadata(
    url: Optional[str] = None,
    service: MetadataService = Depends(_get_service),
) -> ExtractedMetadata | JSONResponse:
    """Fetch the page behind *url* and return its title, description and media.

    ``url`` may be a bare host (``example.com``) or a full URL.

    - **200** — metadata extracted
    - **400** — ``url`` query parameter missing or blank
    - **500** — the page could not be fetched or parsed
    """
    if not url or not url.strip():
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="URL is required").model_dump(exclude_none=True),
        )

    try:
        return await service.extract(url)
    except ExtractionError as exc:
        logger.warning("GET /api/metadata failed for %s: %s", url, exc)
        body = ErrorResponse(error=str(exc), url=url, stack=format_stack(exc))
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
