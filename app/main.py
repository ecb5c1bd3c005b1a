from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.router import router
from app.core.config import settings
from app.core.errors import format_stack
from app.models.common import ErrorResponse

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure the ``app`` logger namespace.

    ``logging.basicConfig`` is a no-op when the root logger already has
    handlers (e.g. when uvicorn sets up its own handlers first).
    Configuring the ``app`` namespace directly, with ``propagate = False``,
    ensures all application logs reach stdout regardless of uvicorn's
    root-logger setup.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    )
    app_log = logging.getLogger("app")
    app_log.setLevel(level)
    if not app_log.handlers:
        app_log.addHandler(handler)
    app_log.propagate = False


_configure_logging()


app = FastAPI(
    title="AI Tools Metadata",
    description="Scrapes Open Graph, Twitter-card and HTML metadata to pre-fill tool submissions.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


def _cors_headers(request: Request) -> dict[str, str]:
    origin = request.headers.get("origin")
    if origin is None:
        return {}
    if "*" in settings.cors_allow_origins:
        return {"Access-Control-Allow-Origin": "*"}
    if origin in settings.cors_allow_origins:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {}


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = ErrorResponse(
        error="Internal server error",
        message=str(exc),
        stack=format_stack(exc),
    )
    response = JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
    # Exception handlers run outside CORSMiddleware.
    response.headers.update(_cors_headers(request))
    return response


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok"}
