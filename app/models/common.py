from __future__ import annotations

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body returned when a request cannot be served."""

    error: str
    url: str | None = None
    message: str | None = None
    stack: str | None = None
