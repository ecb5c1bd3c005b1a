from __future__ import annotations

from pydantic import BaseModel, Field


class ExtractedMetadata(BaseModel):
    """API response shape for ``GET /api/metadata``.

    Always fully populated: each field holds either a discovered value or
    its default.  URL-valued fields are absolute.
    """

    name: str
    description: str = ""
    logo: str
    video: str = ""
    images: list[str] = Field(default_factory=list)
