"""Pydantic schemas for release endpoints."""

from typing import Any, Dict, Optional

from pydantic import Field

from server.schemas.common import CamelModel


class CreateReleaseRequest(CamelModel):
    """Request model for creating a release container."""
    release_tag: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ReleaseResponse(CamelModel):
    """Response model for a created release."""
    success: bool = True
    release_id: int
    upload_url: str
    html_url: str
    tag_name: str
