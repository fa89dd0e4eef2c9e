"""Pydantic schemas for upload endpoints."""

from typing import Optional

from pydantic import BaseModel, Field

from server.schemas.common import CamelModel


class InitiateUploadRequest(CamelModel):
    """Request model for opening a chunk session."""
    file_name: str = Field(min_length=1)
    total_chunks: int = Field(ge=1)
    mime_type: Optional[str] = None


class InitiateUploadResponse(CamelModel):
    """Response model for a new chunk session."""
    success: bool = True
    upload_id: str


class ChunkUploadResponse(CamelModel):
    """Response model for one stored chunk."""
    success: bool = True
    chunk_index: int
    received_chunks: int
    total_chunks: int


class FinalizeUploadRequest(CamelModel):
    """Request model for reassembling and committing a chunk session."""
    upload_id: str = Field(min_length=1)
    file_name: Optional[str] = None
    release_upload_url: Optional[str] = None
    destination: Optional[str] = None
    file_id: Optional[str] = None
    mime_type: Optional[str] = None
    password_hash: Optional[str] = None
    release_id: Optional[int] = None
    release_tag: Optional[str] = None

    @property
    def upload_target(self) -> Optional[str]:
        return self.destination or self.release_upload_url


class DirectJsonUploadRequest(CamelModel):
    """Request model for a single-shot base64 upload."""
    file_base64: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    upload_url: Optional[str] = None
    file_id: Optional[str] = None
    mime_type: Optional[str] = None
    password_hash: Optional[str] = None
    release_id: Optional[int] = None
    release_tag: Optional[str] = None


class UploadedAsset(BaseModel):
    """Stored object summary returned by every upload path."""
    asset_id: int
    download_url: str
    name: str
    size: int
    file_id: str


class UploadResponse(CamelModel):
    """Response model for a committed upload."""
    success: bool = True
    data: UploadedAsset
