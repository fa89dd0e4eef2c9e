"""Pydantic schemas for catalog lookup, view and group endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field

from server.schemas.common import CamelModel
from server.types import FileRecord, ViewRecord


class ViewLookupRequest(BaseModel):
    """Request model for resolving an id expression (POST /view)."""
    id: str = Field(min_length=1)
    pwd: Optional[str] = None


class FileEntry(CamelModel):
    """Public view of a file record."""
    file_id: str
    file_name: str
    file_size: int
    mime_type: str
    download_url: str
    release_id: Optional[int] = None
    release_tag: Optional[str] = None
    uploaded_at: str

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileEntry":
        return cls(**record.to_public_dict())


class FilesResponse(CamelModel):
    """Response model for a resolved lookup."""
    success: bool = True
    files: List[FileEntry]


class CreateViewRequest(CamelModel):
    """Request model for creating a short-id view."""
    file_ids: List[str] = Field(min_length=1)
    password_hash: Optional[str] = None
    origin: Optional[str] = None


class CreateGroupRequest(CamelModel):
    """Request model for creating a named group."""
    group_id: str = Field(min_length=1)
    file_ids: List[str] = Field(min_length=1)
    password_hash: Optional[str] = None


class ViewResponse(CamelModel):
    """Response model for a created view or group."""
    success: bool = True
    id: str
    kind: str
    file_ids: List[str]
    share_url: Optional[str] = None
    created_at: str
    protected: bool = False

    @classmethod
    def from_record(cls, view: ViewRecord) -> "ViewResponse":
        return cls(
            id=view.id,
            kind=view.kind,
            file_ids=list(view.file_ids),
            share_url=view.share_url,
            created_at=view.created_at,
            protected=bool(view.password_hash),
        )
