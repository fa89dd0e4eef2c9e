"""Pydantic schemas for API requests and responses."""

from server.schemas.actions import (
    ActionRequest,
    CreateGroupAction,
    CreateReleaseAction,
    CreateViewAction,
    FinalizeChunksAction,
    GetFilesAction,
    UploadAssetAction
)
from server.schemas.catalog import (
    CreateGroupRequest,
    CreateViewRequest,
    FileEntry,
    FilesResponse,
    ViewLookupRequest,
    ViewResponse
)
from server.schemas.common import CamelModel, ErrorResponse
from server.schemas.releases import CreateReleaseRequest, ReleaseResponse
from server.schemas.uploads import (
    ChunkUploadResponse,
    DirectJsonUploadRequest,
    FinalizeUploadRequest,
    InitiateUploadRequest,
    InitiateUploadResponse,
    UploadedAsset,
    UploadResponse
)

__all__ = [
    "ActionRequest",
    "CreateGroupAction",
    "CreateReleaseAction",
    "CreateViewAction",
    "FinalizeChunksAction",
    "GetFilesAction",
    "UploadAssetAction",
    "CreateGroupRequest",
    "CreateViewRequest",
    "FileEntry",
    "FilesResponse",
    "ViewLookupRequest",
    "ViewResponse",
    "CamelModel",
    "ErrorResponse",
    "CreateReleaseRequest",
    "ReleaseResponse",
    "ChunkUploadResponse",
    "DirectJsonUploadRequest",
    "FinalizeUploadRequest",
    "InitiateUploadRequest",
    "InitiateUploadResponse",
    "UploadedAsset",
    "UploadResponse"
]
