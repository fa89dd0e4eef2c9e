"""Catalog lookup, view and group routes."""

from typing import List, Optional

from fastapi import APIRouter, Query, Request, status

from server import config
from server.schemas.catalog import (
    CreateGroupRequest,
    CreateViewRequest,
    FileEntry,
    FilesResponse,
    ViewLookupRequest,
    ViewResponse
)
from server.services.catalog_service import CatalogService
from server.types import FileRecord

router = APIRouter(tags=["Catalog"])


def to_files_response(records: List[FileRecord]) -> FilesResponse:
    return FilesResponse(files=[FileEntry.from_record(record) for record in records])


def share_origin(request: Request, requested: Optional[str] = None) -> str:
    return (requested or config.PUBLIC_ORIGIN or str(request.base_url)).rstrip("/")


@router.get("/view", response_model=FilesResponse)
async def view_files(
    id: str = Query(..., min_length=1, description="File id, comma-separated ids, or view/group id"),
    pwd: Optional[str] = Query(None, description="SHA-256 hex of the password"),
):
    """
    Resolve an id expression to file records.

    Returns:
        - files: Matching records in request order

    Raises:
        - 403: Password required or invalid (requiresPassword: true)
        - 404: Nothing matches
    """
    catalog_service = CatalogService()
    records = await catalog_service.resolve(id, pwd)
    return to_files_response(records)


@router.post("/view", response_model=FilesResponse)
async def view_files_post(request: ViewLookupRequest):
    """
    Same as ``GET /view`` with the id and password hash in a JSON body,
    keeping the hash out of URLs and access logs.
    """
    catalog_service = CatalogService()
    records = await catalog_service.resolve(request.id, request.pwd)
    return to_files_response(records)


@router.post("/views", response_model=ViewResponse, status_code=status.HTTP_201_CREATED)
async def create_view(body: CreateViewRequest, request: Request):
    """
    Create a short-id view over existing file ids.

    Parameters:
        - fileIds: File ids to include
        - passwordHash: Protects the whole view (optional)
        - origin: Base URL for the share link (optional)

    Returns:
        - id, kind, fileIds, shareUrl, createdAt, protected

    Raises:
        - 409: No free id after repeated attempts, or catalog write conflict
    """
    catalog_service = CatalogService()
    view = await catalog_service.create_view(
        body.file_ids,
        password_hash=body.password_hash,
        origin=share_origin(request, body.origin),
    )
    return ViewResponse.from_record(view)


@router.post("/groups", response_model=ViewResponse, status_code=status.HTTP_201_CREATED)
async def create_group(body: CreateGroupRequest):
    """
    Create a group under a caller-chosen id.

    Raises:
        - 409: Group id already taken
    """
    catalog_service = CatalogService()
    group = await catalog_service.create_group(body.group_id, body.file_ids, body.password_hash)
    return ViewResponse.from_record(group)
