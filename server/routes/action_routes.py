"""Single endpoint dispatching tagged actions to their handlers."""

from typing import Awaitable, Callable, Dict, Type

from fastapi import APIRouter, Request
from pydantic import BaseModel

from common.logging_config import get_logger
from server.routes.catalog_routes import share_origin, to_files_response
from server.routes.release_routes import create_release_from_request
from server.routes.upload_routes import decode_base64, to_upload_response
from server.schemas.actions import (
    ActionRequest,
    CreateGroupAction,
    CreateReleaseAction,
    CreateViewAction,
    FinalizeChunksAction,
    GetFilesAction,
    UploadAssetAction
)
from server.schemas.catalog import ViewResponse
from server.services.catalog_service import CatalogService
from server.services.upload_service import UploadService

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Actions"])

Handler = Callable[[BaseModel, Request], Awaitable[BaseModel]]


async def handle_create_release(action: CreateReleaseAction, request: Request):
    return await create_release_from_request(action)


async def handle_upload_asset(action: UploadAssetAction, request: Request):
    upload_service = UploadService()
    result = await upload_service.upload_single(
        data=decode_base64(action.file_base64),
        file_name=action.file_name,
        destination=action.upload_url,
        file_id=action.file_id,
        mime_type=action.mime_type,
        password_hash=action.password_hash,
        release_id=action.release_id,
        release_tag=action.release_tag,
    )
    return to_upload_response(result)


async def handle_finalize_chunks(action: FinalizeChunksAction, request: Request):
    upload_service = UploadService()
    result = await upload_service.finalize_chunked(
        upload_id=action.upload_id,
        file_name=action.file_name,
        destination=action.upload_target,
        file_id=action.file_id,
        mime_type=action.mime_type,
        password_hash=action.password_hash,
        release_id=action.release_id,
        release_tag=action.release_tag,
    )
    return to_upload_response(result)


async def handle_create_view(action: CreateViewAction, request: Request):
    catalog_service = CatalogService()
    view = await catalog_service.create_view(
        action.file_ids,
        password_hash=action.password_hash,
        origin=share_origin(request, action.origin),
    )
    return ViewResponse.from_record(view)


async def handle_create_group(action: CreateGroupAction, request: Request):
    catalog_service = CatalogService()
    group = await catalog_service.create_group(action.group_id, action.file_ids, action.password_hash)
    return ViewResponse.from_record(group)


async def handle_get_files(action: GetFilesAction, request: Request):
    catalog_service = CatalogService()
    records = await catalog_service.resolve(action.id, action.pwd)
    return to_files_response(records)


ACTION_HANDLERS: Dict[Type[BaseModel], Handler] = {
    CreateReleaseAction: handle_create_release,
    UploadAssetAction: handle_upload_asset,
    FinalizeChunksAction: handle_finalize_chunks,
    CreateViewAction: handle_create_view,
    CreateGroupAction: handle_create_group,
    GetFilesAction: handle_get_files,
}


@router.post("/actions")
async def dispatch_action(body: ActionRequest, request: Request):
    """
    Run one tagged action.

    Parameters:
        - action: create-release | upload-asset | finalize-chunks |
                  create-view | create-group | get-files
        - remaining fields: as for the matching dedicated endpoint

    Returns:
        - The matching endpoint's response body

    Raises:
        - 422: Unknown action or invalid fields
    """
    action = body.root
    handler = ACTION_HANDLERS[type(action)]
    logger.info(f"Dispatching action {action.action}")
    response = await handler(action, request)
    return response.model_dump(by_alias=True)
