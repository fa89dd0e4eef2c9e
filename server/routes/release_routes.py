"""Release creation and download proxy routes."""

from fastapi import APIRouter, Query, status
from fastapi.responses import StreamingResponse

from server.schemas.releases import CreateReleaseRequest, ReleaseResponse
from server.service_locator import get_blob_store
from server.services.upload_service import UploadService
from server.utils import generate_file_id

router = APIRouter(tags=["Releases"])


async def create_release_from_request(request: CreateReleaseRequest) -> ReleaseResponse:
    upload_service = UploadService()
    release = await upload_service.create_release(
        request.release_tag or generate_file_id(),
        request.metadata,
    )
    return ReleaseResponse(
        release_id=release.release_id,
        upload_url=release.upload_url,
        html_url=release.html_url,
        tag_name=release.tag_name,
    )


@router.post("/releases", response_model=ReleaseResponse, status_code=status.HTTP_201_CREATED)
async def create_release(request: CreateReleaseRequest):
    """
    Create a release to hold uploaded assets.

    Parameters:
        - releaseTag: Tag name (a fresh file id is used when absent)
        - metadata: Free-form data stored as the release body

    Returns:
        - releaseId, uploadUrl, htmlUrl, tagName

    Raises:
        - 502: Blob store rejected the request
    """
    return await create_release_from_request(request)


@router.get("/download")
async def download(url: str = Query(..., min_length=1, description="Asset download URL")):
    """
    Stream a stored asset through the server.

    Raises:
        - 400: URL outside the allowed hosts
        - 502: Asset could not be fetched
    """
    blob_store = get_blob_store()
    headers, body = await blob_store.open_download(url)
    return StreamingResponse(body, headers=headers, media_type=headers.get("Content-Type"))
