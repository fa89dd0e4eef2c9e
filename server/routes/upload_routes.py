"""Upload API routes: chunk sessions and single-shot uploads."""

import base64
import binascii
from typing import Optional
from urllib.parse import unquote

from fastapi import APIRouter, Header, Query, Request

from server.exceptions import InvalidChunkError, InvalidPayloadError
from server.schemas.uploads import (
    ChunkUploadResponse,
    DirectJsonUploadRequest,
    FinalizeUploadRequest,
    InitiateUploadRequest,
    InitiateUploadResponse,
    UploadedAsset,
    UploadResponse
)
from server.services.upload_service import UploadResult, UploadService

router = APIRouter(prefix="/uploads", tags=["Uploads"])


def to_upload_response(result: UploadResult) -> UploadResponse:
    return UploadResponse(
        data=UploadedAsset(
            asset_id=result.blob.id,
            download_url=result.record.download_url,
            name=result.blob.name,
            size=result.record.file_size,
            file_id=result.record.file_id,
        )
    )


def decode_base64(payload) -> bytes:
    """
    Raises:
        InvalidPayloadError: If the payload is not valid base64
    """
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidPayloadError(f"Invalid base64 payload: {e}") from e


@router.post("/initiate", response_model=InitiateUploadResponse)
async def initiate_upload(request: InitiateUploadRequest):
    """
    Open a chunk session under a server-generated id.

    Parameters:
        - fileName: Name of the file being uploaded
        - totalChunks: Number of chunks the client will send
        - mimeType: Declared MIME type (optional)

    Returns:
        - uploadId: Token to pass with every chunk and with finalize
    """
    upload_service = UploadService()
    upload_id = await upload_service.initiate(request.file_name, request.total_chunks, request.mime_type)
    return InitiateUploadResponse(upload_id=upload_id)


@router.post("/chunk", response_model=ChunkUploadResponse)
async def upload_chunk(
    request: Request,
    upload_id: str = Query(..., alias="uploadId"),
    chunk_index: int = Query(..., alias="chunkIndex"),
    total_chunks: int = Query(..., alias="totalChunks"),
    file_name: str = Query(..., alias="fileName"),
    mime_type: Optional[str] = Query(None, alias="mimeType"),
):
    """
    Store one chunk. The body is the raw chunk bytes.

    Parameters:
        - uploadId, chunkIndex, totalChunks, fileName: query string
        - mimeType: query string (optional, recorded when the session is created)

    Returns:
        - chunkIndex: Index that was stored
        - receivedChunks: Number of filled slots
        - totalChunks: Declared chunk count

    Raises:
        - 400: Index out of range, inconsistent chunk count or empty body
    """
    payload = await request.body()
    if not payload:
        raise InvalidChunkError(f"Chunk {chunk_index} of upload {upload_id} has an empty body")

    upload_service = UploadService()
    progress = await upload_service.receive_chunk(
        upload_id=upload_id,
        chunk_index=chunk_index,
        total_chunks=total_chunks,
        file_name=file_name,
        payload=payload,
        mime_type=mime_type,
    )

    return ChunkUploadResponse(
        chunk_index=chunk_index,
        received_chunks=progress.received_chunks,
        total_chunks=progress.total_chunks,
    )


@router.post("/finalize", response_model=UploadResponse)
async def finalize_upload(request: FinalizeUploadRequest):
    """
    Reassemble a chunk session, store the object and record it in the catalog.

    Parameters:
        - uploadId: Session token
        - fileName: Asset name (defaults to the name sent with the chunks)
        - releaseUploadUrl / destination: Release upload URL (optional;
          a release is created for the file when absent)
        - fileId, mimeType, passwordHash, releaseId, releaseTag: optional

    Returns:
        - data: asset_id, download_url, name, size, file_id

    Raises:
        - 400: Chunks missing (missingChunks lists them)
        - 404: Unknown or expired session
        - 409: File id taken, or catalog write conflict
        - 502: Blob store or catalog backend failure
    """
    upload_service = UploadService()
    result = await upload_service.finalize_chunked(
        upload_id=request.upload_id,
        file_name=request.file_name,
        destination=request.upload_target,
        file_id=request.file_id,
        mime_type=request.mime_type,
        password_hash=request.password_hash,
        release_id=request.release_id,
        release_tag=request.release_tag,
    )
    return to_upload_response(result)


@router.post("/direct", response_model=UploadResponse)
async def upload_direct(
    request: Request,
    file_name: str = Header(..., alias="X-File-Name"),
    upload_url: Optional[str] = Header(None, alias="X-Upload-Url"),
    is_base64: bool = Header(False, alias="X-Is-Base64"),
    mime_type: Optional[str] = Header(None, alias="X-Mime-Type"),
    file_id: Optional[str] = Header(None, alias="X-File-Id"),
    password_hash: Optional[str] = Header(None, alias="X-Password-Hash"),
):
    """
    Single-shot upload of a body below the chunking threshold.

    Parameters:
        - body: Raw bytes, or base64 text when X-Is-Base64 is true
        - X-File-Name: Percent-encoded asset name (required)
        - X-Upload-Url: Release upload URL (optional)
        - X-Mime-Type, X-File-Id, X-Password-Hash: optional

    Returns:
        - data: asset_id, download_url, name, size, file_id
    """
    body = await request.body()
    if not body:
        raise InvalidPayloadError("Request body is empty")
    data = decode_base64(body) if is_base64 else body

    upload_service = UploadService()
    result = await upload_service.upload_single(
        data=data,
        file_name=unquote(file_name),
        destination=upload_url,
        file_id=file_id,
        mime_type=mime_type,
        password_hash=password_hash,
    )
    return to_upload_response(result)


@router.post("/direct/json", response_model=UploadResponse)
async def upload_direct_json(request: DirectJsonUploadRequest):
    """
    Single-shot upload with the object carried as base64 in a JSON body.

    Parameters:
        - fileBase64: Base64 encoded object
        - fileName: Asset name
        - uploadUrl: Release upload URL (optional)

    Returns:
        - data: asset_id, download_url, name, size, file_id
    """
    upload_service = UploadService()
    result = await upload_service.upload_single(
        data=decode_base64(request.file_base64),
        file_name=request.file_name,
        destination=request.upload_url,
        file_id=request.file_id,
        mime_type=request.mime_type,
        password_hash=request.password_hash,
        release_id=request.release_id,
        release_tag=request.release_tag,
    )
    return to_upload_response(result)
