"""Upload service: chunk intake, finalize and single-shot uploads."""

import mimetypes
from dataclasses import dataclass
from typing import Any, Dict, Optional

from common.logging_config import get_logger
from server.blob_store import BlobObject, BlobStoreAdapter, Release
from server.exceptions import RecordExistsError
from server.repositories.catalog_repository import CatalogRepository
from server.service_locator import get_blob_store, get_content_store, get_session_manager
from server.sessions import ChunkProgress, ChunkSessionManager
from server.types import FileRecord
from server.utils import generate_file_id, get_current_timestamp

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadResult:
    record: FileRecord
    blob: BlobObject


def guess_mime_type(file_name: str) -> str:
    mime_type, _ = mimetypes.guess_type(file_name)
    return mime_type or DEFAULT_MIME_TYPE


class UploadService:
    """
    Every write path ends the same way: the complete object goes to the blob
    store, then its record is appended to the catalog.
    """

    def __init__(
        self,
        session_manager: Optional[ChunkSessionManager] = None,
        blob_store: Optional[BlobStoreAdapter] = None,
        catalog: Optional[CatalogRepository] = None,
    ):
        self.session_manager = session_manager or get_session_manager()
        self.blob_store = blob_store or get_blob_store()
        self.catalog = catalog or CatalogRepository(get_content_store())

    async def create_release(self, tag: str, metadata: Optional[Dict[str, Any]] = None) -> Release:
        return await self.blob_store.create_release(tag, metadata)

    async def initiate(self, file_name: str, total_chunks: int, mime_type: Optional[str] = None) -> str:
        return await self.session_manager.initiate(file_name, total_chunks, mime_type)

    async def receive_chunk(
        self,
        upload_id: str,
        chunk_index: int,
        total_chunks: int,
        file_name: str,
        payload: bytes,
        mime_type: Optional[str] = None,
    ) -> ChunkProgress:
        return await self.session_manager.begin_or_continue(
            upload_id, chunk_index, total_chunks, file_name, payload, mime_type
        )

    async def finalize_chunked(
        self,
        upload_id: str,
        file_name: Optional[str] = None,
        destination: Optional[str] = None,
        file_id: Optional[str] = None,
        mime_type: Optional[str] = None,
        password_hash: Optional[str] = None,
        release_id: Optional[int] = None,
        release_tag: Optional[str] = None,
    ) -> UploadResult:
        """
        Reassemble a chunk session and commit it.

        Raises:
            SessionNotFoundError: If the session is unknown or expired
            IncompleteUploadError: If chunks are missing
            BlobUploadFailedError: If the blob store rejects the object
            MetadataConflictError: If the catalog append could not settle
        """
        assembled = await self.session_manager.finalize(upload_id)
        logger.info(f"Finalizing upload {upload_id}: {assembled.size} bytes")

        return await self.store_object(
            data=assembled.data,
            file_name=file_name or assembled.file_name,
            destination=destination,
            file_id=file_id,
            mime_type=mime_type or assembled.mime_type,
            password_hash=password_hash,
            release_id=release_id,
            release_tag=release_tag,
        )

    async def upload_single(
        self,
        data: bytes,
        file_name: str,
        destination: Optional[str] = None,
        file_id: Optional[str] = None,
        mime_type: Optional[str] = None,
        password_hash: Optional[str] = None,
        release_id: Optional[int] = None,
        release_tag: Optional[str] = None,
    ) -> UploadResult:
        """Commit an object that arrived in one request."""
        logger.info(f"Single-shot upload of {file_name}: {len(data)} bytes")
        return await self.store_object(
            data=data,
            file_name=file_name,
            destination=destination,
            file_id=file_id,
            mime_type=mime_type,
            password_hash=password_hash,
            release_id=release_id,
            release_tag=release_tag,
        )

    async def store_object(
        self,
        data: bytes,
        file_name: str,
        destination: Optional[str],
        file_id: Optional[str],
        mime_type: Optional[str],
        password_hash: Optional[str],
        release_id: Optional[int],
        release_tag: Optional[str],
    ) -> UploadResult:
        if file_id:
            if await self.catalog.record_exists(file_id):
                raise RecordExistsError(f"File {file_id} already exists")
        else:
            file_id = generate_file_id()

        if not destination:
            release = await self.blob_store.create_release(
                file_id, {"title": file_name, "fileId": file_id}
            )
            destination = release.upload_url
            release_id = release.release_id
            release_tag = release.tag_name

        blob = await self.blob_store.put_object(destination, file_name, data)

        record = FileRecord(
            file_id=file_id,
            file_name=file_name,
            file_size=len(data),
            mime_type=mime_type or guess_mime_type(file_name),
            download_url=blob.download_url,
            uploaded_at=get_current_timestamp(),
            release_id=release_id,
            release_tag=release_tag,
            password_hash=password_hash or None,
        )
        try:
            await self.catalog.append_record(record)
        except RecordExistsError:
            logger.error(f"Asset {blob.id} stored but {file_id} was claimed by a concurrent upload")
            raise

        logger.info(f"Stored {file_name} as {file_id} (asset {blob.id}, {len(data)} bytes)")
        return UploadResult(record=record, blob=blob)
