"""HTTP client that moves files to the upload server."""

import math
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Union
from urllib.parse import quote

import httpx

from client.config import Config
from common.logging_config import get_logger
from common.passwords import hash_password

logger = get_logger(__name__)

Source = Union[bytes, bytearray, str, Path, BinaryIO]
Compressor = Callable[[bytes, str], bytes]


class UploadFailedError(Exception):
    """Raised when an upload or catalog request does not succeed."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        self.code = code
        self.status_code = status_code
        super().__init__(message)


ERROR_MESSAGES = {
    'SESSION_NOT_FOUND': 'Upload session expired or unknown. Start the upload again.',
    'PASSWORD_REQUIRED': 'This content is password protected. Supply --password.',
    'INVALID_PASSWORD': 'Incorrect password.',
    'NOT_FOUND': 'No files found for that id.',
    'GROUP_EXISTS': 'That group id is already taken.',
    'RECORD_EXISTS': 'A file with that id already exists.',
    'METADATA_CONFLICT': 'The catalog is busy. Please try again.',
    'CONFIGURATION_ERROR': 'The server is not configured for storage.',
}


def error_from_response(response: httpx.Response) -> UploadFailedError:
    """
    Build an UploadFailedError from an error envelope
    ``{"success": false, "error": ..., "code": ...}``.

    Known codes get a fixed message; others keep the server's text.
    Non-JSON bodies are reported as they are.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if not isinstance(body, dict):
        return UploadFailedError(response.text or f"HTTP {response.status_code}", status_code=response.status_code)

    code = body.get('code')
    detail = body.get('error') or f"HTTP {response.status_code}"
    message = ERROR_MESSAGES.get(code) or (f"{detail} (Code: {code})" if code else detail)
    return UploadFailedError(message, code=code, status_code=response.status_code)


@dataclass(frozen=True)
class UploadProgress:
    """Reported after every chunk (stage ``chunk``) and once at finalize."""
    stage: str
    bytes_sent: int
    total_bytes: int
    chunk_index: Optional[int] = None
    total_chunks: Optional[int] = None

    @property
    def percent(self) -> float:
        if not self.total_bytes:
            return 100.0
        return self.bytes_sent / self.total_bytes * 100


@dataclass(frozen=True)
class UploadedFile:
    asset_id: int
    download_url: str
    name: str
    size: int
    file_id: str

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "UploadedFile":
        return cls(
            asset_id=data["asset_id"],
            download_url=data["download_url"],
            name=data["name"],
            size=data["size"],
            file_id=data["file_id"],
        )


class UploadCoordinator:
    """
    Client side of the upload protocol.

    Files below the chunk threshold go in one request. Larger files are split
    into fixed-size chunks sent one after another under a fresh upload id,
    then finalized. A failed chunk aborts the upload; there is no resume.
    """

    def __init__(self, config: Config, compressor: Optional[Compressor] = None):
        """
        Args:
            config: Client settings (server URL, timeout, size limits)
            compressor: Transform applied to the bytes before upload; if it
                raises, the original bytes are sent
        """
        self.config = config
        self.compressor = compressor
        base_url = config.get_base_url()
        self.session = httpx.Client(base_url=base_url, timeout=config.get_timeout())
        logger.debug(f"Upload client ready for {base_url}")

    def close(self) -> None:
        self.session.close()

    def _read_source(self, source: Source) -> bytes:
        if isinstance(source, (bytes, bytearray)):
            return bytes(source)
        if isinstance(source, (str, Path)):
            return Path(source).read_bytes()
        return source.read()

    def _compress(self, data: bytes, file_name: str) -> bytes:
        if self.compressor is None:
            return data
        try:
            processed = self.compressor(data, file_name)
        except Exception as e:
            logger.warning(f"Compressor failed for {file_name}, sending original bytes: {e}")
            return data
        logger.info(f"Compressed {file_name}: {len(data)} -> {len(processed)} bytes")
        return processed

    def _raise_for_error(self, response: httpx.Response) -> Dict[str, Any]:
        if response.is_success:
            return response.json()
        raise error_from_response(response)

    def _post(self, endpoint: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.post(endpoint, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Request to {endpoint} failed: {e}")
            raise UploadFailedError(f"Cannot reach server: {e}") from e
        return self._raise_for_error(response)

    def upload(
        self,
        source: Source,
        file_name: str,
        destination: Optional[str] = None,
        mime_type: Optional[str] = None,
        password_hash: Optional[str] = None,
        file_id: Optional[str] = None,
        progress: Optional[Callable[[UploadProgress], None]] = None,
    ) -> UploadedFile:
        """
        Upload one file.

        Args:
            source: Bytes, a path, or a binary file object
            file_name: Name the asset is stored under
            destination: Release upload URL (the server creates a release when absent)
            mime_type: MIME type (guessed from the name when absent)
            password_hash: SHA-256 hex protecting the file
            file_id: Caller-chosen catalog id
            progress: Callback receiving UploadProgress updates

        Returns:
            UploadedFile describing the stored object

        Raises:
            UploadFailedError: If the file is too large or any request fails
        """
        data = self._compress(self._read_source(source), file_name)
        size = len(data)
        if size == 0:
            raise UploadFailedError(f"{file_name} is empty")

        max_size = self.config.get_max_file_size()
        if size > max_size:
            raise UploadFailedError(f"{file_name} is {size} bytes; the limit is {max_size} bytes")

        mime_type = mime_type or mimetypes.guess_type(file_name)[0] or "application/octet-stream"

        if size < self.config.get_chunk_threshold():
            return self._upload_direct(data, file_name, destination, mime_type, password_hash, file_id, progress)
        return self._upload_chunked(data, file_name, destination, mime_type, password_hash, file_id, progress)

    def _upload_direct(self, data, file_name, destination, mime_type, password_hash, file_id, progress) -> UploadedFile:
        logger.info(f"Uploading {file_name} in one request ({len(data)} bytes)")
        headers = {
            "Content-Type": "application/octet-stream",
            "X-File-Name": quote(file_name),
            "X-Mime-Type": mime_type,
        }
        if destination:
            headers["X-Upload-Url"] = destination
        if password_hash:
            headers["X-Password-Hash"] = password_hash
        if file_id:
            headers["X-File-Id"] = file_id

        body = self._post("/uploads/direct", content=data, headers=headers)
        if progress:
            progress(UploadProgress(stage="finalize", bytes_sent=len(data), total_bytes=len(data)))
        return UploadedFile.from_response(body["data"])

    def _upload_chunked(self, data, file_name, destination, mime_type, password_hash, file_id, progress) -> UploadedFile:
        size = len(data)
        chunk_size = self.config.get_chunk_size()
        total_chunks = math.ceil(size / chunk_size)
        upload_id = uuid.uuid4().hex

        logger.info(f"Uploading {file_name} in {total_chunks} chunks [upload_id={upload_id}]")

        bytes_sent = 0
        for index in range(total_chunks):
            chunk = data[index * chunk_size:(index + 1) * chunk_size]
            try:
                self._post(
                    "/uploads/chunk",
                    params={
                        "uploadId": upload_id,
                        "chunkIndex": index,
                        "totalChunks": total_chunks,
                        "fileName": file_name,
                        "mimeType": mime_type,
                    },
                    content=chunk,
                    headers={"Content-Type": "application/octet-stream"},
                )
            except UploadFailedError as e:
                logger.error(f"Chunk {index + 1}/{total_chunks} failed [upload_id={upload_id}]: {e}")
                raise UploadFailedError(
                    f"Chunk {index + 1}/{total_chunks} failed: {e}", code=e.code, status_code=e.status_code
                ) from e

            bytes_sent += len(chunk)
            if progress:
                progress(UploadProgress(
                    stage="chunk",
                    bytes_sent=bytes_sent,
                    total_bytes=size,
                    chunk_index=index,
                    total_chunks=total_chunks,
                ))

        payload = {
            "uploadId": upload_id,
            "fileName": file_name,
            "mimeType": mime_type,
        }
        if destination:
            payload["releaseUploadUrl"] = destination
        if password_hash:
            payload["passwordHash"] = password_hash
        if file_id:
            payload["fileId"] = file_id

        body = self._post("/uploads/finalize", json=payload)
        if progress:
            progress(UploadProgress(
                stage="finalize", bytes_sent=size, total_bytes=size, total_chunks=total_chunks
            ))
        return UploadedFile.from_response(body["data"])

    def create_view(self, file_ids: List[str], password: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a short-id share link for the given files.

        Returns:
            Response body with id and shareUrl
        """
        payload: Dict[str, Any] = {"fileIds": list(file_ids)}
        if password:
            payload["passwordHash"] = hash_password(password)
        return self._post("/views", json=payload)

    def create_group(self, group_id: str, file_ids: List[str], password: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"groupId": group_id, "fileIds": list(file_ids)}
        if password:
            payload["passwordHash"] = hash_password(password)
        return self._post("/groups", json=payload)

    def lookup(self, id_param: str, password: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Resolve file ids or a view/group id to file entries.

        The password is hashed locally and sent in the request body.
        """
        payload: Dict[str, Any] = {"id": id_param}
        if password:
            payload["pwd"] = hash_password(password)
        return self._post("/view", json=payload)["files"]
