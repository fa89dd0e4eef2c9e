"""Blob store adapter: release creation, whole-object asset upload and download proxy."""

import json
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional, Tuple
from urllib.parse import quote, urlparse

import httpx

from common.logging_config import get_logger
from server import config
from server.exceptions import BlobUploadFailedError, DownloadNotAllowedError
from server.github_client import GitHubClient
from server.utils import strip_uri_template

logger = get_logger(__name__)

DOWNLOAD_PIECE_SIZE = 64 * 1024


@dataclass(frozen=True)
class Release:
    release_id: int
    upload_url: str
    html_url: str
    tag_name: str


@dataclass(frozen=True)
class BlobObject:
    """
    A stored object and its stable download locator.
    """
    id: int
    name: str
    size: int
    download_url: str


def build_asset_url(upload_target: str, file_name: str) -> str:
    """
    Turn a release ``upload_url`` into a concrete asset URL.

    Args:
        upload_target: URL that may end with a ``{?name,label}`` template
        file_name: Asset name, URL-encoded into the ``name`` query parameter

    Returns:
        Asset upload URL
    """
    base = strip_uri_template(upload_target)
    separator = '&' if '?' in base else '?'
    return f"{base}{separator}name={quote(file_name, safe='')}"


class BlobStoreAdapter:
    """
    Uploads opaque binaries as release assets. No chunking happens here: the
    payload must be the complete object.
    """

    def __init__(
        self,
        github: GitHubClient,
        upload_timeout: Optional[float] = None,
        download_transport: Optional[httpx.AsyncBaseTransport] = None,
        allowed_download_hosts: Optional[Tuple[str, ...]] = None,
    ):
        self.github = github
        self.upload_timeout = upload_timeout if upload_timeout is not None else config.BLOB_TIMEOUT_SECONDS
        self.allowed_download_hosts = (
            allowed_download_hosts if allowed_download_hosts is not None else config.DOWNLOAD_ALLOWED_HOSTS
        )
        self._download_transport = download_transport

    async def create_release(self, tag: str, metadata: Optional[Dict[str, Any]] = None) -> Release:
        """
        Create a release that will hold uploaded assets.

        Args:
            tag: Release tag name
            metadata: Free-form data stored as the release body

        Returns:
            Release with its templated upload URL

        Raises:
            BlobUploadFailedError: If GitHub rejects the request or is unreachable
        """
        metadata = metadata or {}
        payload = {
            "tag_name": tag,
            "name": metadata.get("title") or "Uploaded File",
            "body": json.dumps(metadata, indent=2),
            "draft": False,
            "prerelease": False,
        }

        try:
            response = await self.github.request("POST", self.github.repo_path("/releases"), json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Release creation for tag {tag} failed: {e}")
            raise BlobUploadFailedError(f"Release creation failed: {e}") from e

        if not response.is_success:
            logger.error(f"Release creation for tag {tag} rejected: status={response.status_code}")
            raise BlobUploadFailedError(
                f"Release creation failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        data = response.json()
        if not data.get("id"):
            raise BlobUploadFailedError("Release creation response missing id field", body=response.text)

        logger.info(f"Created release {data['id']} [tag={tag}]")
        return Release(
            release_id=data["id"],
            upload_url=data.get("upload_url", ""),
            html_url=data.get("html_url", ""),
            tag_name=data.get("tag_name", tag),
        )

    async def put_object(self, upload_target: str, file_name: str, data: bytes) -> BlobObject:
        """
        Upload one complete object.

        Args:
            upload_target: Release upload URL (templated placeholders allowed)
            file_name: Asset name
            data: Complete object bytes

        Returns:
            BlobObject with id, name, size and download URL

        Raises:
            BlobUploadFailedError: On non-2xx, timeout or transport failure
        """
        if not upload_target or not isinstance(upload_target, str):
            raise BlobUploadFailedError("Invalid upload target: empty or not a string")

        asset_url = build_asset_url(upload_target, file_name)
        logger.info(f"Uploading asset {file_name} ({len(data)} bytes) to {asset_url[:80]}")

        try:
            response = await self.github.request(
                "POST",
                asset_url,
                content=data,
                headers={
                    "Content-Type": "application/octet-stream",
                    "Content-Length": str(len(data)),
                },
                timeout=self.upload_timeout,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Asset upload timed out after {self.upload_timeout}s: {file_name}")
            raise BlobUploadFailedError(f"Upload timed out after {self.upload_timeout:.0f}s") from e
        except httpx.HTTPError as e:
            logger.error(f"Asset upload transport error for {file_name}: {e}")
            raise BlobUploadFailedError(f"Upload request failed: {e}") from e

        if not response.is_success:
            logger.error(
                f"Asset upload rejected: status={response.status_code} body={response.text[:200]}"
            )
            raise BlobUploadFailedError(
                f"Upload failed with status {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                body=response.text,
            )

        body = response.json()
        if not body.get("id"):
            raise BlobUploadFailedError("Asset upload response missing id field", body=response.text)

        logger.info(f"Asset uploaded: id={body['id']} name={body.get('name')}")
        return BlobObject(
            id=body["id"],
            name=body.get("name", file_name),
            size=body.get("size", len(data)),
            download_url=body.get("browser_download_url", ""),
        )

    def check_download_url(self, url: str) -> None:
        """
        Raises:
            DownloadNotAllowedError: If the URL is not https on an allowed host
        """
        parsed = urlparse(url)
        if parsed.scheme != "https" or parsed.hostname not in self.allowed_download_hosts:
            raise DownloadNotAllowedError(f"Downloads from {parsed.hostname or url!r} are not allowed")

    async def _check_hop(self, request: httpx.Request) -> None:
        """Applied to the first request and to every redirect."""
        self.check_download_url(str(request.url))

    async def open_download(self, url: str) -> Tuple[Dict[str, str], AsyncIterator[bytes]]:
        """
        Start streaming a stored object, following redirects within the allow-list.

        Returns:
            Tuple of (response headers to forward, async byte iterator)

        Raises:
            DownloadNotAllowedError: If the URL is outside the allow-list
            BlobUploadFailedError: If the object cannot be fetched
        """
        self.check_download_url(url)

        client = httpx.AsyncClient(
            follow_redirects=True,
            event_hooks={"request": [self._check_hop]},
            timeout=self.upload_timeout,
            transport=self._download_transport,
            headers={"User-Agent": config.GITHUB_USER_AGENT},
        )
        try:
            request = client.build_request("GET", url)
            response = await client.send(request, stream=True)
        except DownloadNotAllowedError:
            await client.aclose()
            raise
        except httpx.HTTPError as e:
            await client.aclose()
            raise BlobUploadFailedError(f"Download failed: {e}") from e

        if response.status_code != 200:
            await response.aclose()
            await client.aclose()
            raise BlobUploadFailedError(
                f"Download failed with status {response.status_code}",
                status_code=response.status_code,
            )

        headers = {
            "Content-Type": response.headers.get("content-type", "application/octet-stream"),
            "Cache-Control": "public, max-age=3600",
        }
        if "content-length" in response.headers:
            headers["Content-Length"] = response.headers["content-length"]

        async def stream_body():
            bytes_streamed = 0
            try:
                async for piece in response.aiter_bytes(DOWNLOAD_PIECE_SIZE):
                    bytes_streamed += len(piece)
                    yield piece
            finally:
                await response.aclose()
                await client.aclose()
                logger.info(f"Proxied {bytes_streamed} bytes from {urlparse(url).hostname}")

        return headers, stream_body()
