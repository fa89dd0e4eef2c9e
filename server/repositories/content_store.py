"""Versioned whole-object JSON stores backing the catalog."""

import asyncio
import base64
import hashlib
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx

from common.logging_config import get_logger
from server.exceptions import MetadataStoreError, VersionConflictError
from server.github_client import GitHubClient
from server.utils import get_current_timestamp

logger = get_logger(__name__)


@dataclass(frozen=True)
class VersionedDocument:
    """
    A JSON document together with the version token (``sha``) it was read at.
    """
    path: str
    data: Any
    sha: str


def serialize_document(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


class ContentStore(ABC):
    """
    Whole-object reads and conditional writes. There are no partial updates,
    transactions or locks: a write must carry the token from the last read.
    """

    @abstractmethod
    async def read(self, path: str) -> Optional[VersionedDocument]:
        """
        Returns:
            The document, or None if it does not exist
        """

    @abstractmethod
    async def write(self, path: str, data: Any, sha: Optional[str], message: str = "") -> VersionedDocument:
        """
        Write ``data`` if the stored version still equals ``sha``.

        ``sha=None`` means "create": it conflicts if the object already exists.

        Raises:
            VersionConflictError: If the object changed since ``sha`` was read
        """

    async def close(self) -> None:
        pass


class InMemoryContentStore(ContentStore):
    """
    Process-local store with the same version-token semantics. Used for
    single-instance development deployments and tests.
    """

    def __init__(self):
        self._objects: Dict[str, Tuple[str, str]] = {}
        self._counter = 0
        self.write_count = 0

    async def read(self, path: str) -> Optional[VersionedDocument]:
        await asyncio.sleep(0)
        stored = self._objects.get(path)
        if stored is None:
            return None
        text, sha = stored
        return VersionedDocument(path=path, data=json.loads(text), sha=sha)

    async def write(self, path: str, data: Any, sha: Optional[str], message: str = "") -> VersionedDocument:
        await asyncio.sleep(0)
        current = self._objects.get(path)
        current_sha = current[1] if current else None
        if current_sha != sha:
            raise VersionConflictError(f"{path}: expected version {sha}, found {current_sha}")

        text = serialize_document(data)
        self._counter += 1
        new_sha = hashlib.sha1(f"{self._counter}:{text}".encode('utf-8')).hexdigest()
        self._objects[path] = (text, new_sha)
        self.write_count += 1
        return VersionedDocument(path=path, data=json.loads(text), sha=new_sha)

    def paths(self):
        return sorted(self._objects)


class GitHubContentStore(ContentStore):
    """
    Repository contents API. The blob ``sha`` of a file is its version token.
    """

    def __init__(self, github: GitHubClient):
        self.github = github

    async def read(self, path: str) -> Optional[VersionedDocument]:
        try:
            response = await self.github.request(
                "GET", self.github.contents_path(path), params={"ref": self.github.branch}
            )
        except httpx.HTTPError as e:
            raise MetadataStoreError(f"Failed to read {path}: {e}") from e

        if response.status_code == 404:
            return None
        if not response.is_success:
            raise MetadataStoreError(
                f"Failed to read {path}: status {response.status_code} {response.text[:200]}"
            )

        body = response.json()
        sha = body.get("sha")
        encoded = body.get("content") or ""

        if not encoded and body.get("encoding") == "none" and sha:
            # contents API omits the payload for files over 1 MB
            encoded = await self._read_blob(sha, path)

        text = base64.b64decode(encoded).decode('utf-8') if encoded else ""
        try:
            data = json.loads(text) if text else None
        except json.JSONDecodeError as e:
            raise MetadataStoreError(f"{path} does not contain valid JSON: {e}") from e

        return VersionedDocument(path=path, data=data, sha=sha)

    async def _read_blob(self, sha: str, path: str) -> str:
        try:
            response = await self.github.request("GET", self.github.repo_path(f"/git/blobs/{sha}"))
        except httpx.HTTPError as e:
            raise MetadataStoreError(f"Failed to read blob for {path}: {e}") from e
        if not response.is_success:
            raise MetadataStoreError(f"Failed to read blob for {path}: status {response.status_code}")
        return response.json().get("content", "")

    async def write(self, path: str, data: Any, sha: Optional[str], message: str = "") -> VersionedDocument:
        text = serialize_document(data)
        payload = {
            "message": message or f"Update {path} {get_current_timestamp()}",
            "content": base64.b64encode(text.encode('utf-8')).decode('ascii'),
            "branch": self.github.branch,
        }
        if sha:
            payload["sha"] = sha

        try:
            response = await self.github.request("PUT", self.github.contents_path(path), json=payload)
        except httpx.HTTPError as e:
            raise MetadataStoreError(f"Failed to write {path}: {e}") from e

        if response.status_code == 409 or (response.status_code == 422 and not sha):
            # 409: sha does not match; 422: file exists but no sha was supplied
            raise VersionConflictError(f"{path}: version conflict (status {response.status_code})")
        if not response.is_success:
            raise MetadataStoreError(
                f"Failed to write {path}: status {response.status_code} {response.text[:200]}"
            )

        new_sha = response.json().get("content", {}).get("sha", "")
        logger.debug(f"Wrote {path} [sha={new_sha[:8]}]")
        return VersionedDocument(path=path, data=json.loads(text), sha=new_sha)

    async def close(self) -> None:
        await self.github.close()
