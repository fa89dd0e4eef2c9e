"""Catalog record types and their JSON (camelCase) representation."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class FileRecord:
    """
    One completed upload. Owned by the metadata store.
    """
    file_id: str
    file_name: str
    file_size: int
    mime_type: str
    download_url: str
    uploaded_at: str
    release_id: Optional[int] = None
    release_tag: Optional[str] = None
    password_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "fileId": self.file_id,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "downloadUrl": self.download_url,
            "releaseId": self.release_id,
            "releaseTag": self.release_tag,
            "uploadedAt": self.uploaded_at,
        }
        if self.password_hash:
            data["passwordHash"] = self.password_hash
        return data

    def to_public_dict(self) -> Dict[str, Any]:
        """Serialized form without internal fields."""
        data = self.to_dict()
        data.pop("passwordHash", None)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        return cls(
            file_id=data["fileId"],
            file_name=data.get("fileName", ""),
            file_size=int(data.get("fileSize") or 0),
            mime_type=data.get("mimeType") or "application/octet-stream",
            download_url=data.get("downloadUrl", ""),
            uploaded_at=data.get("uploadedAt", ""),
            release_id=data.get("releaseId"),
            release_tag=data.get("releaseTag"),
            password_hash=data.get("passwordHash") or None,
        )


@dataclass(frozen=True)
class ViewRecord:
    """
    A shareable indirection to one or more file records.

    ``kind`` is ``"view"`` for server-generated short ids and ``"group"`` for
    caller-supplied ids.
    """
    id: str
    kind: str
    file_ids: List[str] = field(default_factory=list)
    created_at: str = ""
    password_hash: Optional[str] = None
    share_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "fileIds": list(self.file_ids),
            "passwordHash": self.password_hash,
            "shareUrl": self.share_url,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ViewRecord":
        return cls(
            id=data["id"],
            kind=data.get("kind", "view"),
            file_ids=list(data.get("fileIds") or []),
            created_at=data.get("createdAt", ""),
            password_hash=data.get("passwordHash") or None,
            share_url=data.get("shareUrl"),
        )


@dataclass(frozen=True)
class ShardRef:
    number: int
    path: str
    created_at: str = ""


@dataclass(frozen=True)
class ShardIndex:
    """
    Singleton listing every shard and the one currently accepting writes.
    """
    current: int
    shards: List[ShardRef]
    updated_at: str = ""

    @property
    def current_path(self) -> str:
        for shard in self.shards:
            if shard.number == self.current:
                return shard.path
        raise KeyError(f"Shard index has no entry for current shard {self.current}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "shards": [
                {"number": s.number, "path": s.path, "createdAt": s.created_at}
                for s in self.shards
            ],
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShardIndex":
        shards = [
            ShardRef(number=int(s["number"]), path=s["path"], created_at=s.get("createdAt", ""))
            for s in data.get("shards", [])
        ]
        return cls(current=int(data["current"]), shards=shards, updated_at=data.get("updatedAt", ""))
