"""In-flight chunked upload sessions."""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from common.constants import SESSION_TTL_SECONDS
from common.logging_config import get_logger
from server.exceptions import IncompleteUploadError, InvalidChunkError, SessionNotFoundError
from server.utils import generate_upload_id

logger = get_logger(__name__)


@dataclass
class UploadSession:
    """
    Chunks received so far for one upload. Slots are addressed by index.
    """
    upload_id: str
    total_chunks: int
    file_name: str
    mime_type: Optional[str]
    created_at: float
    last_touched_at: float
    chunks: List[Optional[bytes]] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.chunks:
            self.chunks = [None] * self.total_chunks

    @property
    def received_chunks(self) -> int:
        return sum(1 for chunk in self.chunks if chunk is not None)

    def missing_indices(self) -> List[int]:
        return [i for i, chunk in enumerate(self.chunks) if chunk is None]


@dataclass(frozen=True)
class ChunkProgress:
    received_chunks: int
    total_chunks: int


@dataclass(frozen=True)
class AssembledUpload:
    upload_id: str
    file_name: str
    mime_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class SessionStore(ABC):
    """
    Where sessions live between chunk requests. The in-memory store suits a
    single long-lived process; a multi-instance deployment needs a shared one.
    """

    @abstractmethod
    async def get(self, upload_id: str) -> Optional[UploadSession]:
        ...

    @abstractmethod
    async def put(self, session: UploadSession) -> None:
        ...

    @abstractmethod
    async def delete(self, upload_id: str) -> None:
        ...

    @abstractmethod
    async def list_ids(self) -> List[str]:
        ...


class InMemorySessionStore(SessionStore):

    def __init__(self):
        self._sessions: Dict[str, UploadSession] = {}

    async def get(self, upload_id: str) -> Optional[UploadSession]:
        return self._sessions.get(upload_id)

    async def put(self, session: UploadSession) -> None:
        self._sessions[session.upload_id] = session

    async def delete(self, upload_id: str) -> None:
        self._sessions.pop(upload_id, None)

    async def list_ids(self) -> List[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)


class ChunkSessionManager:
    """
    Tracks multi-part uploads until they are finalized or expire.

    Requests for different uploads run independently; requests for the same
    upload are serialized by a per-session lock.
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store or InMemorySessionStore()
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, upload_id: str) -> asyncio.Lock:
        lock = self._locks.get(upload_id)
        if lock is None:
            lock = self._locks[upload_id] = asyncio.Lock()
        return lock

    def _new_session(self, upload_id: str, total_chunks: int, file_name: str, mime_type: Optional[str]) -> UploadSession:
        now = self.clock()
        return UploadSession(
            upload_id=upload_id,
            total_chunks=total_chunks,
            file_name=file_name,
            mime_type=mime_type,
            created_at=now,
            last_touched_at=now,
        )

    async def initiate(self, file_name: str, total_chunks: int, mime_type: Optional[str] = None) -> str:
        """
        Open a session under a server-generated id.

        Returns:
            The new upload id
        """
        if total_chunks < 1:
            raise InvalidChunkError("totalChunks must be at least 1")

        upload_id = generate_upload_id()
        async with self._lock_for(upload_id):
            await self.store.put(self._new_session(upload_id, total_chunks, file_name, mime_type))
        logger.info(f"Initiated upload {upload_id} for {file_name} ({total_chunks} chunks)")
        return upload_id

    async def begin_or_continue(
        self,
        upload_id: str,
        chunk_index: int,
        total_chunks: int,
        file_name: str,
        payload: bytes,
        mime_type: Optional[str] = None,
    ) -> ChunkProgress:
        """
        Store one chunk, creating the session on first sight of ``upload_id``.

        Args:
            upload_id: Opaque upload token
            chunk_index: Slot for this payload (0-based)
            total_chunks: Declared chunk count; must match the session's
            file_name: Name of the file being uploaded
            payload: Raw chunk bytes
            mime_type: Declared MIME type, recorded on session creation

        Returns:
            ChunkProgress with the number of filled slots and total_chunks

        Raises:
            InvalidChunkError: If the index or chunk count is inconsistent
        """
        if not upload_id:
            raise InvalidChunkError("Missing upload id")
        if total_chunks < 1:
            raise InvalidChunkError("totalChunks must be at least 1")
        if not 0 <= chunk_index < total_chunks:
            raise InvalidChunkError(f"chunkIndex {chunk_index} outside 0..{total_chunks - 1}")

        async with self._lock_for(upload_id):
            session = await self.store.get(upload_id)
            if session is None:
                session = self._new_session(upload_id, total_chunks, file_name, mime_type)
                logger.info(f"Started upload session {upload_id} for {file_name} ({total_chunks} chunks)")
            elif session.total_chunks != total_chunks:
                raise InvalidChunkError(
                    f"Upload {upload_id} declared {session.total_chunks} chunks, got {total_chunks}"
                )

            session.chunks[chunk_index] = bytes(payload)
            session.last_touched_at = self.clock()
            await self.store.put(session)

            progress = ChunkProgress(received_chunks=session.received_chunks, total_chunks=session.total_chunks)

        logger.debug(
            f"Upload {upload_id}: chunk {chunk_index} ({len(payload)} bytes), "
            f"{progress.received_chunks}/{progress.total_chunks} received"
        )
        return progress

    async def finalize(self, upload_id: str) -> AssembledUpload:
        """
        Reassemble a complete session and remove it.

        Returns:
            AssembledUpload holding the concatenated buffer

        Raises:
            SessionNotFoundError: If the session does not exist
            IncompleteUploadError: If any slot is still empty (session is kept)
        """
        async with self._lock_for(upload_id):
            session = await self.store.get(upload_id)
            if session is None:
                self._locks.pop(upload_id, None)
                raise SessionNotFoundError(f"Upload {upload_id} not found")

            missing = session.missing_indices()
            if missing:
                session.last_touched_at = self.clock()
                await self.store.put(session)
                raise IncompleteUploadError(upload_id, missing)

            data = b"".join(session.chunks)
            await self.store.delete(upload_id)

        self._locks.pop(upload_id, None)
        logger.info(f"Reassembled upload {upload_id}: {session.file_name} ({len(data)} bytes)")
        return AssembledUpload(
            upload_id=upload_id,
            file_name=session.file_name,
            mime_type=session.mime_type,
            data=data,
        )

    async def sweep_expired(self) -> int:
        """
        Drop sessions idle for longer than the TTL.

        Returns:
            Number of sessions removed
        """
        now = self.clock()
        removed = 0
        for upload_id in await self.store.list_ids():
            async with self._lock_for(upload_id):
                session = await self.store.get(upload_id)
                if session is None or now - session.last_touched_at <= self.ttl_seconds:
                    continue
                await self.store.delete(upload_id)
                removed += 1
                logger.info(
                    f"Expired upload session {upload_id} ({session.received_chunks}/{session.total_chunks} chunks)"
                )
                self._locks.pop(upload_id, None)

        live = set(await self.store.list_ids())
        for upload_id, lock in list(self._locks.items()):
            if upload_id not in live and not lock.locked():
                del self._locks[upload_id]
        return removed

    async def active_count(self) -> int:
        return len(await self.store.list_ids())
