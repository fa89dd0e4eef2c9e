"""Service locator for process-wide components."""

from typing import Optional

from server.blob_store import BlobStoreAdapter
from server.repositories.content_store import ContentStore
from server.sessions import ChunkSessionManager

_session_manager: Optional[ChunkSessionManager] = None
_content_store: Optional[ContentStore] = None
_blob_store: Optional[BlobStoreAdapter] = None


def set_session_manager(manager: Optional[ChunkSessionManager]):
    """Set global chunk session manager instance"""
    global _session_manager
    _session_manager = manager


def get_session_manager() -> ChunkSessionManager:
    """Get global chunk session manager instance, creating an in-memory one on first use"""
    global _session_manager
    if _session_manager is None:
        from server import config
        _session_manager = ChunkSessionManager(ttl_seconds=config.SESSION_TTL)
    return _session_manager


def set_content_store(store: Optional[ContentStore]):
    """Set global catalog content store"""
    global _content_store
    _content_store = store


def get_content_store() -> ContentStore:
    """Get global catalog content store"""
    if _content_store is None:
        raise RuntimeError("Content store not initialized")
    return _content_store


def set_blob_store(store: Optional[BlobStoreAdapter]):
    """Set global blob store adapter"""
    global _blob_store
    _blob_store = store


def get_blob_store() -> BlobStoreAdapter:
    """Get global blob store adapter"""
    if _blob_store is None:
        raise RuntimeError("Blob store not initialized")
    return _blob_store
