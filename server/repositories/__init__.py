"""Repository layer for catalog persistence."""

from server.repositories.content_store import (
    ContentStore,
    GitHubContentStore,
    InMemoryContentStore,
    VersionedDocument,
)
from server.repositories.catalog_repository import CatalogRepository
from server.repositories.transaction import run_transaction
from server.repositories.view_repository import ViewRepository

__all__ = [
    "ContentStore",
    "GitHubContentStore",
    "InMemoryContentStore",
    "VersionedDocument",
    "CatalogRepository",
    "ViewRepository",
    "run_transaction",
]
