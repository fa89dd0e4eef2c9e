"""Service layer for business logic."""

from server.services.catalog_service import CatalogService
from server.services.upload_service import UploadResult, UploadService

__all__ = [
    "CatalogService",
    "UploadResult",
    "UploadService",
]
