"""API routes package."""

from server.routes.action_routes import router as action_router
from server.routes.catalog_routes import router as catalog_router
from server.routes.release_routes import router as release_router
from server.routes.upload_routes import router as upload_router

__all__ = ["action_router", "catalog_router", "release_router", "upload_router"]
