"""Catalog resolver and share-link creation."""

from dataclasses import replace
from typing import List, Optional

from common.logging_config import get_logger
from server.auth import check_password_gate, check_password_gates
from server.exceptions import RecordNotFoundError
from server.repositories.catalog_repository import CatalogRepository
from server.repositories.view_repository import ViewRepository
from server.service_locator import get_content_store
from server.types import FileRecord, ViewRecord
from server.utils import parse_ids

logger = get_logger(__name__)


class CatalogService:

    def __init__(
        self,
        catalog: Optional[CatalogRepository] = None,
        views: Optional[ViewRepository] = None,
    ):
        store = None if catalog and views else get_content_store()
        self.catalog = catalog or CatalogRepository(store)
        self.views = views or ViewRepository(store)

    async def resolve(self, id_param: str, password_hash: Optional[str] = None) -> List[FileRecord]:
        """
        Resolve a file id, a comma-separated id list, or a view/group id.

        Args:
            id_param: The id expression from the request
            password_hash: Caller-supplied password hash, if any

        Returns:
            Matching records in request order, with internal fields cleared

        Raises:
            RecordNotFoundError: If nothing matches
            PasswordRequiredError: If protected and no hash was supplied
            InvalidPasswordError: If the hash does not match
        """
        ids = parse_ids(id_param or "")
        if not ids:
            raise RecordNotFoundError("No id supplied")

        view: Optional[ViewRecord] = None
        if len(ids) == 1:
            view = await self.views.get(ids[0])

        if view is not None:
            logger.info(f"Resolving {view.kind} {view.id} ({len(view.file_ids)} files)")
            check_password_gate(view.password_hash, password_hash, f"{view.kind} {view.id}")
            records = await self.catalog.find_records(view.file_ids)
            if not view.password_hash:
                check_password_gates(((r.password_hash, r.file_name) for r in records), password_hash)
        else:
            records = await self.catalog.find_records(ids)
            check_password_gates(((r.password_hash, r.file_name) for r in records), password_hash)

        if not records:
            logger.warning(f"No files found for {ids}")
            raise RecordNotFoundError("Files not found")

        logger.info(f"Resolved {len(records)} files for {len(ids)} ids")
        return [replace(r, password_hash=None) for r in records]

    async def create_view(
        self,
        file_ids: List[str],
        password_hash: Optional[str] = None,
        origin: str = "",
    ) -> ViewRecord:
        return await self.views.create_view(file_ids, password_hash, origin)

    async def create_group(
        self,
        group_id: str,
        file_ids: List[str],
        password_hash: Optional[str] = None,
    ) -> ViewRecord:
        return await self.views.create_group(group_id, file_ids, password_hash)
