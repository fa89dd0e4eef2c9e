"""Views and groups: named, read-mostly indirections to file records."""

from typing import List, Optional

from common.constants import (
    METADATA_BACKOFF_SECONDS,
    METADATA_WRITE_ATTEMPTS,
    VIEW_ID_ATTEMPTS,
    VIEW_ID_LENGTH,
    VIEWS_PATH,
)
from common.logging_config import get_logger
from server.exceptions import GroupExistsError, MetadataStoreError
from server.repositories.content_store import ContentStore
from server.repositories.transaction import run_transaction
from server.types import ViewRecord
from server.utils import generate_short_id, get_current_timestamp

logger = get_logger(__name__)

VIEW_KIND = "view"
GROUP_KIND = "group"


class ViewRepository:
    """
    All views and groups share one JSON array object. Entries are created
    once and never modified.
    """

    def __init__(
        self,
        store: ContentStore,
        max_attempts: int = METADATA_WRITE_ATTEMPTS,
        backoff_seconds: float = METADATA_BACKOFF_SECONDS,
        id_generator=None,
    ):
        self.store = store
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.id_generator = id_generator or (lambda: generate_short_id(VIEW_ID_LENGTH))

    async def list_all(self) -> List[ViewRecord]:
        document = await self.store.read(VIEWS_PATH)
        if document is None or not isinstance(document.data, list):
            return []
        return [ViewRecord.from_dict(entry) for entry in document.data if isinstance(entry, dict) and entry.get("id")]

    async def get(self, view_id: str) -> Optional[ViewRecord]:
        for view in await self.list_all():
            if view.id == view_id:
                return view
        return None

    async def _insert(self, choose_record) -> ViewRecord:
        created: List[ViewRecord] = []

        def apply(entries):
            if not isinstance(entries, list):
                raise MetadataStoreError(f"{VIEWS_PATH} is not a JSON array")
            taken = {entry.get("id") for entry in entries if isinstance(entry, dict)}
            record = choose_record(taken)
            created[:] = [record]
            entries.append(record.to_dict())
            return entries

        await run_transaction(
            self.store,
            VIEWS_PATH,
            apply,
            default=list,
            message=f"Update {VIEWS_PATH}",
            max_attempts=self.max_attempts,
            backoff_seconds=self.backoff_seconds,
        )
        return created[0]

    async def create_view(
        self,
        file_ids: List[str],
        password_hash: Optional[str] = None,
        origin: str = "",
    ) -> ViewRecord:
        """
        Create a view under a fresh short id.

        Args:
            file_ids: Files the view points at
            password_hash: Optional password gate
            origin: Public origin used to build the share URL

        Returns:
            The stored ViewRecord

        Raises:
            MetadataStoreError: If no unused id could be generated
        """
        def choose(taken):
            for _ in range(VIEW_ID_ATTEMPTS):
                candidate = self.id_generator()
                if candidate not in taken:
                    return ViewRecord(
                        id=candidate,
                        kind=VIEW_KIND,
                        file_ids=list(file_ids),
                        created_at=get_current_timestamp(),
                        password_hash=password_hash or None,
                        share_url=f"{origin.rstrip('/')}/d/{candidate}",
                    )
            raise MetadataStoreError("Failed to generate unique view id")

        view = await self._insert(choose)
        logger.info(f"Created view {view.id} with {len(view.file_ids)} files")
        return view

    async def create_group(
        self,
        group_id: str,
        file_ids: List[str],
        password_hash: Optional[str] = None,
    ) -> ViewRecord:
        """
        Create a group under a caller-supplied id.

        Raises:
            GroupExistsError: If the id is already used by a view or group
        """
        def choose(taken):
            if group_id in taken:
                raise GroupExistsError(f"Group {group_id} already exists")
            return ViewRecord(
                id=group_id,
                kind=GROUP_KIND,
                file_ids=list(file_ids),
                created_at=get_current_timestamp(),
                password_hash=password_hash or None,
            )

        group = await self._insert(choose)
        logger.info(f"Created group {group.id} with {len(group.file_ids)} files")
        return group
