"""Sharded, append-only file catalog."""

import json
from typing import AsyncIterator, Dict, List, Optional

from common.constants import (
    INDEX_PATH,
    METADATA_BACKOFF_SECONDS,
    METADATA_WRITE_ATTEMPTS,
    SHARD_MAX_CHARS,
    SHARD_MAX_RECORDS,
    SHARD_PATH_TEMPLATE,
)
from common.logging_config import get_logger
from server.exceptions import (
    MetadataConflictError,
    MetadataStoreError,
    RecordExistsError,
    ShardCapacityExceeded,
    VersionConflictError,
)
from server.repositories.content_store import ContentStore
from server.repositories.transaction import run_transaction
from server.types import FileRecord, ShardIndex, ShardRef
from server.utils import get_current_timestamp

logger = get_logger(__name__)

MAX_ROTATIONS_PER_APPEND = 3


def shard_path(number: int) -> str:
    return SHARD_PATH_TEMPLATE.format(number=number)


def new_index() -> Dict:
    now = get_current_timestamp()
    return ShardIndex(
        current=1,
        shards=[ShardRef(number=1, path=shard_path(1), created_at=now)],
        updated_at=now,
    ).to_dict()


class CatalogRepository:
    """
    File records live in N shard objects (JSON arrays) named by a singleton
    index. Only the current shard accepts appends; once full it is rotated
    away from and never written again.
    """

    def __init__(
        self,
        store: ContentStore,
        max_records: int = SHARD_MAX_RECORDS,
        max_chars: int = SHARD_MAX_CHARS,
        max_attempts: int = METADATA_WRITE_ATTEMPTS,
        backoff_seconds: float = METADATA_BACKOFF_SECONDS,
    ):
        self.store = store
        self.max_records = max_records
        self.max_chars = max_chars
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds

    async def load_index(self, create: bool = True) -> Optional[ShardIndex]:
        """
        Read the shard index, creating it (with shard 1) when absent.

        Args:
            create: When False a missing index yields None instead of being written
        """
        document = await self.store.read(INDEX_PATH)
        if document is not None and document.data:
            return ShardIndex.from_dict(document.data)
        if not create:
            return None

        logger.info("Shard index not found, creating it with shard 1")
        try:
            document = await self.store.write(INDEX_PATH, new_index(), None, "Create catalog index")
        except VersionConflictError:
            # another writer created it first
            document = await self.store.read(INDEX_PATH)
            if document is None or not document.data:
                raise MetadataStoreError("Shard index vanished after a creation conflict")
        return ShardIndex.from_dict(document.data)

    def is_full(self, records: List[Dict]) -> bool:
        if len(records) >= self.max_records:
            return True
        return len(json.dumps(records, indent=2, ensure_ascii=False)) >= self.max_chars

    async def append_record(self, record: FileRecord) -> int:
        """
        Append a record to the current shard.

        Args:
            record: Record to persist

        Returns:
            Number of the shard the record landed in

        Raises:
            MetadataConflictError: If concurrent writers kept winning the race
            RecordExistsError: If the shard holds a different record under the same id
        """
        entry = record.to_dict()

        for _ in range(MAX_ROTATIONS_PER_APPEND + 1):
            index = await self.load_index()
            number = index.current
            path = index.current_path

            def append(records):
                if not isinstance(records, list):
                    raise MetadataStoreError(f"{path} is not a JSON array")
                existing = next(
                    (r for r in records if isinstance(r, dict) and r.get("fileId") == record.file_id),
                    None,
                )
                if existing is not None:
                    if existing.get("downloadUrl") == record.download_url:
                        return None
                    raise RecordExistsError(f"File {record.file_id} already exists")
                if self.is_full(records):
                    raise ShardCapacityExceeded(number)
                records.append(entry)
                return records

            try:
                await run_transaction(
                    self.store,
                    path,
                    append,
                    default=list,
                    message=f"Add {record.file_id} to shard {number}",
                    max_attempts=self.max_attempts,
                    backoff_seconds=self.backoff_seconds,
                )
            except ShardCapacityExceeded:
                await self.rotate(number)
                continue

            logger.info(f"Appended {record.file_id} to shard {number}")
            return number

        raise MetadataConflictError(f"Could not find a writable shard for {record.file_id}")

    async def rotate(self, full_shard: int) -> int:
        """
        Make ``full_shard + 1`` the current shard, unless another writer
        already rotated past ``full_shard``.

        Returns:
            The current shard number after rotation
        """
        def bump(data):
            index = ShardIndex.from_dict(data)
            if index.current != full_shard:
                return None
            now = get_current_timestamp()
            number = full_shard + 1
            shards = list(index.shards) + [ShardRef(number=number, path=shard_path(number), created_at=now)]
            return ShardIndex(current=number, shards=shards, updated_at=now).to_dict()

        document = await run_transaction(
            self.store,
            INDEX_PATH,
            bump,
            default=new_index,
            message=f"Rotate catalog shard {full_shard}",
            max_attempts=self.max_attempts,
            backoff_seconds=self.backoff_seconds,
        )
        index = ShardIndex.from_dict(document.data)

        if index.current == full_shard + 1:
            try:
                await self.store.write(index.current_path, [], None, f"Create shard {index.current}")
                logger.info(f"Rotated catalog from shard {full_shard} to shard {index.current}")
            except VersionConflictError:
                logger.debug(f"Shard {index.current} already created by another writer")

        return index.current

    async def iter_shards(self) -> AsyncIterator[List[Dict]]:
        """Yield every shard named by the index, oldest first."""
        index = await self.load_index(create=False)
        if index is None:
            return
        for ref in sorted(index.shards, key=lambda s: s.number):
            document = await self.store.read(ref.path)
            if document is None or not isinstance(document.data, list):
                if document is not None:
                    logger.warning(f"Skipping shard {ref.path}: not a JSON array")
                continue
            yield document.data

    async def find_records(self, file_ids: List[str]) -> List[FileRecord]:
        """
        Look up records by id across every shard.

        Returns:
            Matching records in the order of ``file_ids``; unknown ids are skipped
        """
        wanted = set(file_ids)
        found: Dict[str, FileRecord] = {}

        async for records in self.iter_shards():
            for entry in records:
                if not isinstance(entry, dict):
                    continue
                file_id = entry.get("fileId")
                if file_id in wanted and file_id not in found:
                    found[file_id] = FileRecord.from_dict(entry)
            if len(found) == len(wanted):
                break

        return [found[file_id] for file_id in file_ids if file_id in found]

    async def get_record(self, file_id: str) -> Optional[FileRecord]:
        records = await self.find_records([file_id])
        return records[0] if records else None

    async def record_exists(self, file_id: str) -> bool:
        return await self.get_record(file_id) is not None
