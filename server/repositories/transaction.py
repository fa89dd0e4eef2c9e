"""Optimistic read-compute-write transactions over a ContentStore."""

import asyncio
import copy
from typing import Any, Callable, Optional

from common.constants import METADATA_BACKOFF_SECONDS, METADATA_WRITE_ATTEMPTS
from common.logging_config import get_logger
from server.exceptions import MetadataConflictError, VersionConflictError
from server.repositories.content_store import ContentStore, VersionedDocument

logger = get_logger(__name__)


async def run_transaction(
    store: ContentStore,
    path: str,
    apply: Callable[[Any], Optional[Any]],
    default: Callable[[], Any],
    message: str = "",
    max_attempts: int = METADATA_WRITE_ATTEMPTS,
    backoff_seconds: float = METADATA_BACKOFF_SECONDS,
) -> VersionedDocument:
    """
    Read ``path``, compute its new content and write it back conditionally.

    ``apply`` receives a private copy of the current content (``default()``
    when the object does not exist) and returns the new content, or None when
    nothing needs to be written. It is called again on every retry, so it must
    derive its result from the content it is given. Exceptions raised by
    ``apply`` propagate unchanged.

    Args:
        store: Backing content store
        path: Object path
        apply: Pure function from current content to new content
        default: Factory for the content of a missing object
        message: Commit message for the write
        max_attempts: Total write attempts before giving up
        backoff_seconds: Linear backoff unit (sleep ``backoff_seconds * attempt``)

    Returns:
        The document as written (or as read, if ``apply`` returned None)

    Raises:
        MetadataConflictError: If every attempt hit a version conflict
    """
    for attempt in range(1, max_attempts + 1):
        current = await store.read(path)
        if current is None or current.data is None:
            data = default()
            sha = current.sha if current is not None else None
        else:
            data = current.data
            sha = current.sha

        new_data = apply(copy.deepcopy(data))
        if new_data is None:
            return current if current is not None else VersionedDocument(path=path, data=data, sha="")

        try:
            return await store.write(path, new_data, sha, message)
        except VersionConflictError as e:
            if attempt >= max_attempts:
                logger.error(f"Giving up on {path} after {max_attempts} conflicting writes")
                raise MetadataConflictError(
                    f"Concurrent updates to {path} did not settle after {max_attempts} attempts"
                ) from e
            delay = backoff_seconds * attempt
            logger.warning(
                f"Version conflict on {path} (attempt {attempt}/{max_attempts}), retrying in {delay:.1f}s"
            )
            await asyncio.sleep(delay)

    raise MetadataConflictError(f"No write attempts made for {path}")
