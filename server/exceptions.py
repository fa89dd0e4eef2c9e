"""Custom exception classes for the upload server."""

from typing import List, Optional


class ShelfException(Exception):
    """
    Base exception class for all AssetShelf errors.
    """
    pass


class ConfigurationError(ShelfException):
    """
    Raised when required server settings (token, owner, repo) are missing.
    """
    pass


class SessionNotFoundError(ShelfException):
    """
    Raised when a chunk session does not exist (never created, finalized or expired).
    """
    pass


class InvalidChunkError(ShelfException):
    """
    Raised when a chunk's index or declared chunk count is inconsistent.
    """
    pass


class IncompleteUploadError(ShelfException):
    """
    Raised when finalize is requested while chunk slots are still empty.
    """

    def __init__(self, upload_id: str, missing: List[int]):
        self.upload_id = upload_id
        self.missing = list(missing)
        super().__init__(
            f"Upload {upload_id} is missing chunks: {', '.join(str(i) for i in self.missing)}"
        )


class BlobUploadFailedError(ShelfException):
    """
    Raised when the blob store rejects an upload, times out or is unreachable.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class VersionConflictError(ShelfException):
    """
    Raised by a content store when a conditional write carries a stale version token.
    """
    pass


class MetadataConflictError(ShelfException):
    """
    Raised when a catalog write keeps conflicting after the retry budget is spent.
    """
    pass


class MetadataStoreError(ShelfException):
    """
    Raised when the catalog backend fails for reasons other than a version conflict.
    """
    pass


class ShardCapacityExceeded(ShelfException):
    """
    Raised inside a shard transaction when the shard is full; triggers rotation.
    """

    def __init__(self, shard_number: int):
        self.shard_number = shard_number
        super().__init__(f"Shard {shard_number} is full")


class RecordNotFoundError(ShelfException):
    """
    Raised when no file record, view or group matches a lookup.
    """
    pass


class RecordExistsError(ShelfException):
    """
    Raised when a caller-supplied file id is already in the catalog.
    """
    pass


class GroupExistsError(ShelfException):
    """
    Raised when a caller-supplied group id is already taken.
    """
    pass


class PasswordRequiredError(ShelfException):
    """
    Raised when protected content is requested without a password hash.
    """
    pass


class InvalidPasswordError(ShelfException):
    """
    Raised when the supplied password hash does not match.
    """
    pass


class DownloadNotAllowedError(ShelfException):
    """
    Raised when the download proxy is asked for a host outside the allow-list.
    """
    pass


class InvalidPayloadError(ShelfException):
    """
    Raised when a request body cannot be decoded (e.g. malformed base64).
    """
    pass
