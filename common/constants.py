"""Project-wide constants (chunking thresholds, catalog limits, timeouts)."""

MIB: int = 1024 * 1024

CHUNK_THRESHOLD_BYTES: int = 50 * MIB  # files at or above this go through chunked upload
CHUNK_SIZE_BYTES: int = 5 * MIB
MAX_CLIENT_FILE_SIZE_BYTES: int = 500 * MIB

SESSION_TTL_SECONDS: int = 3600
SESSION_SWEEP_INTERVAL_SECONDS: int = 600

SHARD_MAX_RECORDS: int = 8000
SHARD_MAX_CHARS: int = 2_500_000

METADATA_WRITE_ATTEMPTS: int = 3
METADATA_BACKOFF_SECONDS: float = 0.5

BLOB_UPLOAD_TIMEOUT_SECONDS: float = 180.0
GITHUB_API_TIMEOUT_SECONDS: float = 30.0

INDEX_PATH: str = "github.index.json"
SHARD_PATH_TEMPLATE: str = "github.{number}.json"
VIEWS_PATH: str = "github.views.json"

VIEW_ID_LENGTH: int = 6
VIEW_ID_ATTEMPTS: int = 12
